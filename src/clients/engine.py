"""HTTP client for the match execution engine."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from domain.common import DRAW, TEAM_IDS, ContributionStats, EngineStatus, MatchResult, TeamResult
from domain.errors import EngineError, EngineNotFoundError, EngineTimeoutError, EngineUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:7000"
REQUEST_TIMEOUT = 5.0


class HttpEngineClient:
    """Thin async wrapper around the engine's JSON API.

    Timeouts raise EngineTimeoutError, connection failures and server errors
    raise EngineUnavailableError, and 404 raises EngineNotFoundError.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            transport=transport,
        )

    async def __aenter__(self) -> HttpEngineClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed engine httpx client")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
    ) -> Any:
        kwargs: dict[str, Any] = {}
        if json is not None:
            kwargs["json"] = json

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise EngineTimeoutError(f"Match engine request timed out: {method} {path}") from exc
        except httpx.HTTPError as exc:
            raise EngineUnavailableError(f"Match engine is unavailable: {exc}") from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            raise EngineNotFoundError(
                f"Match engine has no resource at {path}",
                status_code=response.status_code,
            )
        if response.is_error:
            raise EngineUnavailableError(
                f"Match engine responded with {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("Match engine returned non-JSON body for %s %s", method, path)
            return None

    @staticmethod
    def _match_path(match_id: str, action: str) -> str:
        return f"/engine/match/{quote(match_id, safe='')}/{action}"

    async def start_match(
        self,
        match_id: str,
        difficulty: str,
        team_size: int,
        team_a: Sequence[str],
        team_b: Sequence[str],
    ) -> Any:
        return await self._request(
            "POST",
            "/engine/match/start",
            json={
                "matchId": match_id,
                "difficulty": difficulty,
                "teamSize": team_size,
                "teamA": list(team_a),
                "teamB": list(team_b),
            },
        )

    async def stop_match(self, match_id: str) -> Any:
        return await self._request("POST", self._match_path(match_id, "stop"))

    async def get_match_status(self, match_id: str) -> EngineStatus | None:
        payload = await self._request("GET", self._match_path(match_id, "status"))
        if not isinstance(payload, dict):
            return None
        state = payload.get("state")
        return EngineStatus(match_id=match_id, state=None if state is None else str(state))

    async def get_match_result(self, match_id: str) -> MatchResult | None:
        payload = await self._request("GET", self._match_path(match_id, "result"))
        if not isinstance(payload, dict):
            return None
        return parse_match_result(payload, match_id=match_id)

    async def health(self) -> dict[str, Any] | None:
        """Engine health summary, or None when unreachable."""
        try:
            payload = await self._request("GET", "/health")
        except EngineError as exc:
            logger.info("Match engine health check failed: %s", exc)
            return None
        return payload if isinstance(payload, dict) else None


def _parse_team(raw: Any) -> TeamResult:
    team = raw if isinstance(raw, dict) else {}
    stats = team.get("stats") if isinstance(team.get("stats"), dict) else {}
    players = team.get("players") if isinstance(team.get("players"), list) else []
    return TeamResult(
        players=tuple(str(player) for player in players),
        score=int(team.get("score") or 0),
        stats=ContributionStats(
            flags_captured=float(stats.get("flagsCaptured") or 0),
            uptime_ticks=float(stats.get("uptimeTicks") or 0),
            downtime_ticks=float(stats.get("downtimeTicks") or 0),
        ),
    )


def parse_match_result(payload: dict[str, Any], *, match_id: str | None = None) -> MatchResult:
    """Build a MatchResult from the engine's result JSON."""
    winner = payload.get("winner")
    return MatchResult(
        match_id=str(payload.get("matchId") or match_id or ""),
        difficulty=str(payload.get("difficulty") or "easy"),
        team_a=_parse_team(payload.get("teamA")),
        team_b=_parse_team(payload.get("teamB")),
        winner=winner if winner in TEAM_IDS else DRAW,
    )


__all__ = ["HttpEngineClient", "parse_match_result"]
