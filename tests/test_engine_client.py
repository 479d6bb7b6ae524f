"""Tests for the execution-engine HTTP client."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from clients.broadcast import LoggingBroadcaster
from clients.engine import HttpEngineClient, parse_match_result
from domain.common import DRAW, TEAM_B
from domain.errors import EngineNotFoundError, EngineTimeoutError, EngineUnavailableError

RESULT_PAYLOAD = {
    "matchId": "m7",
    "difficulty": "hard",
    "teamA": {
        "players": ["a1", "a2"],
        "score": 40,
        "stats": {"flagsCaptured": 1, "uptimeTicks": 30, "downtimeTicks": 9},
    },
    "teamB": {
        "players": ["b1", "b2"],
        "score": 95,
        "stats": {"flagsCaptured": 3, "uptimeTicks": 36, "downtimeTicks": 2},
    },
    "winner": "teamB",
}


def _client(handler) -> HttpEngineClient:
    return HttpEngineClient("http://engine.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_start_match_posts_roster() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"matchId": "m7", "status": "CREATED"})

    async with _client(handler) as client:
        body = await client.start_match("m7", "hard", 2, ["a1", "a2"], ["b1", "b2"])

    assert body == {"matchId": "m7", "status": "CREATED"}
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/engine/match/start"
    assert json.loads(seen[0].content) == {
        "matchId": "m7",
        "difficulty": "hard",
        "teamSize": 2,
        "teamA": ["a1", "a2"],
        "teamB": ["b1", "b2"],
    }


@pytest.mark.asyncio
async def test_status_and_result_are_parsed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/engine/match/m7/status":
            return httpx.Response(200, json={"matchId": "m7", "state": "ENDED"})
        if request.url.path == "/engine/match/m7/result":
            return httpx.Response(200, json=RESULT_PAYLOAD)
        return httpx.Response(404)

    async with _client(handler) as client:
        status = await client.get_match_status("m7")
        result = await client.get_match_result("m7")

    assert status is not None and status.state == "ENDED"
    assert result is not None
    assert result.winner == TEAM_B
    assert result.team_b.players == ("b1", "b2")
    assert result.team_b.stats.flags_captured == pytest.approx(3.0)
    assert result.team_a.stats.downtime_ticks == pytest.approx(9.0)


@pytest.mark.asyncio
async def test_not_found_raises_engine_not_found() -> None:
    async with _client(lambda request: httpx.Response(404, json={"error": "unknown match"})) as client:
        with pytest.raises(EngineNotFoundError) as excinfo:
            await client.get_match_status("missing")
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_server_error_raises_unavailable() -> None:
    async with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(EngineUnavailableError) as excinfo:
            await client.stop_match("m7")
    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
async def test_transport_failures_are_translated() -> None:
    def timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(timeout) as client:
        with pytest.raises(EngineTimeoutError):
            await client.get_match_status("m7")
    async with _client(refused) as client:
        with pytest.raises(EngineUnavailableError):
            await client.get_match_status("m7")


@pytest.mark.asyncio
async def test_health_returns_none_when_engine_is_down() -> None:
    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(refused) as client:
        assert await client.health() is None
    async with _client(lambda request: httpx.Response(200, json={"status": "ok"})) as client:
        assert await client.health() == {"status": "ok"}


def test_parse_match_result_tolerates_missing_fields() -> None:
    result = parse_match_result({"teamA": {"players": ["a1"]}, "winner": "nobody"}, match_id="m9")

    assert result.match_id == "m9"
    assert result.difficulty == "easy"
    assert result.winner == DRAW
    assert result.team_a.players == ("a1",)
    assert result.team_b.players == ()
    assert result.team_a.stats.flags_captured == pytest.approx(0.0)


@pytest.mark.asyncio
async def test_logging_broadcaster_writes_room_messages(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="clients.broadcast")

    await LoggingBroadcaster().emit("match:m7", "match_state", {"matchId": "m7", "state": "running"})

    assert 'match:m7 match_state {"matchId": "m7", "state": "running"}' in caplog.text
