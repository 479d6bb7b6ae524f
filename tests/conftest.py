"""Shared fakes for engine, broadcaster, and store-backed tests."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import pytest

from domain.common import EngineStatus, MatchRecord, MatchResult


class FakeEngine:
    """Scripted engine: ``states`` may hold a state string or an exception to raise."""

    def __init__(self) -> None:
        self.states: dict[str, Any] = {}
        self.results: dict[str, MatchResult] = {}
        self.started: list[dict[str, Any]] = []
        self.stopped: list[str] = []
        self.status_calls = 0
        self.gate: asyncio.Event | None = None

    async def start_match(
        self,
        match_id: str,
        difficulty: str,
        team_size: int,
        team_a: Sequence[str],
        team_b: Sequence[str],
    ) -> dict[str, Any]:
        self.started.append(
            {
                "match_id": match_id,
                "difficulty": difficulty,
                "team_size": team_size,
                "team_a": list(team_a),
                "team_b": list(team_b),
            }
        )
        self.states.setdefault(match_id, "CREATED")
        return {"matchId": match_id}

    async def stop_match(self, match_id: str) -> None:
        self.stopped.append(match_id)

    async def get_match_status(self, match_id: str) -> EngineStatus | None:
        self.status_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        state = self.states.get(match_id)
        if isinstance(state, Exception):
            raise state
        return EngineStatus(match_id=match_id, state=state)

    async def get_match_result(self, match_id: str) -> MatchResult | None:
        return self.results.get(match_id)


class RecordingBroadcaster:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str, dict[str, Any]]] = []
        self.fail_next = 0

    async def emit(self, room: str, event: str, payload: dict[str, Any]) -> None:
        if self.fail_next:
            self.fail_next -= 1
            raise ConnectionError("socket closed")
        self.messages.append((room, event, dict(payload)))

    def states_for(self, match_id: str) -> list[str]:
        return [payload["state"] for _, _, payload in self.messages if payload["matchId"] == match_id]


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


def make_match(match_id: str = "m1", **overrides: Any) -> MatchRecord:
    values: dict[str, Any] = {
        "match_id": match_id,
        "difficulty": "medium",
        "team_size": 2,
        "team_a": ("a1", "a2"),
        "team_b": ("b1", "b2"),
    }
    values.update(overrides)
    return MatchRecord(**values)
