"""Capability contracts for the collaborators around the match core."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from domain.common import EngineStatus, MatchRecord, MatchResult, MatchStatus
from domain.ratings.calculator import PlayerRating
from domain.ratings.processor import PlayerRatingEvent

ComputeEventsFn = Callable[[Mapping[str, PlayerRating]], Sequence[PlayerRatingEvent]]


@runtime_checkable
class MatchStore(Protocol):
    def get_match(self, match_id: str) -> MatchRecord | None: ...

    def update_status(self, match_id: str, status: MatchStatus) -> None: ...

    def set_invalid(self, match_id: str, invalid: bool = True) -> None: ...

    def count_active(self) -> int: ...


@runtime_checkable
class RatingStore(Protocol):
    def load_ratings(self, player_ids: Iterable[str]) -> dict[str, PlayerRating]: ...

    def events_for_match(self, match_id: str) -> list[PlayerRatingEvent]: ...

    def apply_match(
        self,
        match_id: str,
        player_ids: Iterable[str],
        compute: ComputeEventsFn,
    ) -> list[PlayerRatingEvent]:
        """Lock the players' ratings, compute events, and persist them atomically."""
        ...


@runtime_checkable
class EngineClient(Protocol):
    async def start_match(
        self,
        match_id: str,
        difficulty: str,
        team_size: int,
        team_a: Sequence[str],
        team_b: Sequence[str],
    ) -> Any: ...

    async def stop_match(self, match_id: str) -> Any: ...

    async def get_match_status(self, match_id: str) -> EngineStatus | None: ...

    async def get_match_result(self, match_id: str) -> MatchResult | None: ...


@runtime_checkable
class Broadcaster(Protocol):
    async def emit(self, room: str, event: str, payload: dict[str, Any]) -> None: ...


__all__ = [
    "Broadcaster",
    "ComputeEventsFn",
    "EngineClient",
    "MatchStore",
    "RatingStore",
]
