"""In-process stores for tests and single-node runs without a database."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import replace

from domain.common import MatchRecord, MatchStatus
from domain.errors import MatchAlreadyProcessedError, MatchNotFoundError
from domain.locks import KeyedLock
from domain.protocol import ComputeEventsFn
from domain.ratings.calculator import PlayerRating
from domain.ratings.processor import PlayerRatingEvent
from repositories.matches import ACTIVE_STATUSES


class InMemoryRatingStore:
    def __init__(self, ratings: Iterable[PlayerRating] = ()) -> None:
        self._ratings = {rating.player_id: rating for rating in ratings}
        self._events: dict[str, list[PlayerRatingEvent]] = {}
        self._match_locks = KeyedLock()
        self._player_locks = KeyedLock()

    def load_ratings(self, player_ids: Iterable[str]) -> dict[str, PlayerRating]:
        return {
            player_id: self._ratings[player_id]
            for player_id in set(player_ids)
            if player_id in self._ratings
        }

    def events_for_match(self, match_id: str) -> list[PlayerRatingEvent]:
        return list(self._events.get(match_id, ()))

    def apply_match(
        self,
        match_id: str,
        player_ids: Iterable[str],
        compute: ComputeEventsFn,
    ) -> list[PlayerRatingEvent]:
        ids = set(player_ids)
        with self._match_locks.hold(match_id), self._player_locks.hold_many(ids):
            if match_id in self._events:
                raise MatchAlreadyProcessedError(match_id)
            events = list(compute(self.load_ratings(ids)))
            for event in events:
                self._ratings[event.player_id] = event.as_rating()
            self._events[match_id] = events
            return list(events)


class InMemoryMatchStore:
    def __init__(self, matches: Iterable[MatchRecord] = ()) -> None:
        self._lock = threading.Lock()
        self._matches = {match.match_id: match for match in matches}

    def add_match(self, record: MatchRecord) -> MatchRecord:
        with self._lock:
            self._matches[record.match_id] = record
        return record

    def get_match(self, match_id: str) -> MatchRecord | None:
        return self._matches.get(match_id)

    def _update(self, match_id: str, **changes: object) -> None:
        with self._lock:
            match = self._matches.get(match_id)
            if match is None:
                raise MatchNotFoundError(match_id)
            self._matches[match_id] = replace(match, **changes)

    def update_status(self, match_id: str, status: MatchStatus) -> None:
        self._update(match_id, status=status)

    def set_invalid(self, match_id: str, invalid: bool = True) -> None:
        self._update(match_id, invalid=invalid)

    def count_active(self) -> int:
        with self._lock:
            return sum(1 for match in self._matches.values() if match.status in ACTIVE_STATUSES)


__all__ = ["InMemoryMatchStore", "InMemoryRatingStore"]
