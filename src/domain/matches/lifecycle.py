"""Match start and match-end orchestration across the engine, stores, and ratings."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from domain.common import MatchRecord, MatchStatus
from domain.errors import (
    CapacityExceededError,
    InvalidMatchError,
    InvalidTransitionError,
    MatchAlreadyProcessedError,
    MatchNotEndedError,
    MatchNotFoundError,
    MatchResultUnavailableError,
)
from domain.matches.phases import ClientPhase, EngineState
from domain.matches.reconciler import MatchStateReconciler
from domain.protocol import EngineClient, MatchStore, RatingStore
from domain.ratings.processor import MatchRatingProcessor, PlayerRatingEvent
from domain.scoring.model import ScoringModel

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT_MATCHES = 50


@dataclass(frozen=True)
class PlayerDelta:
    mmr_delta: float
    old_rank: str
    new_rank: str
    rp_delta: int

    @classmethod
    def from_event(cls, event: PlayerRatingEvent) -> PlayerDelta:
        return cls(
            mmr_delta=event.mmr_delta,
            old_rank=event.old_rank,
            new_rank=event.new_rank,
            rp_delta=event.rp_delta,
        )


class MatchLifecycle:
    """Starts matches on the engine and settles ratings once they end.

    Match and rating stores are synchronous, so every store call made from a
    coroutine runs in a worker thread and leaves the event loop free for the
    other matches' pollers.
    """

    def __init__(
        self,
        *,
        matches: MatchStore,
        ratings: RatingStore,
        engine: EngineClient,
        reconciler: MatchStateReconciler,
        processor: MatchRatingProcessor | None = None,
        scoring: ScoringModel | None = None,
        max_concurrent_matches: int = DEFAULT_MAX_CONCURRENT_MATCHES,
        settle_on_end: bool = True,
    ) -> None:
        self.matches = matches
        self.ratings = ratings
        self.engine = engine
        self.reconciler = reconciler
        self.processor = processor or MatchRatingProcessor()
        self.scoring = scoring
        self.max_concurrent_matches = max_concurrent_matches
        if settle_on_end:
            reconciler.add_listener(self._on_phase_change)

    def _require_match(self, match_id: str) -> MatchRecord:
        match = self.matches.get_match(match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        return match

    def _advance(self, match: MatchRecord, target: MatchStatus) -> None:
        if match.status == target:
            return
        if not match.status.can_advance_to(target):
            raise InvalidTransitionError(match.match_id, match.status.value, target.value)
        self.matches.update_status(match.match_id, target)

    def _mark_running(self, match_id: str) -> MatchRecord | None:
        match = self.matches.get_match(match_id)
        if match is not None and match.status.can_advance_to(MatchStatus.RUNNING):
            self.matches.update_status(match_id, MatchStatus.RUNNING)
        return match

    def _finish(self, match_id: str) -> None:
        self._advance(self._require_match(match_id), MatchStatus.ENDED)
        if self.scoring is not None:
            self.scoring.remove_match(match_id)

    async def start_match(self, match_id: str) -> MatchRecord:
        """Hand a pending match to the engine and begin tracking its state."""
        match = await asyncio.to_thread(self._require_match, match_id)
        if match.invalid:
            raise InvalidMatchError(f"Match {match_id} is marked invalid")
        if match.status != MatchStatus.PENDING:
            raise InvalidTransitionError(match_id, match.status.value, MatchStatus.STARTING.value)
        if len(match.team_a) != len(match.team_b):
            raise InvalidMatchError(
                f"Match {match_id} has unequal teams ({len(match.team_a)} vs {len(match.team_b)})"
            )
        if match.team_size != len(match.team_a):
            raise InvalidMatchError(
                f"Match {match_id} team_size={match.team_size} does not match roster size {len(match.team_a)}"
            )
        overlap = set(match.team_a) & set(match.team_b)
        if overlap:
            raise InvalidMatchError(f"Match {match_id} has players on both teams: {sorted(overlap)}")

        active = await asyncio.to_thread(self.matches.count_active)
        if active >= self.max_concurrent_matches:
            logger.warning(
                "Rejected match %s: max concurrent matches (%d) reached",
                match_id,
                self.max_concurrent_matches,
            )
            raise CapacityExceededError(
                f"Max concurrent matches ({self.max_concurrent_matches}) reached"
            )

        await self.engine.start_match(
            match_id,
            match.difficulty,
            match.team_size,
            list(match.team_a),
            list(match.team_b),
        )
        await asyncio.to_thread(self._advance, match, MatchStatus.STARTING)
        await self.reconciler.start_tracking(match_id, ClientPhase.INITIALIZING)
        logger.info("Match %s accepted by engine (difficulty=%s)", match_id, match.difficulty)
        return await asyncio.to_thread(self._require_match, match_id)

    def mark_invalid(self, match_id: str) -> None:
        """Administrative marker; invalid matches never change ratings."""
        self._require_match(match_id)
        self.matches.set_invalid(match_id, True)
        logger.info("Match %s marked invalid", match_id)

    async def process_match_end(self, match_id: str) -> dict[str, PlayerDelta]:
        """Settle MMR, rank, and RP for every participant of an ended match."""
        match = await asyncio.to_thread(self._require_match, match_id)

        existing = await asyncio.to_thread(self.ratings.events_for_match, match_id)
        if existing:
            return {event.player_id: PlayerDelta.from_event(event) for event in existing}

        status = await self.engine.get_match_status(match_id)
        state = None if status is None else status.state
        if state != EngineState.ENDED.value:
            raise MatchNotEndedError(match_id, state)

        result = await self.engine.get_match_result(match_id)
        if result is None:
            raise MatchResultUnavailableError(match_id)

        if match.invalid:
            logger.info("Skipping rating update for invalid match %s", match_id)
            await asyncio.to_thread(self._finish, match_id)
            return {}

        player_ids = result.team_a.players + result.team_b.players
        try:
            events = await asyncio.to_thread(
                self.ratings.apply_match,
                match_id,
                player_ids,
                lambda ratings: self.processor.process_match(result, ratings),
            )
        except MatchAlreadyProcessedError:
            events = await asyncio.to_thread(self.ratings.events_for_match, match_id)

        await asyncio.to_thread(self._finish, match_id)
        logger.info(
            "Processed match end for %s: winner=%s players=%d",
            match_id,
            result.winner,
            len(events),
        )
        return {event.player_id: PlayerDelta.from_event(event) for event in events}

    async def _on_phase_change(self, match_id: str, phase: ClientPhase) -> None:
        if phase is ClientPhase.RUNNING:
            match = await asyncio.to_thread(self._mark_running, match_id)
            if match is not None and self.scoring is not None:
                self.scoring.register_match(match_id, match.difficulty, match.team_a, match.team_b)
        elif phase is ClientPhase.ENDED:
            try:
                await self.process_match_end(match_id)
            except MatchNotEndedError as exc:
                # ENDING also maps to ended; the result is settled on the next match-end request.
                logger.info("Deferring rating settlement for %s: %s", match_id, exc)


__all__ = ["DEFAULT_MAX_CONCURRENT_MATCHES", "MatchLifecycle", "PlayerDelta"]
