"""Tick-based attack/defense scoring for running matches."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from domain.common import (
    DRAW,
    TEAM_A,
    TEAM_B,
    TEAM_IDS,
    ContributionStats,
    HealthResult,
    MatchResult,
    MatchScore,
    ServiceStatus,
    TeamResult,
)
from domain.locks import KeyedLock
from domain.scoring.points import DOWNTIME_PENALTY, FLAG_POINTS, UPTIME_POINTS, scoring_difficulty
from domain.scoring.state import MatchStateStore, ServiceHealthState, service_owner

logger = logging.getLogger(__name__)


class ScoringModel:
    """Single source of truth for in-match scores.

    All mutations of one match run under that match's lock, so ticks and flag
    captures are applied in arrival order; different matches never contend.
    """

    def __init__(self, store: MatchStateStore | None = None) -> None:
        self.store = store or MatchStateStore()
        self._locks = KeyedLock()

    def register_match(
        self,
        match_id: str,
        difficulty: object,
        team_a: Iterable[str] = (),
        team_b: Iterable[str] = (),
    ) -> None:
        """Create (or reset) the scoring state for a match entering RUNNING."""
        with self._locks.hold(match_id):
            self.store.create(
                match_id,
                difficulty=scoring_difficulty(difficulty),
                team_a=tuple(team_a),
                team_b=tuple(team_b),
            )

    def remove_match(self, match_id: str) -> None:
        """Drop a finished match's scoring state; later ticks for it are ignored."""
        with self._locks.hold_existing(match_id) as registered:
            if not registered:
                return
            self.store.delete(match_id)
            self._locks.discard(match_id)

    def record_tick(self, match_id: str, health_results: Iterable[HealthResult]) -> None:
        """Apply one tick of health-check results to service state and scores."""
        with self._locks.hold_existing(match_id) as registered:
            match = self.store.get(match_id) if registered else None
            if match is None:
                logger.warning("Cannot record tick for unknown match %s", match_id)
                return

            results = list(health_results)
            uptime_points = UPTIME_POINTS[match.difficulty]
            downtime_penalty = DOWNTIME_PENALTY[match.difficulty]

            for result in results:
                match.service(result.service_id).observe(result.status)

            for result in results:
                match.service(result.service_id).count_tick(result.status)
                owner = service_owner(result.service_id)
                if owner is None:
                    continue
                if result.status == ServiceStatus.UP:
                    match.add_score(owner, uptime_points)
                else:
                    match.add_score(owner, -downtime_penalty)

            match.tick += 1

    def on_flag_captured(self, match_id: str, team_id: str, service_id: str, tick: int) -> None:
        """Award flag points to the capturing team for an already validated capture."""
        if team_id not in TEAM_IDS:
            logger.debug("Ignoring flag capture by unknown team %r in match %s", team_id, match_id)
            return

        with self._locks.hold_existing(match_id) as registered:
            match = self.store.get(match_id) if registered else None
            if match is None:
                logger.warning("Cannot score flag capture for unknown match %s", match_id)
                return
            match.flag_captures[(service_id, tick)] = team_id
            match.add_score(team_id, FLAG_POINTS[match.difficulty])

    def get_scores(self, match_id: str) -> MatchScore | None:
        with self._locks.hold_existing(match_id) as registered:
            match = self.store.get(match_id) if registered else None
            if match is None:
                return None
            return MatchScore(team_a=match.scores[TEAM_A], team_b=match.scores[TEAM_B])

    def current_tick(self, match_id: str) -> int:
        with self._locks.hold_existing(match_id) as registered:
            match = self.store.get(match_id) if registered else None
            return 0 if match is None else match.tick

    def service_health(self, match_id: str) -> dict[str, ServiceHealthState] | None:
        """Snapshot of per-service health; None for unknown matches."""
        with self._locks.hold_existing(match_id) as registered:
            match = self.store.get(match_id) if registered else None
            if match is None:
                return None
            return {service_id: replace(state) for service_id, state in match.services.items()}

    def build_result(self, match_id: str) -> MatchResult | None:
        """Freeze the final per-team statistics; the higher score wins, ties draw."""
        with self._locks.hold_existing(match_id) as registered:
            match = self.store.get(match_id) if registered else None
            if match is None:
                return None

            teams: dict[str, TeamResult] = {}
            for team_id, players in ((TEAM_A, match.team_a), (TEAM_B, match.team_b)):
                uptime, downtime = match.ticks_for(team_id)
                teams[team_id] = TeamResult(
                    players=players,
                    score=match.scores[team_id],
                    stats=ContributionStats(
                        flags_captured=match.flags_for(team_id),
                        uptime_ticks=uptime,
                        downtime_ticks=downtime,
                    ),
                )

            score_a = match.scores[TEAM_A]
            score_b = match.scores[TEAM_B]
            if score_a > score_b:
                winner = TEAM_A
            elif score_b > score_a:
                winner = TEAM_B
            else:
                winner = DRAW

            return MatchResult(
                match_id=match_id,
                difficulty=match.difficulty.value,
                team_a=teams[TEAM_A],
                team_b=teams[TEAM_B],
                winner=winner,
            )


__all__ = ["ScoringModel"]
