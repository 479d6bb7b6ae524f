"""Turn one finished match into per-player rating events."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from statistics import fmean

from domain.common import TEAM_A, TEAM_B, MatchResult, TeamResult
from domain.ratings.calculator import (
    MatchOutcome,
    PlayerRating,
    RatingEngine,
    TeamContext,
    calculate_expected_score,
    round_half_up,
)


@dataclass(frozen=True)
class PlayerRatingEvent:
    player_id: str
    match_id: str
    team_id: str
    actual_score: float
    expected_score: float
    pre_mmr: float
    mmr_delta: float
    post_mmr: float
    old_rank: str
    new_rank: str
    old_rp: int
    new_rp: int
    promoted: bool
    demoted: bool
    losses_since_promotion: int

    @property
    def won(self) -> bool:
        return self.actual_score == 1.0

    @property
    def rp_delta(self) -> int:
        return self.new_rp - self.old_rp

    def as_rating(self) -> PlayerRating:
        return PlayerRating(
            player_id=self.player_id,
            mmr=self.post_mmr,
            rank=self.new_rank,
            rp=self.new_rp,
            losses_since_promotion=self.losses_since_promotion,
        )


class MatchRatingProcessor:
    """Applies the rating engine to every participant of a finished match."""

    def __init__(self, engine: RatingEngine | None = None) -> None:
        self.engine = engine or RatingEngine()

    def default_rating(self, player_id: str) -> PlayerRating:
        return PlayerRating(player_id=player_id, mmr=self.engine.params.initial_mmr)

    def _team_context(self, team: TeamResult, ratings: Mapping[str, PlayerRating]) -> TeamContext:
        mmrs = [
            ratings[player_id].mmr if player_id in ratings else self.engine.params.initial_mmr
            for player_id in team.players
        ]
        return TeamContext(
            players=team.players,
            mmr=fmean(mmrs) if mmrs else 0.0,
            stats=team.stats,
        )

    def process_match(
        self,
        result: MatchResult,
        ratings: Mapping[str, PlayerRating],
    ) -> list[PlayerRatingEvent]:
        team_a = self._team_context(result.team_a, ratings)
        team_b = self._team_context(result.team_b, ratings)

        events: list[PlayerRatingEvent] = []
        for team_id, team_result, team, enemy in (
            (TEAM_A, result.team_a, team_a, team_b),
            (TEAM_B, result.team_b, team_b, team_a),
        ):
            outcome = MatchOutcome(result=result.outcome_for(team_id), difficulty=result.difficulty)
            player_stats = team_result.stats.split(len(team_result.players))
            expected = calculate_expected_score(
                rating=team.mmr,
                opponent_rating=enemy.mmr,
                scale_factor=self.engine.params.scale_factor,
            )

            for player_id in team_result.players:
                player = ratings.get(player_id) or self.default_rating(player_id)
                delta = self.engine.calculate_mmr_delta(player, team, enemy, outcome, player_stats)
                post_mmr = round_half_up(player.mmr + delta)
                update = self.engine.update_rank_and_rp(player, post_mmr, won=outcome.result == 1.0)

                events.append(
                    PlayerRatingEvent(
                        player_id=player_id,
                        match_id=result.match_id,
                        team_id=team_id,
                        actual_score=outcome.result,
                        expected_score=expected,
                        pre_mmr=player.mmr,
                        mmr_delta=delta,
                        post_mmr=post_mmr,
                        old_rank=self.engine.current_rank(player),
                        new_rank=update.rank,
                        old_rp=player.rp,
                        new_rp=update.rp,
                        promoted=update.promoted,
                        demoted=update.demoted,
                        losses_since_promotion=update.losses_since_promotion,
                    )
                )

        return events


__all__ = ["MatchRatingProcessor", "PlayerRatingEvent"]
