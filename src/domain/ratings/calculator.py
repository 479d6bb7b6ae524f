"""Player MMR, rank, and RP logic."""

from __future__ import annotations

from dataclasses import dataclass, field
from math import floor

from domain.common import ContributionStats, Difficulty
from domain.ratings.ranks import DEFAULT_RANKS, RP_MAX, RP_MIN, RankTier, rank_for_mmr, validate_ranks


@dataclass(frozen=True)
class RatingParameters:
    initial_mmr: float = 1000.0
    k_factor: float = 30.0
    scale_factor: float = 400.0
    easy_multiplier: float = 0.6
    medium_multiplier: float = 1.0
    hard_multiplier: float = 1.35
    insane_multiplier: float = 1.7
    flag_share_weight: float = 0.2
    uptime_share_weight: float = 0.15
    downtime_share_weight: float = 0.1
    min_performance: float = 0.8
    max_performance: float = 1.2
    rank_protection_losses: int = 3
    rp_win_gain: int = 15
    rp_loss: int = 15
    rp_streak_loss: int = 30
    rp_protected_loss: int = 25
    ranks: tuple[RankTier, ...] = field(default=DEFAULT_RANKS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "ranks", validate_ranks(self.ranks))


@dataclass(frozen=True)
class PlayerRating:
    """Persisted rating state for one player; rank None means derive it from MMR."""

    player_id: str
    mmr: float = 1000.0
    rank: str | None = None
    rp: int = 0
    losses_since_promotion: int = 0


@dataclass(frozen=True)
class TeamContext:
    """One side of a match as seen by the delta calculation."""

    players: tuple[str, ...]
    mmr: float
    stats: ContributionStats = ContributionStats()


@dataclass(frozen=True)
class MatchOutcome:
    result: float
    difficulty: str | None = None


@dataclass(frozen=True)
class RankUpdate:
    rank: str
    rp: int
    promoted: bool
    demoted: bool
    losses_since_promotion: int


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def round_half_up(value: float, digits: int = 1) -> float:
    scale = 10**digits
    return floor(value * scale + 0.5) / scale


def clamp_rp(rp: float) -> int:
    return int(max(RP_MIN, min(RP_MAX, rp)))


class RatingEngine:
    """Stateless MMR delta and rank progression calculator."""

    def __init__(self, params: RatingParameters | None = None) -> None:
        self.params = params or RatingParameters()
        self._rank_index = {tier.name: index for index, tier in enumerate(self.params.ranks)}

    @property
    def lowest_rank(self) -> str:
        return self.params.ranks[0].name

    def difficulty_multiplier(self, difficulty: object) -> float:
        parsed = Difficulty.parse(difficulty)
        if parsed is Difficulty.EASY:
            return self.params.easy_multiplier
        if parsed is Difficulty.MEDIUM:
            return self.params.medium_multiplier
        if parsed is Difficulty.HARD:
            return self.params.hard_multiplier
        if parsed is Difficulty.INSANE:
            return self.params.insane_multiplier
        return 1.0

    def performance_modifier(
        self,
        player_stats: ContributionStats,
        team_stats: ContributionStats,
    ) -> float:
        factor = 1.0

        team_flags = max(1.0, team_stats.flags_captured or 0.0)
        player_flags = max(0.0, player_stats.flags_captured or 0.0)
        factor += ((player_flags / team_flags) - 0.5) * self.params.flag_share_weight

        team_uptime = max(1.0, team_stats.uptime_ticks or 0.0)
        player_uptime = max(0.0, player_stats.uptime_ticks or 0.0)
        factor += ((player_uptime / team_uptime) - 0.5) * self.params.uptime_share_weight

        team_downtime = team_stats.downtime_ticks or 0.0
        player_downtime = player_stats.downtime_ticks or 0.0
        if team_downtime > 0 and player_downtime > 0:
            factor -= (player_downtime / team_downtime) * self.params.downtime_share_weight

        return max(self.params.min_performance, min(factor, self.params.max_performance))

    def calculate_mmr_delta(
        self,
        player: PlayerRating,
        team: TeamContext,
        enemy_team: TeamContext,
        match_data: MatchOutcome,
        player_stats: ContributionStats,
    ) -> float:
        """Signed MMR change for one player, rounded to one decimal place."""
        expected = calculate_expected_score(
            rating=team.mmr,
            opponent_rating=enemy_team.mmr,
            scale_factor=self.params.scale_factor,
        )
        delta = (
            self.params.k_factor
            * self.difficulty_multiplier(match_data.difficulty)
            * self.performance_modifier(player_stats, team.stats)
            * (match_data.result - expected)
        )
        return round_half_up(delta)

    def get_rank_from_mmr(self, mmr: float | None) -> str:
        value = self.params.initial_mmr if mmr is None else mmr
        return rank_for_mmr(self.params.ranks, value).name

    def current_rank(self, player: PlayerRating) -> str:
        if player.rank in self._rank_index:
            return player.rank
        return self.get_rank_from_mmr(player.mmr)

    def update_rank_and_rp(self, player: PlayerRating, new_mmr: float, won: bool) -> RankUpdate:
        """Apply promotion, demotion, and rank protection for one finished match.

        A tier drop on a won match demotes immediately; a tier drop on a lost
        match is held back until ``rank_protection_losses`` consecutive losses.
        """
        params = self.params
        old_rank = self.current_rank(player)
        new_rank = self.get_rank_from_mmr(new_mmr)
        old_index = self._rank_index[old_rank]
        new_index = self._rank_index[new_rank]

        rp = clamp_rp(player.rp)
        losses = max(0, player.losses_since_promotion)
        promoted = False
        demoted = False
        final_rank = new_rank

        if new_index > old_index:
            promoted = True
            rp = RP_MIN
            losses = 0
        elif new_index < old_index:
            if won:
                demoted = True
                rp = RP_MAX
                losses = 0
            else:
                losses += 1
                if losses >= params.rank_protection_losses:
                    demoted = True
                    rp = RP_MAX
                    losses = 0
                else:
                    final_rank = old_rank
                    rp = max(RP_MIN, rp - params.rp_protected_loss)
        elif won:
            rp = min(RP_MAX, rp + params.rp_win_gain)
        else:
            losses += 1
            if losses >= params.rank_protection_losses:
                rp = max(RP_MIN, rp - params.rp_streak_loss)
            else:
                rp = max(RP_MIN, rp - params.rp_loss)

        return RankUpdate(
            rank=final_rank,
            rp=clamp_rp(rp),
            promoted=promoted,
            demoted=demoted,
            losses_since_promotion=losses,
        )


__all__ = [
    "MatchOutcome",
    "PlayerRating",
    "RankUpdate",
    "RatingEngine",
    "RatingParameters",
    "TeamContext",
    "calculate_expected_score",
    "clamp_rp",
    "round_half_up",
]
