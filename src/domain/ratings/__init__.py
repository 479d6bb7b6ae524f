"""MMR, rank, and RP rating modules."""

from domain.ratings.calculator import (
    MatchOutcome,
    PlayerRating,
    RankUpdate,
    RatingEngine,
    RatingParameters,
    TeamContext,
    calculate_expected_score,
)
from domain.ratings.config import (
    RatingSystemConfig,
    get_rating_system_config,
    load_rating_system_configs,
)
from domain.ratings.processor import MatchRatingProcessor, PlayerRatingEvent
from domain.ratings.ranks import DEFAULT_RANKS, RP_MAX, RP_MIN, RankTier

__all__ = [
    "DEFAULT_RANKS",
    "MatchOutcome",
    "MatchRatingProcessor",
    "PlayerRating",
    "PlayerRatingEvent",
    "RP_MAX",
    "RP_MIN",
    "RankTier",
    "RankUpdate",
    "RatingEngine",
    "RatingParameters",
    "RatingSystemConfig",
    "TeamContext",
    "calculate_expected_score",
    "get_rating_system_config",
    "load_rating_system_configs",
]
