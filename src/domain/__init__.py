"""Match lifecycle, scoring, and rating domain modules."""

from domain.common import (
    ContributionStats,
    Difficulty,
    HealthResult,
    MatchRecord,
    MatchResult,
    MatchScore,
    MatchStatus,
    ServiceStatus,
    TeamResult,
)

__all__ = [
    "ContributionStats",
    "Difficulty",
    "HealthResult",
    "MatchRecord",
    "MatchResult",
    "MatchScore",
    "MatchStatus",
    "ServiceStatus",
    "TeamResult",
]
