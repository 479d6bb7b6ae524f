"""In-match scoring modules."""

from domain.scoring.model import ScoringModel
from domain.scoring.points import DOWNTIME_PENALTY, FLAG_POINTS, UPTIME_POINTS, scoring_difficulty
from domain.scoring.state import MatchScoringState, MatchStateStore, ServiceHealthState, service_owner

__all__ = [
    "DOWNTIME_PENALTY",
    "FLAG_POINTS",
    "MatchScoringState",
    "MatchStateStore",
    "ScoringModel",
    "ServiceHealthState",
    "UPTIME_POINTS",
    "scoring_difficulty",
    "service_owner",
]
