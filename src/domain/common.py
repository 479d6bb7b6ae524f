"""Shared types for match scoring, state tracking, and rating."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

TEAM_A = "teamA"
TEAM_B = "teamB"
TEAM_IDS = (TEAM_A, TEAM_B)
DRAW = "draw"


class Difficulty(str, Enum):
    """Match difficulty tiers, lowest first."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    INSANE = "insane"

    @classmethod
    def parse(cls, value: object, default: Difficulty | None = None) -> Difficulty | None:
        """Normalise a raw difficulty value, accepting the admin-facing labels."""
        if isinstance(value, Difficulty):
            return value
        if value is None:
            return default
        raw = str(value).strip().lower()
        if raw in ADMIN_DIFFICULTY_LABELS:
            return ADMIN_DIFFICULTY_LABELS[raw]
        try:
            return cls(raw)
        except ValueError:
            return default


ADMIN_DIFFICULTY_LABELS = {
    "beginner": Difficulty.EASY,
    "advanced": Difficulty.MEDIUM,
    "expert": Difficulty.HARD,
}


class MatchStatus(str, Enum):
    """Persisted match lifecycle status; transitions only move forward."""

    PENDING = "pending"
    STARTING = "starting"
    RUNNING = "running"
    ENDED = "ended"

    @property
    def order(self) -> int:
        return _STATUS_ORDER.index(self)

    def can_advance_to(self, target: MatchStatus) -> bool:
        return target.order > self.order


_STATUS_ORDER = (
    MatchStatus.PENDING,
    MatchStatus.STARTING,
    MatchStatus.RUNNING,
    MatchStatus.ENDED,
)


class ServiceStatus(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


@dataclass(frozen=True)
class HealthResult:
    """One service health-check outcome within a tick."""

    service_id: str
    status: ServiceStatus
    response_time_ms: int = 0


@dataclass(frozen=True)
class MatchScore:
    """Running team totals; either side may be negative."""

    team_a: int = 0
    team_b: int = 0


@dataclass(frozen=True)
class ContributionStats:
    """Flag and uptime contribution used by the performance modifier."""

    flags_captured: float = 0.0
    uptime_ticks: float = 0.0
    downtime_ticks: float = 0.0

    def split(self, team_size: int) -> ContributionStats:
        """Even per-player share of a team's totals."""
        size = max(1, team_size)
        return ContributionStats(
            flags_captured=self.flags_captured / size,
            uptime_ticks=self.uptime_ticks / size,
            downtime_ticks=self.downtime_ticks / size,
        )


@dataclass(frozen=True)
class TeamResult:
    """Final per-team payload of a finished match."""

    players: tuple[str, ...]
    score: int
    stats: ContributionStats


@dataclass(frozen=True)
class MatchResult:
    """Canonical finished-match payload consumed by rating processing."""

    match_id: str
    difficulty: str
    team_a: TeamResult
    team_b: TeamResult
    winner: str

    def outcome_for(self, team_id: str) -> float:
        """Actual score for one side: 1 for a win, 0.5 for a draw, 0 for a loss."""
        if self.winner == team_id:
            return 1.0
        if self.winner in TEAM_IDS:
            return 0.0
        return 0.5


@dataclass(frozen=True)
class EngineStatus:
    """Execution-engine view of a match."""

    match_id: str
    state: str | None


@dataclass(frozen=True)
class MatchRecord:
    """Persisted match definition as read from the match store."""

    match_id: str
    difficulty: str
    team_size: int
    team_a: tuple[str, ...]
    team_b: tuple[str, ...]
    status: MatchStatus = MatchStatus.PENDING
    invalid: bool = False
    created_at: datetime | None = None

    @property
    def players(self) -> tuple[str, ...]:
        return self.team_a + self.team_b


__all__ = [
    "ADMIN_DIFFICULTY_LABELS",
    "ContributionStats",
    "DRAW",
    "Difficulty",
    "EngineStatus",
    "HealthResult",
    "MatchRecord",
    "MatchResult",
    "MatchScore",
    "MatchStatus",
    "ServiceStatus",
    "TEAM_A",
    "TEAM_B",
    "TEAM_IDS",
    "TeamResult",
]
