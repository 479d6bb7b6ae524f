"""In-memory per-match scoring state."""

from __future__ import annotations

from dataclasses import dataclass, field

from domain.common import TEAM_A, TEAM_B, Difficulty, ServiceStatus


def service_owner(service_id: str) -> str | None:
    """Owning team from a ``<owner>_<matchId>_<slot>`` service id."""
    if service_id.startswith(f"{TEAM_A}_"):
        return TEAM_A
    if service_id.startswith(f"{TEAM_B}_"):
        return TEAM_B
    return None


@dataclass
class ServiceHealthState:
    service_id: str
    last_status: ServiceStatus | None = None
    consecutive_up: int = 0
    consecutive_down: int = 0
    uptime_ticks: int = 0
    downtime_ticks: int = 0

    def observe(self, status: ServiceStatus) -> None:
        if status == ServiceStatus.UP:
            self.consecutive_up += 1
            self.consecutive_down = 0
            self.last_status = ServiceStatus.UP
        else:
            self.consecutive_down += 1
            self.consecutive_up = 0
            self.last_status = ServiceStatus.DOWN

    def count_tick(self, status: ServiceStatus) -> None:
        if status == ServiceStatus.UP:
            self.uptime_ticks += 1
        else:
            self.downtime_ticks += 1


@dataclass
class MatchScoringState:
    match_id: str
    difficulty: Difficulty
    team_a: tuple[str, ...] = ()
    team_b: tuple[str, ...] = ()
    scores: dict[str, int] = field(default_factory=lambda: {TEAM_A: 0, TEAM_B: 0})
    tick: int = 0
    services: dict[str, ServiceHealthState] = field(default_factory=dict)
    # (service_id, tick) -> capturing team
    flag_captures: dict[tuple[str, int], str] = field(default_factory=dict)

    def service(self, service_id: str) -> ServiceHealthState:
        state = self.services.get(service_id)
        if state is None:
            state = ServiceHealthState(service_id=service_id)
            self.services[service_id] = state
        return state

    def add_score(self, team_id: str, delta: int) -> None:
        if team_id not in self.scores:
            return
        self.scores[team_id] += delta

    def flags_for(self, team_id: str) -> int:
        return sum(1 for captured_by in self.flag_captures.values() if captured_by == team_id)

    def ticks_for(self, team_id: str) -> tuple[int, int]:
        uptime = 0
        downtime = 0
        for service in self.services.values():
            if service_owner(service.service_id) == team_id:
                uptime += service.uptime_ticks
                downtime += service.downtime_ticks
        return uptime, downtime


class MatchStateStore:
    """Registry of live match scoring state, one instance per process."""

    def __init__(self) -> None:
        self._matches: dict[str, MatchScoringState] = {}

    def create(
        self,
        match_id: str,
        *,
        difficulty: Difficulty,
        team_a: tuple[str, ...] = (),
        team_b: tuple[str, ...] = (),
    ) -> MatchScoringState:
        state = MatchScoringState(
            match_id=match_id,
            difficulty=difficulty,
            team_a=tuple(team_a),
            team_b=tuple(team_b),
        )
        self._matches[match_id] = state
        return state

    def get(self, match_id: str) -> MatchScoringState | None:
        return self._matches.get(match_id)

    def delete(self, match_id: str) -> MatchScoringState | None:
        return self._matches.pop(match_id, None)

    def __contains__(self, match_id: object) -> bool:
        return match_id in self._matches

    def __len__(self) -> int:
        return len(self._matches)


__all__ = [
    "MatchScoringState",
    "MatchStateStore",
    "ServiceHealthState",
    "service_owner",
]
