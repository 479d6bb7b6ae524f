"""Error taxonomy for match lifecycle and rating operations."""

from __future__ import annotations


class ArenaError(Exception):
    """Base class for all recoverable arena errors."""


class MatchNotFoundError(ArenaError):
    def __init__(self, match_id: str) -> None:
        super().__init__(f"Match not found: {match_id}")
        self.match_id = match_id


class InvalidMatchError(ArenaError):
    """Match definition cannot be accepted (bad teams, flagged invalid)."""


class CapacityExceededError(ArenaError):
    """Too many concurrently active matches."""


class MatchStateError(ArenaError):
    """Operation requested in a lifecycle state that does not allow it."""


class MatchNotEndedError(MatchStateError):
    def __init__(self, match_id: str, state: str | None) -> None:
        super().__init__(f"Match {match_id} is not ended (engine state={state})")
        self.match_id = match_id
        self.state = state


class InvalidTransitionError(MatchStateError):
    def __init__(self, match_id: str, current: str, target: str) -> None:
        super().__init__(f"Match {match_id} cannot move from {current} to {target}")
        self.match_id = match_id
        self.current = current
        self.target = target


class MatchAlreadyProcessedError(MatchStateError):
    def __init__(self, match_id: str) -> None:
        super().__init__(f"Ratings for match {match_id} were already processed")
        self.match_id = match_id


class MatchResultUnavailableError(ArenaError):
    def __init__(self, match_id: str) -> None:
        super().__init__(f"Match result not available: {match_id}")
        self.match_id = match_id


class EngineError(ArenaError):
    """Failure talking to the match execution engine."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EngineUnavailableError(EngineError):
    pass


class EngineTimeoutError(EngineError):
    pass


class EngineNotFoundError(EngineError):
    """The engine answered but does not know the requested match."""


__all__ = [
    "ArenaError",
    "CapacityExceededError",
    "EngineError",
    "EngineNotFoundError",
    "EngineTimeoutError",
    "EngineUnavailableError",
    "InvalidMatchError",
    "InvalidTransitionError",
    "MatchAlreadyProcessedError",
    "MatchNotEndedError",
    "MatchNotFoundError",
    "MatchResultUnavailableError",
    "MatchStateError",
]
