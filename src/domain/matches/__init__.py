"""Match state tracking and lifecycle orchestration."""

from domain.matches.lifecycle import DEFAULT_MAX_CONCURRENT_MATCHES, MatchLifecycle, PlayerDelta
from domain.matches.phases import ClientPhase, EngineState, to_client_phase
from domain.matches.reconciler import (
    DEFAULT_POLL_INTERVAL,
    MATCH_STATE_EVENT,
    MatchStateReconciler,
    match_room,
)

__all__ = [
    "ClientPhase",
    "DEFAULT_MAX_CONCURRENT_MATCHES",
    "DEFAULT_POLL_INTERVAL",
    "EngineState",
    "MATCH_STATE_EVENT",
    "MatchLifecycle",
    "MatchStateReconciler",
    "PlayerDelta",
    "match_room",
    "to_client_phase",
]
