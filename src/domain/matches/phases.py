"""Client-facing simplification of execution-engine match states."""

from __future__ import annotations

from enum import Enum


class ClientPhase(str, Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    ENDED = "ended"


class EngineState(str, Enum):
    CREATED = "CREATED"
    INITIALIZING = "INITIALIZING"
    RUNNING = "RUNNING"
    ENDING = "ENDING"
    ENDED = "ENDED"


_PHASE_BY_ENGINE_STATE = {
    EngineState.CREATED.value: ClientPhase.INITIALIZING,
    EngineState.INITIALIZING.value: ClientPhase.INITIALIZING,
    EngineState.RUNNING.value: ClientPhase.RUNNING,
    EngineState.ENDING.value: ClientPhase.ENDED,
    EngineState.ENDED.value: ClientPhase.ENDED,
}


def to_client_phase(engine_state: str | None) -> ClientPhase | None:
    """Map an engine state to a client phase; unknown states carry no signal."""
    if engine_state is None:
        return None
    return _PHASE_BY_ENGINE_STATE.get(engine_state)


__all__ = ["ClientPhase", "EngineState", "to_client_phase"]
