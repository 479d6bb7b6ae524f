"""Poll-and-diff bridge from the execution engine to match subscribers."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from domain.errors import EngineError
from domain.matches.phases import ClientPhase, to_client_phase
from domain.protocol import Broadcaster, EngineClient

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0
MATCH_STATE_EVENT = "match_state"

PhaseListener = Callable[[str, ClientPhase], Awaitable[None]]


def match_room(match_id: str) -> str:
    return f"match:{match_id}"


@dataclass
class _Tracker:
    generation: int
    last_phase: ClientPhase | None = None
    task: asyncio.Task[None] | None = None


class MatchStateReconciler:
    """One cancellable polling task per tracked match.

    Broadcasts happen only when the mapped phase changes. Every tracker carries
    a generation number that is re-checked right before each broadcast, so once
    ``stop_tracking`` returns no further message for that match goes out.
    """

    def __init__(
        self,
        engine: EngineClient,
        broadcaster: Broadcaster,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be greater than 0")
        self.engine = engine
        self.broadcaster = broadcaster
        self.poll_interval = poll_interval
        self._trackers: dict[str, _Tracker] = {}
        self._generations = itertools.count(1)
        self._listeners: list[PhaseListener] = []

    def add_listener(self, listener: PhaseListener) -> None:
        """Register a coroutine called after every broadcast phase change."""
        self._listeners.append(listener)

    def is_tracking(self, match_id: str) -> bool:
        return match_id in self._trackers

    def tracked_matches(self) -> list[str]:
        return sorted(self._trackers)

    def last_phase(self, match_id: str) -> ClientPhase | None:
        tracker = self._trackers.get(match_id)
        return None if tracker is None else tracker.last_phase

    async def start_tracking(
        self,
        match_id: str,
        initial_phase: ClientPhase | str | None = None,
    ) -> bool:
        """Begin polling a match; returns False when it is already tracked."""
        if match_id in self._trackers:
            return False

        phase = None if initial_phase is None else ClientPhase(initial_phase)
        tracker = _Tracker(generation=next(self._generations), last_phase=phase)
        self._trackers[match_id] = tracker
        logger.info("Started match state tracking for %s (interval=%.1fs)", match_id, self.poll_interval)

        if phase is not None:
            await self._broadcast(match_id, tracker.generation, phase)

        if self._is_current(match_id, tracker.generation):
            tracker.task = asyncio.create_task(
                self._run(match_id, tracker.generation),
                name=f"match-state:{match_id}",
            )
        return True

    def stop_tracking(self, match_id: str) -> None:
        tracker = self._trackers.pop(match_id, None)
        if tracker is None:
            return
        if tracker.task is not None and tracker.task is not asyncio.current_task():
            tracker.task.cancel()
        logger.info("Stopped match state tracking for %s", match_id)

    async def aclose(self) -> None:
        """Stop every tracker and wait for the polling tasks to unwind."""
        tasks = [tracker.task for tracker in self._trackers.values() if tracker.task is not None]
        for match_id in list(self._trackers):
            self.stop_tracking(match_id)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def poll(self, match_id: str) -> ClientPhase | None:
        """Run one poll cycle; returns the phase broadcast, if any."""
        tracker = self._trackers.get(match_id)
        if tracker is None:
            return None
        generation = tracker.generation

        try:
            status = await self.engine.get_match_status(match_id)
        except EngineError as exc:
            logger.warning("Failed to poll match engine status for %s: %s", match_id, exc)
            return None
        except Exception:
            logger.exception("Unexpected error polling match engine status for %s", match_id)
            return None

        phase = to_client_phase(None if status is None else status.state)
        if phase is None or not self._is_current(match_id, generation):
            return None
        if phase == tracker.last_phase:
            return None

        previous_phase = tracker.last_phase
        tracker.last_phase = phase
        if not await self._broadcast(match_id, generation, phase):
            if self._is_current(match_id, generation):
                tracker.last_phase = previous_phase
            return None

        if phase is ClientPhase.ENDED and self._is_current(match_id, generation):
            self.stop_tracking(match_id)

        await self._notify_listeners(match_id, phase)
        return phase

    def _is_current(self, match_id: str, generation: int) -> bool:
        tracker = self._trackers.get(match_id)
        return tracker is not None and tracker.generation == generation

    async def _run(self, match_id: str, generation: int) -> None:
        while self._is_current(match_id, generation):
            await asyncio.sleep(self.poll_interval)
            if not self._is_current(match_id, generation):
                break
            await self.poll(match_id)

    async def _broadcast(self, match_id: str, generation: int, phase: ClientPhase) -> bool:
        # No await between this check and handing the message to the broadcaster.
        if not self._is_current(match_id, generation):
            return False
        try:
            await self.broadcaster.emit(
                match_room(match_id),
                MATCH_STATE_EVENT,
                {"matchId": match_id, "state": phase.value},
            )
        except Exception:
            logger.exception("Failed to broadcast %s state for match %s", phase.value, match_id)
            return False
        return True

    async def _notify_listeners(self, match_id: str, phase: ClientPhase) -> None:
        for listener in self._listeners:
            try:
                await listener(match_id, phase)
            except Exception:
                logger.exception("Phase listener failed for match %s (%s)", match_id, phase.value)


__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "MATCH_STATE_EVENT",
    "MatchStateReconciler",
    "PhaseListener",
    "match_room",
]
