"""Broadcaster used when no real-time transport is attached."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class LoggingBroadcaster:
    """Writes every room message to the log instead of pushing it to clients."""

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    async def emit(self, room: str, event: str, payload: dict[str, Any]) -> None:
        logger.log(self.level, "%s %s %s", room, event, json.dumps(payload, sort_keys=True))
