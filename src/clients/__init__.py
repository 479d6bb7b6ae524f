"""Clients for collaborators outside the match core."""

from clients.broadcast import LoggingBroadcaster
from clients.engine import HttpEngineClient, parse_match_result

__all__ = ["HttpEngineClient", "LoggingBroadcaster", "parse_match_result"]
