"""Logging setup for the command-line entry points."""

from __future__ import annotations

import logging


def setup_logging(program: str, verbose: bool = False) -> None:
    """Sets up the root logger to write to stderr.

    Args:
      program: Name prefixed to every record.
      verbose: If true, log DEBUG messages instead of INFO.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(program + ": %(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )
    root = logging.getLogger("")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
