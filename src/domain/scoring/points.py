"""Fixed per-difficulty point tables for attack/defense scoring."""

from __future__ import annotations

from domain.common import Difficulty

# One flag per service per tick, awarded to the capturing team only.
FLAG_POINTS: dict[Difficulty, int] = {
    Difficulty.EASY: 10,
    Difficulty.MEDIUM: 15,
    Difficulty.HARD: 25,
    Difficulty.INSANE: 40,
}

# Per service per tick that passes its health check.
UPTIME_POINTS: dict[Difficulty, int] = {
    Difficulty.EASY: 1,
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 3,
    Difficulty.INSANE: 4,
}

# Positive magnitudes, subtracted from the owner per service per failed tick.
# A downed service never credits the attacker.
DOWNTIME_PENALTY: dict[Difficulty, int] = {
    Difficulty.EASY: 1,
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 4,
    Difficulty.INSANE: 6,
}


def scoring_difficulty(value: object) -> Difficulty:
    """Difficulty used for point lookups; unknown values score as the lowest tier."""
    return Difficulty.parse(value, default=Difficulty.EASY) or Difficulty.EASY


__all__ = ["DOWNTIME_PENALTY", "FLAG_POINTS", "UPTIME_POINTS", "scoring_difficulty"]
