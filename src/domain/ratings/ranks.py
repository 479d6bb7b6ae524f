"""Visible rank tiers derived from hidden MMR."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class RankTier:
    name: str
    min_mmr: float


DEFAULT_RANKS: tuple[RankTier, ...] = (
    RankTier("Script Kiddie", 0.0),
    RankTier("Initiate", 800.0),
    RankTier("Packet Sniffer", 1000.0),
    RankTier("Exploit Crafter", 1200.0),
    RankTier("Red Operator", 1400.0),
    RankTier("Blue Sentinel", 1600.0),
    RankTier("APT Unit", 1800.0),
    RankTier("Zero-Day", 2100.0),
)

RP_MIN = 0
RP_MAX = 100


def rank_for_mmr(ranks: Sequence[RankTier], mmr: float) -> RankTier:
    """Pick the tier with the greatest minimum <= mmr (ranks sorted ascending)."""
    chosen = ranks[0]
    for tier in ranks:
        if mmr >= tier.min_mmr:
            chosen = tier
    return chosen


def validate_ranks(ranks: Sequence[RankTier]) -> tuple[RankTier, ...]:
    """Return ranks sorted by minimum MMR, rejecting empty or ambiguous tables."""
    if not ranks:
        raise ValueError("rank table must contain at least one tier")
    names = [tier.name for tier in ranks]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate rank names in rank table: {names}")
    return tuple(sorted(ranks, key=lambda tier: tier.min_mmr))


__all__ = ["DEFAULT_RANKS", "RP_MAX", "RP_MIN", "RankTier", "rank_for_mmr", "validate_ranks"]
