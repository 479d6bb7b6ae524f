"""Schema bootstrap for the arena tables."""

from __future__ import annotations

from sqlalchemy.engine import Engine

from models import Base, Match, Player, PlayerRatingChange

_TABLES = (Player.__table__, Match.__table__, PlayerRatingChange.__table__)


def ensure_schema(engine: Engine) -> None:
    """Create players, matches, and rating change tables and indexes if missing."""
    with engine.begin() as connection:
        Base.metadata.create_all(bind=connection, tables=list(_TABLES), checkfirst=True)
