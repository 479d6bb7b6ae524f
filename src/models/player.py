"""players table model."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import TimestampMixin


class Player(TimestampMixin, Base):
    """Current MMR, visible rank, and RP of one registered player."""

    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint("rp >= 0 AND rp <= 100", name="ck_players_rp_bounds"),
        CheckConstraint("losses_since_promotion >= 0", name="ck_players_losses"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    mmr: Mapped[float] = mapped_column(Float, nullable=False, default=1000.0)
    rank: Mapped[str | None] = mapped_column(String(64), nullable=True)
    rp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses_since_promotion: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
