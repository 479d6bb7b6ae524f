"""player_rating_changes table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class PlayerRatingChange(Base):
    """Historical rating events (one row per player per settled match)."""

    __tablename__ = "player_rating_changes"
    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_player_rating_changes_match_player"),
        CheckConstraint("actual_score IN (0.0, 0.5, 1.0)", name="ck_player_rating_changes_actual_score"),
        CheckConstraint(
            "expected_score >= 0.0 AND expected_score <= 1.0",
            name="ck_player_rating_changes_expected_score",
        ),
        Index("idx_player_rating_changes_player", "player_id", "created_at"),
        Index("idx_player_rating_changes_match", "match_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[str] = mapped_column(ForeignKey("matches.id"), nullable=False)
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    team_id: Mapped[str] = mapped_column(String(8), nullable=False)
    actual_score: Mapped[float] = mapped_column(Float, nullable=False)
    expected_score: Mapped[float] = mapped_column(Float, nullable=False)
    pre_mmr: Mapped[float] = mapped_column(Float, nullable=False)
    mmr_delta: Mapped[float] = mapped_column(Float, nullable=False)
    post_mmr: Mapped[float] = mapped_column(Float, nullable=False)
    old_rank: Mapped[str] = mapped_column(String(64), nullable=False)
    new_rank: Mapped[str] = mapped_column(String(64), nullable=False)
    old_rp: Mapped[int] = mapped_column(Integer, nullable=False)
    new_rp: Mapped[int] = mapped_column(Integer, nullable=False)
    promoted: Mapped[bool] = mapped_column(Boolean, nullable=False)
    demoted: Mapped[bool] = mapped_column(Boolean, nullable=False)
    losses_since_promotion: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
