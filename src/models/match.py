"""matches table model."""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, JSONType
from models.mixins import TimestampMixin


class Match(TimestampMixin, Base):
    """One competitive session and its rosters."""

    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint("team_size > 0", name="ck_matches_team_size"),
        Index("idx_matches_status", "status"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    difficulty: Mapped[str] = mapped_column(String(32), nullable=False)
    team_size: Mapped[int] = mapped_column(Integer, nullable=False)
    team_a: Mapped[list[str]] = mapped_column(JSONType, nullable=False)
    team_b: Mapped[list[str]] = mapped_column(JSONType, nullable=False)
    status: Mapped[str] = mapped_column(
        Enum(
            "pending",
            "starting",
            "running",
            "ended",
            name="match_status",
            native_enum=False,
        ),
        nullable=False,
        default="pending",
    )
    invalid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
