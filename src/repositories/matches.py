"""Persistence for match definitions and lifecycle status."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from domain.common import MatchRecord, MatchStatus
from domain.errors import MatchNotFoundError
from models import Match

ACTIVE_STATUSES = (MatchStatus.STARTING, MatchStatus.RUNNING)


def _to_record(match: Match) -> MatchRecord:
    return MatchRecord(
        match_id=match.id,
        difficulty=match.difficulty,
        team_size=int(match.team_size),
        team_a=tuple(match.team_a),
        team_b=tuple(match.team_b),
        status=MatchStatus(match.status),
        invalid=bool(match.invalid),
        created_at=match.created_at,
    )


class SqlMatchStore:
    """Match store backed by the matches table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def add_match(self, record: MatchRecord) -> MatchRecord:
        with self.session_factory() as session, session.begin():
            match = Match(
                id=record.match_id,
                difficulty=record.difficulty,
                team_size=record.team_size,
                team_a=list(record.team_a),
                team_b=list(record.team_b),
                status=record.status.value,
                invalid=record.invalid,
            )
            session.add(match)
            session.flush()
            session.refresh(match)
            return _to_record(match)

    def get_match(self, match_id: str) -> MatchRecord | None:
        with self.session_factory() as session:
            match = session.get(Match, match_id)
            return None if match is None else _to_record(match)

    def update_status(self, match_id: str, status: MatchStatus) -> None:
        with self.session_factory() as session, session.begin():
            match = session.get(Match, match_id)
            if match is None:
                raise MatchNotFoundError(match_id)
            match.status = status.value

    def set_invalid(self, match_id: str, invalid: bool = True) -> None:
        with self.session_factory() as session, session.begin():
            match = session.get(Match, match_id)
            if match is None:
                raise MatchNotFoundError(match_id)
            match.invalid = invalid

    def count_active(self) -> int:
        with self.session_factory() as session:
            result = session.scalar(
                select(func.count(Match.id)).where(
                    Match.status.in_([status.value for status in ACTIVE_STATUSES])
                )
            )
            return int(result or 0)


__all__ = ["ACTIVE_STATUSES", "SqlMatchStore"]
