"""Persistence for player ratings and their per-match change events."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from domain.errors import MatchAlreadyProcessedError
from domain.protocol import ComputeEventsFn
from domain.ratings.calculator import PlayerRating
from domain.ratings.processor import PlayerRatingEvent
from models import Player, PlayerRatingChange

_EVENT_FIELDS = (
    "match_id",
    "player_id",
    "team_id",
    "actual_score",
    "expected_score",
    "pre_mmr",
    "mmr_delta",
    "post_mmr",
    "old_rank",
    "new_rank",
    "old_rp",
    "new_rp",
    "promoted",
    "demoted",
    "losses_since_promotion",
)


def _player_to_rating(player: Player) -> PlayerRating:
    return PlayerRating(
        player_id=player.id,
        mmr=float(player.mmr),
        rank=player.rank,
        rp=int(player.rp),
        losses_since_promotion=int(player.losses_since_promotion),
    )


def _event_to_row(event: PlayerRatingEvent) -> dict[str, object]:
    return {field: getattr(event, field) for field in _EVENT_FIELDS}


def _row_to_event(row: PlayerRatingChange) -> PlayerRatingEvent:
    return PlayerRatingEvent(**{field: getattr(row, field) for field in _EVENT_FIELDS})


class SqlRatingStore:
    """Rating store backed by the players and player_rating_changes tables.

    ``apply_match`` locks the participants' rows (SELECT ... FOR UPDATE on
    Postgres) for the whole read-compute-write sequence, so two matches
    sharing a player are applied one after the other.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def load_ratings(self, player_ids: Iterable[str]) -> dict[str, PlayerRating]:
        ids = sorted(set(player_ids))
        if not ids:
            return {}
        with self.session_factory() as session:
            players = session.scalars(select(Player).where(Player.id.in_(ids))).all()
            return {player.id: _player_to_rating(player) for player in players}

    def events_for_match(self, match_id: str) -> list[PlayerRatingEvent]:
        with self.session_factory() as session:
            rows = session.scalars(
                select(PlayerRatingChange)
                .where(PlayerRatingChange.match_id == match_id)
                .order_by(PlayerRatingChange.id)
            ).all()
            return [_row_to_event(row) for row in rows]

    def history_for_player(self, player_id: str, *, limit: int = 20) -> list[PlayerRatingEvent]:
        """Most recent rating events for one player, newest first."""
        with self.session_factory() as session:
            rows = session.scalars(
                select(PlayerRatingChange)
                .where(PlayerRatingChange.player_id == player_id)
                .order_by(PlayerRatingChange.id.desc())
                .limit(limit)
            ).all()
            return [_row_to_event(row) for row in rows]

    def apply_match(
        self,
        match_id: str,
        player_ids: Iterable[str],
        compute: ComputeEventsFn,
    ) -> list[PlayerRatingEvent]:
        ids = sorted(set(player_ids))
        try:
            with self.session_factory() as session, session.begin():
                players = {
                    player.id: player
                    for player in session.scalars(
                        select(Player).where(Player.id.in_(ids)).order_by(Player.id).with_for_update()
                    ).all()
                }
                already = session.scalar(
                    select(PlayerRatingChange.id).where(PlayerRatingChange.match_id == match_id).limit(1)
                )
                if already is not None:
                    raise MatchAlreadyProcessedError(match_id)

                ratings = {player_id: _player_to_rating(player) for player_id, player in players.items()}
                events = list(compute(ratings))

                self._write_players(session, players, events)
                self._insert_events(session, events)
        except IntegrityError as exc:
            # Another writer settled the same match between our check and insert.
            if self.events_for_match(match_id):
                raise MatchAlreadyProcessedError(match_id) from exc
            raise
        return events

    def _write_players(
        self,
        session: Session,
        players: dict[str, Player],
        events: Sequence[PlayerRatingEvent],
    ) -> None:
        for event in events:
            player = players.get(event.player_id)
            if player is None:
                player = Player(id=event.player_id)
                session.add(player)
                players[event.player_id] = player
            player.mmr = event.post_mmr
            player.rank = event.new_rank
            player.rp = event.new_rp
            player.losses_since_promotion = event.losses_since_promotion
        session.flush()

    def _insert_events(self, session: Session, events: Sequence[PlayerRatingEvent]) -> None:
        if not events:
            return
        session.execute(insert(PlayerRatingChange), [_event_to_row(event) for event in events])


__all__ = ["SqlRatingStore"]
