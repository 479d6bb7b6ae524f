"""Tests for the SQLAlchemy-backed match and rating stores."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import Session, sessionmaker

from conftest import make_match
from db import create_db_engine, create_session_factory
from domain.common import TEAM_A, TEAM_B, ContributionStats, MatchResult, MatchStatus, TeamResult
from domain.errors import MatchAlreadyProcessedError, MatchNotFoundError
from domain.ratings import MatchRatingProcessor, PlayerRating
from repositories import InMemoryRatingStore, SqlMatchStore, SqlRatingStore, ensure_schema


@pytest.fixture
def session_factory() -> sessionmaker[Session]:
    engine = create_db_engine("sqlite:///:memory:")
    ensure_schema(engine)
    return create_session_factory(engine)


def _result(match_id: str, *, winner: str = TEAM_A) -> MatchResult:
    return MatchResult(
        match_id=match_id,
        difficulty="hard",
        team_a=TeamResult(players=("a1", "a2"), score=60, stats=ContributionStats(2, 20, 4)),
        team_b=TeamResult(players=("b1", "b2"), score=30, stats=ContributionStats(1, 14, 10)),
        winner=winner,
    )


def _apply(store: SqlRatingStore | InMemoryRatingStore, result: MatchResult) -> list:
    processor = MatchRatingProcessor()
    return store.apply_match(
        result.match_id,
        result.team_a.players + result.team_b.players,
        lambda ratings: processor.process_match(result, ratings),
    )


def test_match_store_round_trip(session_factory: sessionmaker[Session]) -> None:
    store = SqlMatchStore(session_factory)

    stored = store.add_match(make_match("m1"))

    assert stored.team_a == ("a1", "a2")
    assert stored.status is MatchStatus.PENDING
    assert stored.created_at is not None
    assert store.get_match("missing") is None

    store.update_status("m1", MatchStatus.RUNNING)
    store.set_invalid("m1")
    reloaded = store.get_match("m1")
    assert reloaded.status is MatchStatus.RUNNING
    assert reloaded.invalid is True


def test_match_store_counts_starting_and_running(session_factory: sessionmaker[Session]) -> None:
    store = SqlMatchStore(session_factory)
    store.add_match(make_match("pending"))
    store.add_match(make_match("starting", status=MatchStatus.STARTING))
    store.add_match(make_match("running", status=MatchStatus.RUNNING))
    store.add_match(make_match("ended", status=MatchStatus.ENDED))

    assert store.count_active() == 2
    with pytest.raises(MatchNotFoundError):
        store.update_status("ghost", MatchStatus.ENDED)


def test_rating_store_applies_and_persists_events(session_factory: sessionmaker[Session]) -> None:
    SqlMatchStore(session_factory).add_match(make_match("m1"))
    store = SqlRatingStore(session_factory)

    events = _apply(store, _result("m1"))

    assert len(events) == 4
    ratings = store.load_ratings(["a1", "b1", "nobody"])
    assert set(ratings) == {"a1", "b1"}
    assert ratings["a1"].mmr == pytest.approx(events[0].post_mmr)
    assert ratings["a1"].rank == events[0].new_rank
    assert store.events_for_match("m1") == events
    assert store.history_for_player("b1") == [events[2]]


def test_rating_store_rejects_second_application(session_factory: sessionmaker[Session]) -> None:
    SqlMatchStore(session_factory).add_match(make_match("m1"))
    store = SqlRatingStore(session_factory)
    _apply(store, _result("m1"))
    before = store.load_ratings(["a1", "a2", "b1", "b2"])

    with pytest.raises(MatchAlreadyProcessedError):
        _apply(store, _result("m1", winner=TEAM_B))

    assert store.load_ratings(["a1", "a2", "b1", "b2"]) == before
    assert len(store.events_for_match("m1")) == 4


def test_rating_store_chains_consecutive_matches(session_factory: sessionmaker[Session]) -> None:
    matches = SqlMatchStore(session_factory)
    matches.add_match(make_match("m1"))
    matches.add_match(make_match("m2"))
    store = SqlRatingStore(session_factory)

    first = {event.player_id: event for event in _apply(store, _result("m1"))}
    second = {event.player_id: event for event in _apply(store, _result("m2"))}

    for player_id in ("a1", "b2"):
        assert second[player_id].pre_mmr == pytest.approx(first[player_id].post_mmr)
        assert second[player_id].old_rp == first[player_id].new_rp


def test_in_memory_store_serialises_overlapping_matches() -> None:
    store = InMemoryRatingStore([PlayerRating(player_id=player_id) for player_id in ("a1", "a2", "b1", "b2")])
    results = [_result(f"m{index}") for index in range(20)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda result: _apply(store, result), results))

    events = [event for result in results for event in store.events_for_match(result.match_id)]
    by_player = sorted((event for event in events if event.player_id == "a1"), key=lambda event: event.pre_mmr)
    assert len(by_player) == 20
    # every application starts from the previous one's post_mmr
    for previous, current in zip(by_player, by_player[1:]):
        assert current.pre_mmr == pytest.approx(previous.post_mmr)
    assert store.load_ratings(["a1"])["a1"].mmr == pytest.approx(by_player[-1].post_mmr)
