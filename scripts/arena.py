#!/usr/bin/env python3
"""Operate the match arena: schema setup, rank lookups, match settlement and tracking."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from clients import HttpEngineClient, LoggingBroadcaster
from db import create_db_engine, create_session_factory
from domain.errors import ArenaError
from domain.matches import MatchLifecycle, MatchStateReconciler
from domain.ratings import MatchRatingProcessor, RatingEngine, get_rating_system_config
from domain.settings import ArenaSettings, load_arena_settings
from log import setup_logging
from repositories import SqlMatchStore, SqlRatingStore, ensure_schema

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Match lifecycle and rating engine tools.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Arena settings TOML. Defaults to configs/arena.toml."),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log at DEBUG level.")]


def _settings(config: Path | None) -> ArenaSettings:
    try:
        return load_arena_settings(config)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


def _rating_engine(settings: ArenaSettings) -> RatingEngine:
    system = get_rating_system_config(settings.rating_config_dir, settings.rating_system)
    return RatingEngine(system.parameters)


def _engine_client(settings: ArenaSettings) -> HttpEngineClient:
    return HttpEngineClient(
        settings.engine_url,
        timeout=settings.engine_timeout,
    )


@app.command("init-db")
def init_db(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Create the players, matches, and rating change tables."""
    setup_logging("arena", verbose)
    settings = _settings(config)
    ensure_schema(create_db_engine(settings.db_url))
    typer.echo(f"Schema ready at {settings.db_url}")


@app.command("ranks")
def ranks(config: ConfigOption = None) -> None:
    """Print the rank ladder of the configured rating system."""
    engine = _rating_engine(_settings(config))
    for tier in engine.params.ranks:
        typer.echo(f"{tier.min_mmr:8.1f}  {tier.name}")


@app.command("rank-for")
def rank_for(
    mmr: Annotated[float, typer.Argument(help="MMR value to look up.")],
    config: ConfigOption = None,
) -> None:
    """Print the rank tier an MMR value falls into."""
    engine = _rating_engine(_settings(config))
    typer.echo(engine.get_rank_from_mmr(mmr))


async def _dry_run(settings: ArenaSettings, match_id: str) -> None:
    processor = MatchRatingProcessor(_rating_engine(settings))
    ratings = SqlRatingStore(create_session_factory(create_db_engine(settings.db_url)))
    async with _engine_client(settings) as engine_client:
        result = await engine_client.get_match_result(match_id)
    if result is None:
        typer.echo(f"No result available for match {match_id}")
        raise typer.Exit(code=1)

    events = processor.process_match(
        result,
        ratings.load_ratings(result.team_a.players + result.team_b.players),
    )
    typer.echo(f"match={match_id} difficulty={result.difficulty} winner={result.winner} (dry run)")
    for event in events:
        typer.echo(
            f"{event.player_id:<24} {event.team_id} "
            f"mmr={event.pre_mmr:7.1f} -> {event.post_mmr:7.1f} ({event.mmr_delta:+.1f}) "
            f"rank={event.old_rank} -> {event.new_rank} rp={event.old_rp} -> {event.new_rp}"
        )


async def _process(settings: ArenaSettings, match_id: str) -> None:
    session_factory = create_session_factory(create_db_engine(settings.db_url))
    async with _engine_client(settings) as engine_client:
        reconciler = MatchStateReconciler(
            engine_client,
            LoggingBroadcaster(),
            poll_interval=settings.poll_interval,
        )
        lifecycle = MatchLifecycle(
            matches=SqlMatchStore(session_factory),
            ratings=SqlRatingStore(session_factory),
            engine=engine_client,
            reconciler=reconciler,
            processor=MatchRatingProcessor(_rating_engine(settings)),
            max_concurrent_matches=settings.max_concurrent_matches,
            settle_on_end=False,
        )
        deltas = await lifecycle.process_match_end(match_id)

    if not deltas:
        typer.echo(f"match={match_id} settled without rating changes")
        return
    typer.echo(f"match={match_id} players={len(deltas)}")
    for player_id, delta in sorted(deltas.items()):
        typer.echo(
            f"{player_id:<24} mmr={delta.mmr_delta:+6.1f} "
            f"rank={delta.old_rank} -> {delta.new_rank} rp={delta.rp_delta:+d}"
        )


@app.command("process-match")
def process_match(
    match_id: Annotated[str, typer.Argument(help="Match id to settle.")],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute rating changes without writing them."),
    ] = False,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Settle MMR, rank, and RP for an ended match."""
    setup_logging("arena", verbose)
    settings = _settings(config)
    try:
        asyncio.run(_dry_run(settings, match_id) if dry_run else _process(settings, match_id))
    except ArenaError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


async def _track(settings: ArenaSettings, match_id: str) -> None:
    async with _engine_client(settings) as engine_client:
        reconciler = MatchStateReconciler(
            engine_client,
            LoggingBroadcaster(),
            poll_interval=settings.poll_interval,
        )
        await reconciler.start_tracking(match_id)
        try:
            while reconciler.is_tracking(match_id):
                await asyncio.sleep(settings.poll_interval)
        finally:
            await reconciler.aclose()


@app.command("track")
def track(
    match_id: Annotated[str, typer.Argument(help="Match id to follow.")],
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Follow a match's engine state and log phase changes until it ends."""
    setup_logging("arena", verbose)
    settings = _settings(config)
    try:
        asyncio.run(_track(settings, match_id))
    except KeyboardInterrupt:
        typer.echo(f"Stopped tracking {match_id}")


if __name__ == "__main__":
    app()
