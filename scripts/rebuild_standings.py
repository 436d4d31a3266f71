#!/usr/bin/env python3
"""Recompute tournament standings from the completed-match history."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL
from domain.pipeline import rebuild_standings, verify_standings
from logging_config import setup_logging
from schedule_tournament import DbUrlOption, league_store

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Standings rebuild commands.",
)


@app.command()
def rebuild(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute standings without writing statistics."),
    ] = False,
) -> None:
    """Replace stored team and player statistics with a full recomputation."""
    setup_logging()
    with league_store(db_url) as store:
        if store.get_tournament(tournament_id) is None:
            raise typer.BadParameter(f"tournament_id={tournament_id} not found", param_hint="tournament_id")
        summary = rebuild_standings(store, tournament_id, dry_run=dry_run, echo=typer.echo)

    if summary.drift_count and not dry_run:
        typer.echo(f"corrected {summary.drift_count} drifted fields")


@app.command()
def check(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Report fields where stored standings differ from a recomputation."""
    setup_logging()
    with league_store(db_url) as store:
        drifts = verify_standings(store, tournament_id)

    if not drifts:
        typer.echo(f"standings consistent tournament_id={tournament_id}")
        return
    for drift in drifts:
        typer.echo(
            f"- team_id={drift.team_id} {drift.field_name}: stored={drift.stored} recomputed={drift.recomputed}",
            err=True,
        )
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
