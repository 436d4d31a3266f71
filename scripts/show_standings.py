#!/usr/bin/env python3
"""Show ranked team standings and the bowler table for a tournament."""

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
from domain.pipeline import get_player_standings, get_standings, summarize_tournament
from schedule_tournament import DbUrlOption, league_store

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Query tournament standings.",
)


@app.command()
def show_standings(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    top_players: Annotated[
        int,
        typer.Option("--top-players", help="Number of bowlers to list; 0 hides the bowler table."),
    ] = 10,
) -> None:
    """Print ranked team standings followed by the top bowlers."""
    if top_players < 0:
        raise typer.BadParameter("--top-players must be >= 0")

    with league_store(db_url) as store:
        if store.get_tournament(tournament_id) is None:
            raise typer.BadParameter(f"tournament_id={tournament_id} not found", param_hint="tournament_id")
        standings = get_standings(store, tournament_id)
        players = get_player_standings(store, tournament_id)[:top_players]
        summary = summarize_tournament(store, tournament_id)

    typer.echo(
        f"matches={summary.completed_matches}/{summary.total_matches} "
        f"games={summary.total_games} high_game={summary.highest_game} "
        f"high_series={summary.highest_series} avg={summary.average_score}"
    )
    typer.echo(f"{'rank':>4}  {'team':<24} {'pts':>4} {'w-l-t':>8} {'pins':>7} {'avg':>7} {'pct':>7}")
    for row in standings:
        record = f"{row.matches_won}-{row.matches_lost}-{row.matches_tied}"
        typer.echo(
            f"{row.rank:>4}  {row.team_name:<24} {row.total_points:>4} {record:>8} "
            f"{row.total_pins:>7} {row.average:>7.2f} {row.points_percentage:>6.2f}%"
        )

    if players:
        typer.echo("")
        typer.echo(f"{'player':>8} {'team':>6} {'games':>6} {'avg':>7} {'high':>5} {'series':>7}")
        for player in players:
            typer.echo(
                f"{player.player_id:>8} {player.team_id:>6} {player.games_played:>6} "
                f"{player.average:>7.2f} {player.highest_game:>5} {player.highest_series:>7}"
            )


if __name__ == "__main__":
    app()
