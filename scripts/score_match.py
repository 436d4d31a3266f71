#!/usr/bin/env python3
"""Record bowler scores and finalize matches."""

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
from domain.errors import DuplicateScoreError, LeagueEngineError
from domain.pipeline import finalize_match, record_player_score
from logging_config import setup_logging
from schedule_tournament import DbUrlOption, league_store, load_config_option

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Match scoring commands.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="League TOML config. Defaults to configs/leagues/default.toml."),
]


@app.command()
def record(
    match_id: Annotated[int, typer.Argument(help="Match id.")],
    player_id: Annotated[int, typer.Argument(help="Player id.")],
    team_id: Annotated[int, typer.Argument(help="Team id the player bowled for.")],
    game1: Annotated[int, typer.Argument(help="Game 1 score.")],
    game2: Annotated[int, typer.Argument(help="Game 2 score.")],
    game3: Annotated[int, typer.Argument(help="Game 3 score.")],
    handicap: Annotated[int, typer.Option("--handicap", help="Handicap pins for the series.")] = 0,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = None,
) -> None:
    """Record one bowler's three-game series."""
    setup_logging()
    config = load_config_option(config_path)
    try:
        with league_store(db_url) as store:
            score = record_player_score(
                store,
                match_id,
                player_id,
                team_id,
                game1,
                game2,
                game3,
                handicap,
                rules=config.scoring,
            )
    except DuplicateScoreError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    except LeagueEngineError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo(
        f"recorded match_id={score.match_id} player_id={score.player_id} "
        f"series={score.series_total} handicap={score.handicap}"
    )


@app.command()
def finalize(
    match_id: Annotated[int, typer.Argument(help="Match id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = None,
) -> None:
    """Complete a match and update tournament standings."""
    setup_logging()
    config = load_config_option(config_path)
    try:
        with league_store(db_url) as store:
            finalized = finalize_match(store, match_id, rules=config.scoring)
    except LeagueEngineError as exc:
        raise typer.BadParameter(str(exc)) from exc

    result = finalized.result
    winner = "tie" if result.is_tie else f"team_id={result.winner_team_id}"
    typer.echo(
        f"finalized match_id={result.match_id} points={result.home_points}-{result.away_points} "
        f"winner={winner} rebuilt={finalized.rebuilt}"
    )


if __name__ == "__main__":
    app()
