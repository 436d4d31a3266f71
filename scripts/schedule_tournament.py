#!/usr/bin/env python3
"""Preview, generate, validate and clear round robin schedules for a tournament."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DB_URL_ENV_VAR, DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.errors import LeagueEngineError, ScheduleConflictError
from domain.pipeline import clear_schedule, create_schedule, validate_tournament_schedule
from domain.scheduling import ValidationReport, preview_schedule
from domain.scoring import DEFAULT_LEAGUE_CONFIG_PATH, LeagueConfig, load_league_config
from logging_config import setup_logging
from repositories import SqlLeagueStore, ensure_league_schema

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Round robin schedule commands.",
)

DbUrlOption = Annotated[
    str,
    typer.Option(
        "--db-url",
        envvar=DB_URL_ENV_VAR,
        help="Database URL. Defaults to the local bowling_league postgres instance.",
    ),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")]


@contextmanager
def league_store(db_url: str) -> Iterator[SqlLeagueStore]:
    """Yield a store bound to one session; commit on success, rollback on any error."""
    engine = create_db_engine(db_url)
    ensure_league_schema(engine)
    session_factory = create_session_factory(engine)
    with session_factory() as session:
        try:
            yield SqlLeagueStore(session)
            session.commit()
        except Exception:
            session.rollback()
            raise


def load_config_option(config_path: Path | None) -> LeagueConfig:
    try:
        return load_league_config(config_path or DEFAULT_LEAGUE_CONFIG_PATH)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


def _parse_order(order: str | None) -> list[int] | None:
    if order is None:
        return None
    try:
        return [int(item) for item in order.split(",") if item.strip()]
    except ValueError as exc:
        raise typer.BadParameter("--order must be a comma separated list of team ids", param_hint="--order") from exc


def _echo_report(report: ValidationReport) -> None:
    if report.is_valid:
        typer.echo(f"schedule valid teams={report.team_count}")
        return
    typer.echo(f"schedule invalid teams={report.team_count} issues={len(report.issues)}", err=True)
    for issue in report.issues:
        typer.echo(f"- [{issue.kind.value}] {issue.message}", err=True)


@app.command()
def preview(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    order: Annotated[
        str | None,
        typer.Option("--order", help="Optional comma separated team ids overriding seed order."),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Show sessions, pairings and byes without writing anything."""
    setup_logging("DEBUG" if verbose else "INFO")
    with league_store(db_url) as store:
        tournament = store.get_tournament(tournament_id)
        if tournament is None:
            raise typer.BadParameter(f"tournament_id={tournament_id} not found", param_hint="tournament_id")
        teams = store.list_tournament_teams(tournament_id)
        try:
            result = preview_schedule(
                teams,
                total_sessions=tournament.total_sessions,
                override_order=_parse_order(order),
            )
        except LeagueEngineError as exc:
            raise typer.BadParameter(str(exc)) from exc

    names = result.schedule.team_names()
    typer.echo(
        f"tournament={tournament.name} teams={result.total_teams} odd={result.has_odd_teams} "
        f"sessions_required={result.sessions_required} pairings={result.total_pairings}/"
        f"{result.expected_pairings} fits={result.can_fit_in_tournament}"
    )
    for session in result.schedule.sessions:
        typer.echo(f"session {session.session_number}")
        for pairing in session.pairings:
            typer.echo(
                f"  match {pairing.match_number}: "
                f"{names[pairing.home_team_id]} vs {names[pairing.away_team_id]}"
            )
        if session.bye_team_id is not None:
            typer.echo(f"  bye: {names[session.bye_team_id]}")
    _echo_report(result.report)


@app.command()
def generate(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    start_date: Annotated[
        datetime | None,
        typer.Option("--start-date", formats=["%Y-%m-%d"], help="Date of session 1."),
    ] = None,
    days_between_sessions: Annotated[
        int | None,
        typer.Option("--days-between-sessions", help="Overrides [schedule].days_between_sessions."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="League TOML config. Defaults to configs/leagues/default.toml."),
    ] = None,
    order: Annotated[
        str | None,
        typer.Option("--order", help="Optional comma separated team ids overriding seed order."),
    ] = None,
    force_create: Annotated[
        bool,
        typer.Option("--force-create", help="Persist the schedule even when validation reports issues."),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Generate, validate and persist the round robin schedule."""
    setup_logging("DEBUG" if verbose else "INFO")
    config = load_config_option(config_path)
    spacing = config.schedule.days_between_sessions if days_between_sessions is None else days_between_sessions

    try:
        with league_store(db_url) as store:
            created = create_schedule(
                store,
                tournament_id,
                start_date=None if start_date is None else start_date.date(),
                days_between_sessions=spacing,
                override_order=_parse_order(order),
                force_create=force_create,
            )
    except ScheduleConflictError as exc:
        typer.echo(str(exc), err=True)
        for issue in exc.issues:
            typer.echo(f"- [{issue.kind.value}] {issue.message}", err=True)
        raise typer.Exit(code=1) from exc
    except LeagueEngineError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo(
        f"created tournament_id={created.tournament_id} "
        f"sessions={created.sessions_created} "
        f"matches={len(created.matches)} "
        f"forced={created.was_forced} "
        f"config={config.name}"
    )


@app.command()
def validate(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Validate the persisted schedule of a tournament."""
    setup_logging()
    try:
        with league_store(db_url) as store:
            report = validate_tournament_schedule(store, tournament_id)
    except LeagueEngineError as exc:
        raise typer.BadParameter(str(exc)) from exc

    _echo_report(report)
    if not report.is_valid:
        raise typer.Exit(code=1)


@app.command()
def clear(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Delete generated matches and sessions while no scores are recorded."""
    setup_logging()
    try:
        with league_store(db_url) as store:
            removed_matches, removed_sessions = clear_schedule(store, tournament_id)
    except ScheduleConflictError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    except LeagueEngineError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo(f"cleared tournament_id={tournament_id} matches={removed_matches} sessions={removed_sessions}")


if __name__ == "__main__":
    app()
