"""Store-backed league operations: scheduling, score recording, finalization and rebuilds."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from domain.common import (
    GAMES_PER_SERIES,
    MatchRecord,
    MatchState,
    MatchStatus,
    Pairing,
    PlayerGameScore,
    PlayerStatistics,
    Schedule,
    ScheduleSession,
    TeamMatchResult,
    TeamStatistics,
    TournamentRecord,
)
from domain.errors import (
    DuplicateScoreError,
    InvalidInputError,
    ScheduleConflictError,
    ValidationError,
)
from domain.protocol import LeagueStore
from domain.scheduling import ValidationReport, generate_schedule, validate_schedule
from domain.scoring import MatchScorer, ScoringRules, match_state
from domain.standings import (
    StandingsDrift,
    apply_match,
    apply_player_scores,
    compare_standings,
    empty_team_statistics,
    rank_standings,
    recompute_player_statistics,
    recompute_standings,
)

logger = logging.getLogger(__name__)

GENERATED_SESSION_NOTE = "Automatically generated round robin session"


@dataclass(frozen=True)
class ScheduleCreation:
    """Outcome of persisting a generated schedule."""

    tournament_id: int
    schedule: Schedule
    report: ValidationReport
    matches: tuple[MatchRecord, ...]
    sessions_created: int
    was_forced: bool


@dataclass(frozen=True)
class FinalizedMatch:
    result: TeamMatchResult
    home_statistics: TeamStatistics
    away_statistics: TeamStatistics
    rebuilt: bool


@dataclass(frozen=True)
class RebuildSummary:
    """Outcome for one standings rebuild."""

    tournament_id: int
    processed_matches: int
    tracked_teams: int
    tracked_players: int
    drift_count: int
    dry_run: bool
    standings: tuple[TeamStatistics, ...]


@dataclass(frozen=True)
class TournamentSummary:
    tournament_id: int
    total_teams: int
    total_matches: int
    completed_matches: int
    scheduled_matches: int
    total_games: int
    highest_game: int
    highest_series: int
    average_score: int


# Scheduling


def create_schedule(
    store: LeagueStore,
    tournament_id: int,
    *,
    start_date: date | None = None,
    days_between_sessions: int = 7,
    override_order: Sequence[int] | None = None,
    force_create: bool = False,
    schedule: Schedule | None = None,
) -> ScheduleCreation:
    """Generate (or accept) a round robin, validate it and persist sessions and matches."""
    if days_between_sessions < 0:
        raise InvalidInputError("days_between_sessions must be >= 0")

    tournament = _require_tournament(store, tournament_id)
    if store.list_matches(tournament_id):
        raise ScheduleConflictError(
            f"tournament_id={tournament_id} already has scheduled matches; clear the schedule first"
        )

    teams = store.list_tournament_teams(tournament_id)
    if len(teams) < 2:
        raise InvalidInputError(
            "At least 2 teams must be registered to generate round robin schedule"
        )

    if schedule is None:
        schedule = generate_schedule(teams, override_order=override_order)
    report = validate_schedule(schedule, len(teams), team_ids=[team.team_id for team in teams])
    if not report.is_valid and not force_create:
        logger.warning(
            "rejected schedule tournament_id=%s issues=%d", tournament_id, len(report.issues)
        )
        raise ScheduleConflictError(
            f"Schedule validation failed for tournament_id={tournament_id}; use force_create to override",
            issues=report.issues,
        )

    base_date = start_date or tournament.start_date
    names = {team.team_id: team.name for team in teams}
    created: list[MatchRecord] = []
    for index, session in enumerate(schedule.sessions):
        session_date = None if base_date is None else base_date + timedelta(days=index * days_between_sessions)
        store.create_session(
            tournament_id,
            session_number=session.session_number,
            session_date=session_date,
            bye_team_id=session.bye_team_id,
            notes=f"{GENERATED_SESSION_NOTE} - {len(session.pairings)} matches",
        )
        for pairing in session.pairings:
            home_name = names.get(pairing.home_team_id, str(pairing.home_team_id))
            away_name = names.get(pairing.away_team_id, str(pairing.away_team_id))
            created.append(
                store.create_match(
                    tournament_id,
                    pairing,
                    match_date=session_date,
                    match_name=f"Session {session.session_number} - {home_name} vs {away_name}",
                )
            )

    sessions_required = len(schedule.sessions)
    if tournament.total_sessions is None or tournament.total_sessions < sessions_required:
        store.set_total_sessions(tournament_id, sessions_required)

    was_forced = not report.is_valid
    logger.info(
        "created schedule tournament_id=%s sessions=%d matches=%d forced=%s",
        tournament_id,
        sessions_required,
        len(created),
        was_forced,
    )
    return ScheduleCreation(
        tournament_id=tournament_id,
        schedule=schedule,
        report=report,
        matches=tuple(created),
        sessions_created=sessions_required,
        was_forced=was_forced,
    )


def clear_schedule(store: LeagueStore, tournament_id: int) -> tuple[int, int]:
    """Remove generated matches and sessions; refused once any scores exist."""
    _require_tournament(store, tournament_id)
    if store.list_tournament_player_scores(tournament_id, completed_only=False):
        raise ScheduleConflictError(
            f"Cannot clear schedule for tournament_id={tournament_id}: some matches have recorded scores"
        )
    removed_matches, removed_sessions = store.delete_schedule(tournament_id)
    logger.info(
        "cleared schedule tournament_id=%s matches=%d sessions=%d",
        tournament_id,
        removed_matches,
        removed_sessions,
    )
    return removed_matches, removed_sessions


def validate_tournament_schedule(store: LeagueStore, tournament_id: int) -> ValidationReport:
    """Validate the schedule reconstructed from persisted matches."""
    _require_tournament(store, tournament_id)
    teams = store.list_tournament_teams(tournament_id)
    matches = store.list_matches(tournament_id)
    return validate_schedule(
        _sessions_from_matches(matches, [team.team_id for team in teams]),
        len(teams),
        team_ids=[team.team_id for team in teams],
    )


# Scores and match points


def record_player_score(
    store: LeagueStore,
    match_id: int,
    player_id: int,
    team_id: int,
    game1: int,
    game2: int,
    game3: int,
    handicap: int = 0,
    *,
    rules: ScoringRules | None = None,
) -> PlayerGameScore:
    """Record one bowler's series; points are refreshed once both sides have scores."""
    scorer = MatchScorer(rules)
    score = PlayerGameScore(
        match_id=match_id,
        player_id=player_id,
        team_id=team_id,
        game1=game1,
        game2=game2,
        game3=game3,
        handicap=handicap,
    )
    scorer.validate_player_score(score)

    with store.lock_match(match_id):
        match = _require_match(store, match_id)
        if match.status in (MatchStatus.COMPLETED, MatchStatus.CANCELLED):
            raise ValidationError(f"match_id={match_id} is {match.status.value}; scores cannot be recorded")

        roster = store.get_roster(match_id)
        scorer.validate_player_score(score, roster)
        if store.has_player_score(match_id, player_id):
            raise DuplicateScoreError(match_id=match_id, player_id=player_id)

        store.add_player_score(score)
        if match.status != MatchStatus.IN_PROGRESS:
            store.set_match_outcome(match_id, status=MatchStatus.IN_PROGRESS, winner_team_id=None)

        scores = store.list_player_scores(match_id)
        if match_state(scores, roster, MatchStatus.IN_PROGRESS) == MatchState.BOTH_TEAMS_SCORED:
            store.upsert_match_result(_score(scorer, match, scores))

    logger.debug("recorded score match_id=%s player_id=%s team_id=%s", match_id, player_id, team_id)
    return score


def compute_match_points(
    store: LeagueStore,
    match_id: int,
    *,
    rules: ScoringRules | None = None,
) -> TeamMatchResult:
    """Recompute and overwrite the stored match points for one match.

    For a completed match the stored winner and the tournament standings are
    brought in line with the new points as well.
    """
    scorer = MatchScorer(rules)
    with store.lock_match(match_id):
        match = _require_match(store, match_id)
        result = _score(scorer, match, store.list_player_scores(match_id))
        store.upsert_match_result(result)
        if match.status == MatchStatus.COMPLETED:
            store.set_match_outcome(match_id, status=MatchStatus.COMPLETED, winner_team_id=result.winner_team_id)
            rebuild_standings(store, match.tournament_id)
            logger.info(
                "recomputed completed match_id=%s winner_team_id=%s points=%d-%d",
                match_id,
                result.winner_team_id,
                result.home_points,
                result.away_points,
            )
    return result


def finalize_match(
    store: LeagueStore,
    match_id: int,
    *,
    rules: ScoringRules | None = None,
) -> FinalizedMatch:
    """Complete a match and fold it into the standings exactly once.

    A match that is already completed is treated as a correction: its points
    are recomputed and the tournament standings are rebuilt from history
    instead of adding a second delta.
    """
    scorer = MatchScorer(rules)
    with store.lock_match(match_id):
        match = _require_match(store, match_id)
        if match.status == MatchStatus.CANCELLED:
            raise ValidationError(f"match_id={match_id} is cancelled and cannot be finalized")

        result = _score(scorer, match, store.list_player_scores(match_id))
        store.upsert_match_result(result)
        store.set_match_outcome(match_id, status=MatchStatus.COMPLETED, winner_team_id=result.winner_team_id)

        correction = match.status == MatchStatus.COMPLETED
        if correction:
            summary = rebuild_standings(store, match.tournament_id)
            by_team = {item.team_id: item for item in summary.standings}
            home_stats, away_stats = by_team[result.home_team_id], by_team[result.away_team_id]
        else:
            home_stats, away_stats = apply_match_to_standings(store, match_id, result)

    logger.info(
        "finalized match_id=%s winner_team_id=%s points=%d-%d correction=%s",
        match_id,
        result.winner_team_id,
        result.home_points,
        result.away_points,
        correction,
    )
    return FinalizedMatch(
        result=result,
        home_statistics=home_stats,
        away_statistics=away_stats,
        rebuilt=correction,
    )


# Standings


def apply_match_to_standings(
    store: LeagueStore,
    match_id: int,
    outcome: TeamMatchResult,
) -> tuple[TeamStatistics, TeamStatistics]:
    """Add one finalized match to the stored statistics and re-rank the tournament."""
    if outcome.match_id != match_id:
        raise InvalidInputError(f"outcome is for match_id={outcome.match_id}, expected {match_id}")

    tournament_id = outcome.tournament_id
    names = _team_names(store, tournament_id)
    current = {item.team_id: item for item in store.get_team_statistics(tournament_id)}
    for team_id, name in names.items():
        current.setdefault(team_id, empty_team_statistics(tournament_id, team_id, name))

    ranked = rank_standings(apply_match(current, outcome, names).values())
    store.upsert_team_statistics(ranked)

    player_stats = {item.player_id: item for item in store.get_player_statistics(tournament_id)}
    scores = store.list_player_scores(match_id)
    updated_players = apply_player_scores(player_stats, tournament_id, scores)
    store.upsert_player_statistics([updated_players[score.player_id] for score in scores])

    by_team = {item.team_id: item for item in ranked}
    return by_team[outcome.home_team_id], by_team[outcome.away_team_id]


def rebuild_standings(
    store: LeagueStore,
    tournament_id: int,
    *,
    dry_run: bool = False,
    echo: Callable[[str], None] | None = None,
) -> RebuildSummary:
    """Recompute team and player statistics from the full completed-match history."""
    history = store.list_match_results(tournament_id, completed_only=True)
    names = _team_names(store, tournament_id)
    standings = recompute_standings(tournament_id, history, names)
    players = recompute_player_statistics(
        tournament_id, store.list_tournament_player_scores(tournament_id, completed_only=True)
    )
    drifts = compare_standings(store.get_team_statistics(tournament_id), standings)

    if not dry_run:
        store.replace_team_statistics(tournament_id, standings)
        store.replace_player_statistics(tournament_id, players)

    if echo is not None:
        echo(
            f"{'[dry-run] ' if dry_run else ''}"
            f"tournament_id={tournament_id} "
            f"processed_matches={len(history)} "
            f"tracked_teams={len(standings)} "
            f"tracked_players={len(players)} "
            f"drift={len(drifts)}"
        )
    return RebuildSummary(
        tournament_id=tournament_id,
        processed_matches=len(history),
        tracked_teams=len(standings),
        tracked_players=len(players),
        drift_count=len(drifts),
        dry_run=dry_run,
        standings=tuple(standings),
    )


def verify_standings(store: LeagueStore, tournament_id: int) -> list[StandingsDrift]:
    """Compare stored (incremental) statistics with a full recomputation."""
    history = store.list_match_results(tournament_id, completed_only=True)
    recomputed = recompute_standings(tournament_id, history, _team_names(store, tournament_id))
    drifts = compare_standings(store.get_team_statistics(tournament_id), recomputed)
    if drifts:
        logger.warning("standings drift tournament_id=%s fields=%d", tournament_id, len(drifts))
    return drifts


def get_standings(store: LeagueStore, tournament_id: int) -> list[TeamStatistics]:
    """Ranked stored standings, including registered teams without matches."""
    names = _team_names(store, tournament_id)
    stored = {item.team_id: item for item in store.get_team_statistics(tournament_id)}
    for team_id, name in names.items():
        stored.setdefault(team_id, empty_team_statistics(tournament_id, team_id, name))
    return rank_standings(stored.values())


def get_player_standings(store: LeagueStore, tournament_id: int) -> list[PlayerStatistics]:
    return sorted(
        store.get_player_statistics(tournament_id),
        key=lambda item: (-item.average, -item.total_pins, item.player_id),
    )


def summarize_tournament(store: LeagueStore, tournament_id: int) -> TournamentSummary:
    _require_tournament(store, tournament_id)
    matches = store.list_matches(tournament_id)
    scores = store.list_tournament_player_scores(tournament_id, completed_only=False)
    average_score = 0
    if scores:
        total_pins = sum(score.series_total for score in scores)
        average = Decimal(total_pins) / (len(scores) * GAMES_PER_SERIES)
        average_score = int(average.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return TournamentSummary(
        tournament_id=tournament_id,
        total_teams=len(store.list_tournament_teams(tournament_id)),
        total_matches=len(matches),
        completed_matches=sum(1 for match in matches if match.status == MatchStatus.COMPLETED),
        scheduled_matches=sum(1 for match in matches if match.status == MatchStatus.SCHEDULED),
        total_games=sum(len(score.games) for score in scores),
        highest_game=max((score.highest_game for score in scores), default=0),
        highest_series=max((score.series_total for score in scores), default=0),
        average_score=average_score,
    )


def _score(scorer: MatchScorer, match: MatchRecord, scores: Sequence[PlayerGameScore]) -> TeamMatchResult:
    return scorer.score_match(
        match_id=match.match_id,
        tournament_id=match.tournament_id,
        home_team_id=match.home_team_id,
        away_team_id=match.away_team_id,
        scores=scores,
    )


def _require_tournament(store: LeagueStore, tournament_id: int) -> TournamentRecord:
    tournament = store.get_tournament(tournament_id)
    if tournament is None:
        raise InvalidInputError(f"tournament_id={tournament_id} not found")
    return tournament


def _require_match(store: LeagueStore, match_id: int) -> MatchRecord:
    match = store.get_match(match_id)
    if match is None:
        raise InvalidInputError(f"match_id={match_id} not found")
    return match


def _team_names(store: LeagueStore, tournament_id: int) -> dict[int, str]:
    return {team.team_id: team.name for team in store.list_tournament_teams(tournament_id)}


def _sessions_from_matches(matches: Sequence[MatchRecord], team_ids: Sequence[int]) -> list[ScheduleSession]:
    by_session: dict[int, list[MatchRecord]] = {}
    for match in matches:
        if match.session_number is None:
            continue
        by_session.setdefault(match.session_number, []).append(match)

    sessions: list[ScheduleSession] = []
    odd = len(team_ids) % 2 == 1
    for session_number in sorted(by_session):
        session_matches = sorted(by_session[session_number], key=lambda match: match.match_id)
        pairings = tuple(
            Pairing(
                session_number=session_number,
                home_team_id=match.home_team_id,
                away_team_id=match.away_team_id,
                match_number=index,
            )
            for index, match in enumerate(session_matches, start=1)
        )
        playing = {team_id for pairing in pairings for team_id in pairing.team_ids}
        idle = [team_id for team_id in team_ids if team_id not in playing]
        bye_team_id = idle[0] if odd and len(idle) == 1 else None
        sessions.append(ScheduleSession(session_number=session_number, pairings=pairings, bye_team_id=bye_team_id))
    return sessions


__all__ = [
    "FinalizedMatch",
    "RebuildSummary",
    "ScheduleCreation",
    "TournamentSummary",
    "apply_match_to_standings",
    "clear_schedule",
    "compute_match_points",
    "create_schedule",
    "finalize_match",
    "get_player_standings",
    "get_standings",
    "rebuild_standings",
    "record_player_score",
    "summarize_tournament",
    "validate_tournament_schedule",
    "verify_standings",
]
