"""Tests for store-backed scheduling, scoring and standings operations."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date

import pytest

from domain.common import MatchStatus, Pairing, Schedule, ScheduleSession, Team
from domain.errors import (
    DuplicateScoreError,
    InvalidInputError,
    NotRosteredError,
    ScheduleConflictError,
    ScoresIncompleteError,
    ValidationError,
)
from domain.pipeline import (
    apply_match_to_standings,
    clear_schedule,
    compute_match_points,
    create_schedule,
    finalize_match,
    get_player_standings,
    get_standings,
    rebuild_standings,
    record_player_score,
    summarize_tournament,
    validate_tournament_schedule,
    verify_standings,
)
from domain.protocol import LeagueStore
from domain.scheduling import IssueKind
from domain.scoring import ScoringRules, SeriesPointBasis
from repositories import InMemoryLeagueStore


@dataclass
class League:
    store: InMemoryLeagueStore
    tournament_id: int
    teams: list[Team]
    players: dict[int, list[int]]


def _league(team_count: int = 4, players_per_team: int = 2) -> League:
    store = InMemoryLeagueStore()
    tournament = store.add_tournament("Spring League", start_date=date(2026, 3, 2))
    teams = [
        store.add_team(tournament.tournament_id, f"Team {index}", seed_number=index)
        for index in range(1, team_count + 1)
    ]
    players = {
        team.team_id: [store.add_player(tournament.tournament_id, team.team_id) for _ in range(players_per_team)]
        for team in teams
    }
    return League(store=store, tournament_id=tournament.tournament_id, teams=teams, players=players)


def _scheduled_league(team_count: int = 4) -> League:
    league = _league(team_count)
    create_schedule(league.store, league.tournament_id)
    return league


def _bowl(league: League, match_id: int, home_games: tuple[int, int, int], away_games: tuple[int, int, int]) -> None:
    match = league.store.get_match(match_id)
    assert match is not None
    for team_id, games in ((match.home_team_id, home_games), (match.away_team_id, away_games)):
        for player_id in league.players[team_id]:
            record_player_score(league.store, match_id, player_id, team_id, *games)


def test_memory_store_satisfies_protocol() -> None:
    assert isinstance(InMemoryLeagueStore(), LeagueStore)


def test_create_schedule_persists_sessions_and_matches() -> None:
    league = _league(4)

    created = create_schedule(league.store, league.tournament_id, days_between_sessions=7)

    assert created.sessions_created == 3
    assert len(created.matches) == 6
    assert created.was_forced is False
    sessions = league.store.list_sessions(league.tournament_id)
    assert [session.session_date for session in sessions] == [
        date(2026, 3, 2),
        date(2026, 3, 9),
        date(2026, 3, 16),
    ]
    assert all(match.status == MatchStatus.SCHEDULED for match in created.matches)
    assert league.store.match_name(created.matches[0].match_id) == "Session 1 - Team 1 vs Team 4"
    tournament = league.store.get_tournament(league.tournament_id)
    assert tournament is not None and tournament.total_sessions == 3


def test_create_schedule_records_byes_for_odd_team_count() -> None:
    league = _league(5)

    create_schedule(league.store, league.tournament_id, start_date=date(2026, 1, 5), days_between_sessions=0)

    sessions = league.store.list_sessions(league.tournament_id)
    assert len(sessions) == 5
    assert {session.bye_team_id for session in sessions} == {team.team_id for team in league.teams}
    assert {session.session_date for session in sessions} == {date(2026, 1, 5)}


def test_create_schedule_refuses_existing_matches() -> None:
    league = _scheduled_league()

    with pytest.raises(ScheduleConflictError):
        create_schedule(league.store, league.tournament_id)


def test_create_schedule_requires_two_teams() -> None:
    league = _league(1)

    with pytest.raises(InvalidInputError):
        create_schedule(league.store, league.tournament_id)


def test_create_schedule_unknown_tournament() -> None:
    with pytest.raises(InvalidInputError):
        create_schedule(InMemoryLeagueStore(), 999)


def test_invalid_schedule_needs_force_create() -> None:
    league = _league(4)
    first, second, third, fourth = (team.team_id for team in league.teams)
    partial = Schedule(
        teams=tuple(league.teams),
        sessions=(
            ScheduleSession(
                session_number=1,
                pairings=(
                    Pairing(1, first, second, 1),
                    Pairing(1, third, fourth, 2),
                ),
            ),
        ),
    )

    with pytest.raises(ScheduleConflictError) as exc_info:
        create_schedule(league.store, league.tournament_id, schedule=partial)
    assert {issue.kind for issue in exc_info.value.issues} >= {IssueKind.MISSING_PAIRING, IssueKind.SESSION_COUNT}
    assert league.store.list_matches(league.tournament_id) == []

    created = create_schedule(league.store, league.tournament_id, schedule=partial, force_create=True)
    assert created.was_forced is True
    assert len(created.matches) == 2
    assert not validate_tournament_schedule(league.store, league.tournament_id).is_valid


def test_persisted_schedule_validates() -> None:
    league = _scheduled_league(5)

    report = validate_tournament_schedule(league.store, league.tournament_id)

    assert report.is_valid
    assert report.team_count == 5


def test_clear_schedule_until_scores_exist() -> None:
    league = _scheduled_league()

    assert clear_schedule(league.store, league.tournament_id) == (6, 3)
    assert league.store.list_matches(league.tournament_id) == []

    create_schedule(league.store, league.tournament_id)
    match = league.store.list_matches(league.tournament_id)[0]
    player_id = league.players[match.home_team_id][0]
    record_player_score(league.store, match.match_id, player_id, match.home_team_id, 180, 190, 200)

    with pytest.raises(ScheduleConflictError):
        clear_schedule(league.store, league.tournament_id)
    assert len(league.store.list_matches(league.tournament_id)) == 6


def test_record_score_moves_match_in_progress() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    player_id = league.players[match.home_team_id][0]

    score = record_player_score(league.store, match.match_id, player_id, match.home_team_id, 150, 160, 170, 12)

    assert score.series_total == 480
    assert score.final_total == 492
    stored = league.store.get_match(match.match_id)
    assert stored is not None and stored.status == MatchStatus.IN_PROGRESS
    assert league.store.get_match_result(match.match_id) is None


def test_duplicate_score_rejected_and_data_unchanged() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    player_id = league.players[match.home_team_id][0]
    record_player_score(league.store, match.match_id, player_id, match.home_team_id, 150, 160, 170)
    before = league.store.list_player_scores(match.match_id)

    with pytest.raises(DuplicateScoreError):
        record_player_score(league.store, match.match_id, player_id, match.home_team_id, 250, 260, 270)

    assert league.store.list_player_scores(match.match_id) == before


def test_concurrent_duplicate_submissions_store_one_score() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    player_id = league.players[match.home_team_id][0]
    barrier = threading.Barrier(4)
    outcomes: list[str] = []

    def submit() -> None:
        barrier.wait()
        try:
            record_player_score(league.store, match.match_id, player_id, match.home_team_id, 200, 200, 200)
            outcomes.append("stored")
        except DuplicateScoreError:
            outcomes.append("duplicate")

    threads = [threading.Thread(target=submit) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["duplicate", "duplicate", "duplicate", "stored"]
    assert len(league.store.list_player_scores(match.match_id)) == 1


def test_unrostered_player_rejected() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    outsider_team = next(
        team.team_id for team in league.teams if team.team_id not in (match.home_team_id, match.away_team_id)
    )
    away_player = league.players[match.away_team_id][0]

    with pytest.raises(NotRosteredError):
        record_player_score(league.store, match.match_id, away_player, match.home_team_id, 100, 100, 100)
    with pytest.raises(NotRosteredError):
        record_player_score(
            league.store, match.match_id, league.players[outsider_team][0], outsider_team, 100, 100, 100
        )
    assert league.store.list_player_scores(match.match_id) == []


def test_out_of_range_score_rejected() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    player_id = league.players[match.home_team_id][0]

    with pytest.raises(ValidationError):
        record_player_score(league.store, match.match_id, player_id, match.home_team_id, 301, 100, 100)


def test_unknown_match_rejected() -> None:
    league = _scheduled_league()

    with pytest.raises(InvalidInputError):
        record_player_score(league.store, 99_999, 1, 1, 100, 100, 100)


def test_match_points_stored_once_both_sides_bowl() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]

    _bowl(league, match.match_id, (200, 190, 180), (150, 200, 170))

    result = league.store.get_match_result(match.match_id)
    assert result is not None
    assert result.home.game_totals == (400, 380, 360)
    assert result.home.game_points == (1, 0, 1)
    assert result.home_points == 3
    assert result.away_points == 1
    assert compute_match_points(league.store, match.match_id) == result


def test_compute_match_points_requires_both_sides() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]

    with pytest.raises(ScoresIncompleteError):
        compute_match_points(league.store, match.match_id)


def test_finalize_updates_status_and_standings() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    _bowl(league, match.match_id, (200, 200, 200), (150, 150, 150))

    finalized = finalize_match(league.store, match.match_id)

    assert finalized.rebuilt is False
    assert finalized.result.winner_team_id == match.home_team_id
    stored = league.store.get_match(match.match_id)
    assert stored is not None
    assert stored.status == MatchStatus.COMPLETED
    assert stored.winner_team_id == match.home_team_id
    assert finalized.home_statistics.matches_won == 1
    assert finalized.home_statistics.total_points == 4
    assert finalized.home_statistics.games_played == 6
    assert finalized.home_statistics.rank == 1
    assert finalized.away_statistics.matches_lost == 1

    standings = get_standings(league.store, league.tournament_id)
    assert len(standings) == 4
    assert [row.rank for row in standings] == [1, 2, 3, 4]
    players = get_player_standings(league.store, league.tournament_id)
    assert len(players) == 4
    assert players[0].average == pytest.approx(200.0)


def test_finalize_requires_scores_from_both_teams() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    record_player_score(
        league.store, match.match_id, league.players[match.home_team_id][0], match.home_team_id, 100, 100, 100
    )

    with pytest.raises(ScoresIncompleteError):
        finalize_match(league.store, match.match_id)
    stored = league.store.get_match(match.match_id)
    assert stored is not None and stored.status == MatchStatus.IN_PROGRESS


def test_refinalize_rebuilds_instead_of_double_counting() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    _bowl(league, match.match_id, (200, 200, 200), (150, 150, 150))
    finalize_match(league.store, match.match_id)

    again = finalize_match(league.store, match.match_id)

    assert again.rebuilt is True
    assert again.home_statistics.matches_played == 1
    assert again.home_statistics.total_points == 4
    assert verify_standings(league.store, league.tournament_id) == []


def test_recomputing_completed_match_updates_winner_and_standings() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    for team_id, games, handicap in (
        (match.home_team_id, (200, 150, 180), 0),
        (match.away_team_id, (150, 200, 180), 10),
    ):
        for player_id in league.players[team_id]:
            record_player_score(league.store, match.match_id, player_id, team_id, *games, handicap)
    finalized = finalize_match(league.store, match.match_id)
    assert finalized.result.winner_team_id == match.away_team_id

    scratch = ScoringRules(series_point_basis=SeriesPointBasis.SCRATCH)
    result = compute_match_points(league.store, match.match_id, rules=scratch)

    assert result.home_points == result.away_points == 1
    assert result.winner_team_id is None
    stored = league.store.get_match(match.match_id)
    assert stored is not None
    assert stored.status == MatchStatus.COMPLETED
    assert stored.winner_team_id is None
    by_team = {row.team_id: row for row in get_standings(league.store, league.tournament_id)}
    assert by_team[match.home_team_id].matches_tied == 1
    assert by_team[match.away_team_id].matches_won == 0
    assert by_team[match.away_team_id].total_points == 1
    assert verify_standings(league.store, league.tournament_id) == []


def test_scores_rejected_after_completion() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    _bowl(league, match.match_id, (200, 200, 200), (150, 150, 150))
    finalize_match(league.store, match.match_id)
    extra_player = league.store.add_player(league.tournament_id, match.home_team_id)

    with pytest.raises(ValidationError):
        record_player_score(league.store, match.match_id, extra_player, match.home_team_id, 100, 100, 100)


def test_cancelled_match_cannot_be_finalized() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    _bowl(league, match.match_id, (200, 200, 200), (150, 150, 150))
    league.store.set_match_status(match.match_id, MatchStatus.CANCELLED)

    with pytest.raises(ValidationError):
        finalize_match(league.store, match.match_id)


def test_series_basis_follows_rules() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    for team_id, games, handicap in (
        (match.home_team_id, (200, 200, 200), 0),
        (match.away_team_id, (190, 190, 190), 40),
    ):
        for player_id in league.players[team_id]:
            record_player_score(league.store, match.match_id, player_id, team_id, *games, handicap)

    scratch = ScoringRules(series_point_basis=SeriesPointBasis.SCRATCH)
    assert compute_match_points(league.store, match.match_id).away.series_point == 1
    assert compute_match_points(league.store, match.match_id, rules=scratch).home.series_point == 1


def test_incremental_standings_match_full_rebuild() -> None:
    league = _scheduled_league(5)
    games = [
        ((200, 180, 160), (170, 190, 150)),
        ((150, 150, 150), (150, 150, 150)),
        ((210, 220, 230), (200, 230, 220)),
        ((140, 160, 180), (190, 170, 150)),
    ]
    matches = league.store.list_matches(league.tournament_id)
    for match, (home_games, away_games) in zip(matches, games):
        _bowl(league, match.match_id, home_games, away_games)
        finalize_match(league.store, match.match_id)

    incremental = get_standings(league.store, league.tournament_id)
    assert verify_standings(league.store, league.tournament_id) == []

    summary = rebuild_standings(league.store, league.tournament_id)
    assert summary.processed_matches == 4
    assert summary.tracked_teams == 5
    assert summary.drift_count == 0
    assert list(summary.standings) == incremental


def test_rebuild_dry_run_leaves_stored_statistics() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    _bowl(league, match.match_id, (200, 200, 200), (150, 150, 150))
    finalize_match(league.store, match.match_id)
    league.store.replace_team_statistics(league.tournament_id, [])
    messages: list[str] = []

    summary = rebuild_standings(league.store, league.tournament_id, dry_run=True, echo=messages.append)

    assert summary.dry_run is True
    assert summary.drift_count == 4
    assert league.store.get_team_statistics(league.tournament_id) == []
    assert messages and messages[0].startswith("[dry-run]")
    assert len(verify_standings(league.store, league.tournament_id)) == 4

    rebuild_standings(league.store, league.tournament_id)
    assert verify_standings(league.store, league.tournament_id) == []


def test_apply_match_rejects_mismatched_outcome() -> None:
    league = _scheduled_league()
    first, second = league.store.list_matches(league.tournament_id)[:2]
    _bowl(league, first.match_id, (200, 200, 200), (150, 150, 150))
    result = compute_match_points(league.store, first.match_id)

    with pytest.raises(InvalidInputError):
        apply_match_to_standings(league.store, second.match_id, result)


def test_summarize_tournament() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    _bowl(league, match.match_id, (200, 250, 180), (150, 150, 150))
    finalize_match(league.store, match.match_id)

    summary = summarize_tournament(league.store, league.tournament_id)

    assert summary.total_teams == 4
    assert summary.total_matches == 6
    assert summary.completed_matches == 1
    assert summary.scheduled_matches == 5
    assert summary.total_games == 12
    assert summary.highest_game == 250
    assert summary.highest_series == 630
    assert summary.average_score == round((630 * 2 + 450 * 2) / 4 / 3)


def test_summary_average_rounds_half_up() -> None:
    league = _scheduled_league()
    match = league.store.list_matches(league.tournament_id)[0]
    _bowl(league, match.match_id, (183, 183, 183), (182, 182, 182))

    summary = summarize_tournament(league.store, league.tournament_id)

    assert summary.total_games == 12
    assert summary.average_score == 183
