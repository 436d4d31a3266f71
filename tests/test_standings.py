"""Unit tests for standings aggregation and ranking."""

from __future__ import annotations

import itertools

import pytest

from domain.common import PlayerGameScore, TeamStatistics
from domain.scoring import MatchScorer
from domain.standings import (
    apply_match,
    compare_standings,
    rank_standings,
    recompute_player_statistics,
    recompute_standings,
)

NAMES = {1: "Alley Cats", 2: "Pin Pals", 3: "Split Happens"}


def _result(match_id: int, home: int, away: int, home_games: tuple[int, int, int], away_games: tuple[int, int, int]):
    scores = [
        PlayerGameScore(match_id, home * 10, home, *home_games),
        PlayerGameScore(match_id, away * 10, away, *away_games),
    ]
    return MatchScorer().score_match(
        match_id=match_id,
        tournament_id=5,
        home_team_id=home,
        away_team_id=away,
        scores=scores,
    )


HISTORY = [
    _result(1, 1, 2, (200, 200, 200), (150, 150, 150)),
    _result(2, 2, 3, (180, 160, 170), (170, 190, 150)),
    _result(3, 3, 1, (210, 150, 160), (150, 210, 160)),
]


def test_recompute_counts_wins_losses_and_pins() -> None:
    standings = {item.team_id: item for item in recompute_standings(5, HISTORY, NAMES)}

    team1 = standings[1]
    assert team1.matches_played == 2
    assert team1.matches_won == 1
    assert team1.matches_tied == 1
    assert team1.matches_lost == 0
    assert team1.games_played == 6
    assert team1.total_pins == 600 + 520
    assert team1.total_points == 4 + 1
    assert team1.average == pytest.approx(round(1120 / 6, 2))
    assert team1.points_percentage == pytest.approx(62.5)

    assert standings[2].matches_lost == 1
    assert standings[3].matches_tied == 1


def test_match_tie_counts_as_neither_win_nor_loss() -> None:
    tied = _result(7, 1, 2, (200, 150, 180), (150, 200, 180))
    stats = apply_match({}, tied, NAMES)

    for team_id in (1, 2):
        assert stats[team_id].matches_tied == 1
        assert stats[team_id].matches_won == 0
        assert stats[team_id].matches_lost == 0


def test_incremental_equals_recompute_for_every_order() -> None:
    expected = recompute_standings(5, HISTORY, NAMES)

    for ordering in itertools.permutations(HISTORY):
        stats: dict[int, TeamStatistics] = {}
        for result in ordering:
            stats = apply_match(stats, result, NAMES)
        assert rank_standings(stats.values()) == expected


def test_ranking_tie_breakers() -> None:
    rows = [
        TeamStatistics(tournament_id=5, team_id=1, team_name="Bravo", total_points=8, total_score=1500),
        TeamStatistics(tournament_id=5, team_id=2, team_name="Alpha", total_points=8, total_score=1500),
        TeamStatistics(tournament_id=5, team_id=3, team_name="Charlie", total_points=8, total_score=1600),
        TeamStatistics(tournament_id=5, team_id=4, team_name="Delta", total_points=9, total_score=1000),
    ]

    ranked = rank_standings(rows)

    assert [(item.team_id, item.rank) for item in ranked] == [(4, 1), (3, 2), (2, 3), (1, 4)]


def test_teams_without_matches_get_empty_rows() -> None:
    standings = recompute_standings(5, HISTORY[:1], {**NAMES, 4: "Zebra Lanes"})

    idle = next(item for item in standings if item.team_id == 4)
    assert idle.matches_played == 0
    assert idle.average == 0.0
    assert idle.points_percentage == 0.0
    assert idle.rank == 4


def test_other_tournament_results_ignored() -> None:
    assert all(item.matches_played == 0 for item in recompute_standings(6, HISTORY, NAMES))


def test_player_statistics_track_highs() -> None:
    scores = [
        PlayerGameScore(1, 10, 1, 200, 250, 190),
        PlayerGameScore(2, 10, 1, 220, 230, 240),
        PlayerGameScore(1, 20, 2, 150, 150, 150),
    ]

    players = recompute_player_statistics(5, scores)

    assert [item.player_id for item in players] == [10, 20]
    top = players[0]
    assert top.matches_played == 2
    assert top.games_played == 6
    assert top.total_pins == 640 + 690
    assert top.highest_game == 250
    assert top.highest_series == 690
    assert top.average == pytest.approx(221.67)


def test_compare_standings_reports_drift() -> None:
    recomputed = recompute_standings(5, HISTORY, NAMES)
    stored = [item if item.team_id != 2 else TeamStatistics(5, 2, "Pin Pals") for item in recomputed]

    drifts = compare_standings(stored, recomputed)

    assert {drift.team_id for drift in drifts} == {2}
    assert "matches_played" in {drift.field_name for drift in drifts}
    assert compare_standings(recomputed, recomputed) == []
