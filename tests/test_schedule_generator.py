"""Unit tests for circle-method round robin generation."""

from __future__ import annotations

from collections import Counter

import pytest

from domain.common import Team
from domain.errors import InvalidInputError
from domain.scheduling import generate_schedule, order_teams, preview_schedule, session_count, validate_schedule


def _teams(count: int) -> list[Team]:
    return [Team(team_id=index, name=f"Team {index:02d}", seed_number=index) for index in range(1, count + 1)]


def test_four_team_example_pairings() -> None:
    schedule = generate_schedule(_teams(4))

    assert len(schedule.sessions) == 3
    assert [
        [(pairing.home_team_id, pairing.away_team_id) for pairing in session.pairings]
        for session in schedule.sessions
    ] == [
        [(1, 4), (2, 3)],
        [(1, 3), (4, 2)],
        [(1, 2), (3, 4)],
    ]
    assert all(session.bye_team_id is None for session in schedule.sessions)


def test_three_team_example_rotates_bye() -> None:
    schedule = generate_schedule(_teams(3))

    assert len(schedule.sessions) == 3
    assert schedule.total_pairings == 3
    assert schedule.bye_rotation() == {1: 1, 2: 2, 3: 3}
    for session in schedule.sessions:
        assert len(session.pairings) == 1
        assert session.bye_team_id not in session.playing_team_ids()


@pytest.mark.parametrize("team_count", range(2, 13))
def test_every_pair_meets_exactly_once(team_count: int) -> None:
    schedule = generate_schedule(_teams(team_count))

    keys = [pairing.key for pairing in schedule.pairings()]
    assert len(keys) == team_count * (team_count - 1) // 2
    assert len(set(keys)) == len(keys)
    assert len(schedule.sessions) == session_count(team_count)
    assert validate_schedule(schedule, team_count).is_valid


@pytest.mark.parametrize("team_count", [3, 5, 7, 9, 11])
def test_odd_team_counts_give_each_team_one_bye(team_count: int) -> None:
    schedule = generate_schedule(_teams(team_count))

    byes = Counter(session.bye_team_id for session in schedule.sessions)
    assert set(byes) == set(range(1, team_count + 1))
    assert set(byes.values()) == {1}


@pytest.mark.parametrize("team_count", [2, 4, 6, 8, 10, 12])
def test_even_team_counts_have_no_byes(team_count: int) -> None:
    schedule = generate_schedule(_teams(team_count))

    assert all(session.bye_team_id is None for session in schedule.sessions)
    assert all(len(session.playing_team_ids()) == team_count for session in schedule.sessions)


def test_match_numbers_are_sequential_within_session() -> None:
    schedule = generate_schedule(_teams(6))

    for session in schedule.sessions:
        assert [pairing.match_number for pairing in session.pairings] == [1, 2, 3]
        assert all(pairing.session_number == session.session_number for pairing in session.pairings)


def test_generation_is_deterministic() -> None:
    teams = _teams(7)

    assert generate_schedule(teams) == generate_schedule(list(reversed(teams)))


def test_seed_order_puts_unseeded_teams_last_by_name() -> None:
    teams = [
        Team(team_id=10, name="Zeta"),
        Team(team_id=11, name="Alpha"),
        Team(team_id=12, name="Gamma", seed_number=2),
        Team(team_id=13, name="Beta", seed_number=1),
    ]

    assert [team.team_id for team in order_teams(teams)] == [13, 12, 11, 10]


def test_override_order_fixes_first_team() -> None:
    schedule = generate_schedule(_teams(4), override_order=[3, 1, 2, 4])

    assert [team.team_id for team in schedule.teams] == [3, 1, 2, 4]
    assert all(session.pairings[0].home_team_id == 3 for session in schedule.sessions)


def test_override_order_must_be_permutation() -> None:
    with pytest.raises(InvalidInputError):
        generate_schedule(_teams(4), override_order=[1, 2, 3])
    with pytest.raises(InvalidInputError):
        generate_schedule(_teams(4), override_order=[1, 2, 3, 3])


@pytest.mark.parametrize("team_count", [0, 1])
def test_fewer_than_two_teams_rejected(team_count: int) -> None:
    with pytest.raises(InvalidInputError):
        generate_schedule(_teams(team_count))


def test_duplicate_team_ids_rejected() -> None:
    with pytest.raises(InvalidInputError):
        generate_schedule([Team(team_id=1, name="A"), Team(team_id=1, name="B")])


def test_preview_reports_counts_without_persisting() -> None:
    preview = preview_schedule(_teams(5), total_sessions=4)

    assert preview.total_teams == 5
    assert preview.has_odd_teams is True
    assert preview.sessions_required == 5
    assert preview.total_pairings == preview.expected_pairings == 10
    assert preview.matches_per_team == 4
    assert preview.pairings_per_session == 2
    assert preview.teams_per_session == 4
    assert preview.is_valid
    assert preview.can_fit_in_tournament is False


def test_preview_without_session_limit_always_fits() -> None:
    assert preview_schedule(_teams(8)).can_fit_in_tournament is True
