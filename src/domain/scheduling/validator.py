"""Completeness and conflict checks for round-robin schedules."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from itertools import combinations

from domain.common import ScheduleSession
from domain.errors import InvalidInputError
from domain.scheduling.generator import session_count


class IssueKind(str, Enum):
    TEAM_REPEATED = "team_repeated"
    BYE_CONFLICT = "bye_conflict"
    INCOMPLETE_SESSION = "incomplete_session"
    DUPLICATE_PAIRING = "duplicate_pairing"
    MISSING_PAIRING = "missing_pairing"
    SESSION_COUNT = "session_count"
    INVALID_BYE = "invalid_bye"


@dataclass(frozen=True)
class ScheduleIssue:
    kind: IssueKind
    message: str
    session_number: int | None = None
    team_ids: tuple[int, ...] = ()
    sessions: tuple[int, ...] = ()


@dataclass(frozen=True)
class ValidationReport:
    team_count: int
    issues: tuple[ScheduleIssue, ...]

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def of_kind(self, kind: IssueKind) -> list[ScheduleIssue]:
        return [issue for issue in self.issues if issue.kind == kind]


class ScheduleValidator:
    """Collects every schedule problem as data rather than raising."""

    def validate(
        self,
        sessions: Sequence[ScheduleSession],
        team_count: int,
        *,
        team_ids: Iterable[int] | None = None,
    ) -> ValidationReport:
        if sessions is None:
            raise InvalidInputError("schedule is required")
        if isinstance(team_count, bool) or not isinstance(team_count, int):
            raise InvalidInputError(f"team_count must be an integer, got {team_count!r}")
        if team_count < 2:
            raise InvalidInputError(f"team_count must be >= 2, got {team_count}")

        issues: list[ScheduleIssue] = []
        expected_playing = team_count if team_count % 2 == 0 else team_count - 1

        known_teams = None if team_ids is None else set(team_ids)

        for session in sessions:
            issues.extend(self._check_session(session, expected_playing))
            issues.extend(self._check_bye(session, team_count, known_teams))

        issues.extend(self._check_pair_coverage(sessions, team_count, known_teams))

        expected_sessions = session_count(team_count)
        if len(sessions) != expected_sessions:
            issues.append(
                ScheduleIssue(
                    kind=IssueKind.SESSION_COUNT,
                    message=f"Expected {expected_sessions} sessions for {team_count} teams, found {len(sessions)}",
                    sessions=tuple(session.session_number for session in sessions),
                )
            )

        return ValidationReport(team_count=team_count, issues=tuple(issues))

    def _check_session(self, session: ScheduleSession, expected_playing: int) -> list[ScheduleIssue]:
        issues: list[ScheduleIssue] = []
        seen: set[int] = set()
        for pairing in session.pairings:
            for team_id in pairing.team_ids:
                if team_id in seen:
                    issues.append(
                        ScheduleIssue(
                            kind=IssueKind.TEAM_REPEATED,
                            message=(
                                f"Team {team_id} plays multiple matches in session {session.session_number}"
                            ),
                            session_number=session.session_number,
                            team_ids=(team_id,),
                        )
                    )
                seen.add(team_id)

        if session.bye_team_id is not None and session.bye_team_id in seen:
            issues.append(
                ScheduleIssue(
                    kind=IssueKind.BYE_CONFLICT,
                    message=(
                        f"Team {session.bye_team_id} is both playing and on bye "
                        f"in session {session.session_number}"
                    ),
                    session_number=session.session_number,
                    team_ids=(session.bye_team_id,),
                )
            )

        if len(seen) != expected_playing:
            issues.append(
                ScheduleIssue(
                    kind=IssueKind.INCOMPLETE_SESSION,
                    message=(
                        f"Session {session.session_number} has {len(seen)} teams playing, "
                        f"expected {expected_playing}"
                    ),
                    session_number=session.session_number,
                    team_ids=tuple(sorted(seen)),
                )
            )
        return issues

    def _check_bye(
        self,
        session: ScheduleSession,
        team_count: int,
        known_teams: set[int] | None,
    ) -> list[ScheduleIssue]:
        """Odd team counts need exactly one registered bye team per session, even counts none."""
        bye = session.bye_team_id
        number = session.session_number
        if bye is None:
            if team_count % 2 == 0:
                return []
            return [
                ScheduleIssue(
                    kind=IssueKind.INVALID_BYE,
                    message=f"Session {number} has no bye team but {team_count} teams need one",
                    session_number=number,
                )
            ]

        issues: list[ScheduleIssue] = []
        if team_count % 2 == 0:
            issues.append(
                ScheduleIssue(
                    kind=IssueKind.INVALID_BYE,
                    message=f"Session {number} has bye team {bye} but {team_count} teams leave nobody idle",
                    session_number=number,
                    team_ids=(bye,),
                )
            )
        if known_teams is not None and bye not in known_teams:
            issues.append(
                ScheduleIssue(
                    kind=IssueKind.INVALID_BYE,
                    message=f"Bye team {bye} in session {number} is not in the tournament",
                    session_number=number,
                    team_ids=(bye,),
                )
            )
        return issues

        return issues

    def _check_pair_coverage(
        self,
        sessions: Sequence[ScheduleSession],
        team_count: int,
        team_ids: Iterable[int] | None,
    ) -> list[ScheduleIssue]:
        issues: list[ScheduleIssue] = []
        pair_sessions: dict[frozenset[int], list[int]] = defaultdict(list)
        observed_teams: set[int] = set()
        for session in sessions:
            if session.bye_team_id is not None:
                observed_teams.add(session.bye_team_id)
            for pairing in session.pairings:
                pair_sessions[pairing.key].append(session.session_number)
                observed_teams.update(pairing.team_ids)

        for key, session_numbers in pair_sessions.items():
            if len(session_numbers) > 1:
                pair = tuple(sorted(key))
                issues.append(
                    ScheduleIssue(
                        kind=IssueKind.DUPLICATE_PAIRING,
                        message=f"Pairing {pair[0]} vs {pair[1]} appears {len(session_numbers)} times",
                        team_ids=pair,
                        sessions=tuple(session_numbers),
                    )
                )

        universe = set(team_ids) if team_ids is not None else observed_teams
        missing_pairs = [
            (first, second)
            for first, second in combinations(sorted(universe), 2)
            if frozenset((first, second)) not in pair_sessions
        ]
        for first, second in missing_pairs:
            issues.append(
                ScheduleIssue(
                    kind=IssueKind.MISSING_PAIRING,
                    message=f"Pairing {first} vs {second} never appears",
                    team_ids=(first, second),
                )
            )

        expected_pairs = team_count * (team_count - 1) // 2
        covered_pairs = sum(1 for key in pair_sessions if key <= universe)
        unaccounted = expected_pairs - covered_pairs - len(missing_pairs)
        if unaccounted > 0:
            issues.append(
                ScheduleIssue(
                    kind=IssueKind.MISSING_PAIRING,
                    message=(
                        f"Incomplete round robin: {unaccounted} of {expected_pairs} pairings "
                        "involve teams absent from the schedule"
                    ),
                )
            )
        return issues


def validate_schedule(
    schedule,
    team_count: int,
    *,
    team_ids: Iterable[int] | None = None,
) -> ValidationReport:
    """Validate a Schedule (or a plain sequence of sessions) for team_count teams."""
    if schedule is None:
        raise InvalidInputError("schedule is required")
    sessions = getattr(schedule, "sessions", schedule)
    if team_ids is None and hasattr(schedule, "teams"):
        team_ids = [team.team_id for team in schedule.teams]
    return ScheduleValidator().validate(tuple(sessions), team_count, team_ids=team_ids)


__all__ = [
    "IssueKind",
    "ScheduleIssue",
    "ScheduleValidator",
    "ValidationReport",
    "validate_schedule",
]
