"""Schedule preview summary used before matches are persisted."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.common import Schedule, Team
from domain.scheduling.generator import generate_schedule
from domain.scheduling.validator import ValidationReport, validate_schedule


@dataclass(frozen=True)
class SchedulePreview:
    schedule: Schedule
    report: ValidationReport
    total_teams: int
    has_odd_teams: bool
    sessions_required: int
    total_pairings: int
    expected_pairings: int
    matches_per_team: int
    pairings_per_session: int
    teams_per_session: int
    sessions_available: int | None

    @property
    def can_fit_in_tournament(self) -> bool:
        if self.sessions_available is None:
            return True
        return self.sessions_available >= self.sessions_required

    @property
    def is_valid(self) -> bool:
        return self.report.is_valid


def preview_schedule(
    teams: Sequence[Team],
    *,
    total_sessions: int | None = None,
    override_order: Sequence[int] | None = None,
) -> SchedulePreview:
    """Generate and validate a schedule without persisting anything."""
    schedule = generate_schedule(teams, override_order=override_order)
    team_count = schedule.team_count
    report = validate_schedule(schedule, team_count)
    has_odd_teams = team_count % 2 == 1
    return SchedulePreview(
        schedule=schedule,
        report=report,
        total_teams=team_count,
        has_odd_teams=has_odd_teams,
        sessions_required=len(schedule.sessions),
        total_pairings=schedule.total_pairings,
        expected_pairings=team_count * (team_count - 1) // 2,
        matches_per_team=team_count - 1,
        pairings_per_session=team_count // 2,
        teams_per_session=team_count - 1 if has_odd_teams else team_count,
        sessions_available=total_sessions,
    )


__all__ = ["SchedulePreview", "preview_schedule"]
