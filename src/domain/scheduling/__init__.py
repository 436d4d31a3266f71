"""Round-robin scheduling."""

from domain.scheduling.generator import ScheduleGenerator, generate_schedule, order_teams, session_count
from domain.scheduling.preview import SchedulePreview, preview_schedule
from domain.scheduling.validator import (
    IssueKind,
    ScheduleIssue,
    ScheduleValidator,
    ValidationReport,
    validate_schedule,
)

__all__ = [
    "IssueKind",
    "ScheduleGenerator",
    "ScheduleIssue",
    "SchedulePreview",
    "ScheduleValidator",
    "ValidationReport",
    "generate_schedule",
    "order_teams",
    "preview_schedule",
    "session_count",
    "validate_schedule",
]
