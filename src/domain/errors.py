"""Error taxonomy for scheduling, scoring and standings."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class LeagueEngineError(Exception):
    """Base class for recoverable engine errors returned to the caller."""


class InvalidInputError(LeagueEngineError):
    """Malformed or insufficient input, such as fewer than two teams."""


class ValidationError(LeagueEngineError):
    """A submitted value is out of range or otherwise not acceptable."""


class NotRosteredError(ValidationError):
    """The player or team is not part of the match."""

    def __init__(self, message: str, *, match_id: int, team_id: int, player_id: int | None = None) -> None:
        super().__init__(message)
        self.match_id = match_id
        self.team_id = team_id
        self.player_id = player_id


class DuplicateScoreError(LeagueEngineError):
    """A score was already recorded for this player in this match."""

    def __init__(self, *, match_id: int, player_id: int) -> None:
        super().__init__(f"Score already recorded for player_id={player_id} in match_id={match_id}")
        self.match_id = match_id
        self.player_id = player_id


class ScoresIncompleteError(LeagueEngineError):
    """Match points were requested before both teams have recorded scores."""

    def __init__(self, *, match_id: int, missing_team_ids: Sequence[int]) -> None:
        missing = ", ".join(str(team_id) for team_id in missing_team_ids)
        super().__init__(f"match_id={match_id} has no recorded scores for team(s): {missing}")
        self.match_id = match_id
        self.missing_team_ids = tuple(missing_team_ids)


class ScheduleConflictError(LeagueEngineError):
    """A schedule could not be persisted or cleared."""

    def __init__(self, message: str, *, issues: Sequence[Any] = ()) -> None:
        super().__init__(message)
        self.issues = tuple(issues)


__all__ = [
    "DuplicateScoreError",
    "InvalidInputError",
    "LeagueEngineError",
    "NotRosteredError",
    "ScheduleConflictError",
    "ScoresIncompleteError",
    "ValidationError",
]
