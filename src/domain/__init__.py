"""League scheduling, scoring and standings domain modules."""

from domain.common import MatchStatus, Pairing, PlayerGameScore, Schedule, Team, TeamMatchResult, TeamStatistics
from domain.errors import LeagueEngineError

__all__ = [
    "LeagueEngineError",
    "MatchStatus",
    "Pairing",
    "PlayerGameScore",
    "Schedule",
    "Team",
    "TeamMatchResult",
    "TeamStatistics",
]
