"""ORM models."""

from models.base import Base
from models.match import Match, PlayerMatchScore, TeamMatchScore
from models.statistics import PlayerStatisticsRecord, TeamStatisticsRecord
from models.team import Player, Team, TeamPlayer
from models.tournament import LeagueSession, Tournament, TournamentTeam

__all__ = [
    "Base",
    "LeagueSession",
    "Match",
    "Player",
    "PlayerMatchScore",
    "PlayerStatisticsRecord",
    "Team",
    "TeamMatchScore",
    "TeamPlayer",
    "TeamStatisticsRecord",
    "Tournament",
    "TournamentTeam",
]
