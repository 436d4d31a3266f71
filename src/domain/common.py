"""Shared value types for scheduling, scoring and standings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from domain.errors import InvalidInputError

GAMES_PER_SERIES = 3
POINTS_PER_MATCH = GAMES_PER_SERIES + 1


class MatchStatus(str, Enum):
    """Lifecycle status persisted on a match row."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class MatchState(str, Enum):
    """Scoring progress of a single match."""

    AWAITING_SCORES = "awaiting_scores"
    PARTIALLY_SCORED = "partially_scored"
    BOTH_TEAMS_SCORED = "both_teams_scored"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class Team:
    """A registered team; seed_number drives the default schedule order."""

    team_id: int
    name: str
    seed_number: int | None = None

    def sort_key(self) -> tuple[int, int, str, int]:
        if self.seed_number is None:
            return (1, 0, self.name, self.team_id)
        return (0, self.seed_number, self.name, self.team_id)


@dataclass(frozen=True)
class Pairing:
    session_number: int
    home_team_id: int
    away_team_id: int
    match_number: int = 1

    def __post_init__(self) -> None:
        if self.home_team_id == self.away_team_id:
            raise InvalidInputError(
                f"session {self.session_number} pairs team_id={self.home_team_id} with itself"
            )

    @property
    def key(self) -> frozenset[int]:
        """Unordered identity of the pairing."""
        return frozenset((self.home_team_id, self.away_team_id))

    @property
    def team_ids(self) -> tuple[int, int]:
        return (self.home_team_id, self.away_team_id)


@dataclass(frozen=True)
class ScheduleSession:
    session_number: int
    pairings: tuple[Pairing, ...]
    bye_team_id: int | None = None

    def playing_team_ids(self) -> set[int]:
        return {team_id for pairing in self.pairings for team_id in pairing.team_ids}


@dataclass(frozen=True)
class Schedule:
    """Round-robin plan: ordered teams and their sessions."""

    teams: tuple[Team, ...]
    sessions: tuple[ScheduleSession, ...]

    @property
    def team_count(self) -> int:
        return len(self.teams)

    @property
    def total_pairings(self) -> int:
        return sum(len(session.pairings) for session in self.sessions)

    def pairings(self) -> list[Pairing]:
        return [pairing for session in self.sessions for pairing in session.pairings]

    def bye_rotation(self) -> dict[int, int | None]:
        """Map session number to the team sitting out that session."""
        return {session.session_number: session.bye_team_id for session in self.sessions}

    def team_names(self) -> dict[int, str]:
        return {team.team_id: team.name for team in self.teams}


@dataclass(frozen=True)
class PlayerGameScore:
    """One bowler's three-game series for one match."""

    match_id: int
    player_id: int
    team_id: int
    game1: int
    game2: int
    game3: int
    handicap: int = 0

    @property
    def games(self) -> tuple[int, int, int]:
        return (self.game1, self.game2, self.game3)

    @property
    def series_total(self) -> int:
        return self.game1 + self.game2 + self.game3

    @property
    def final_total(self) -> int:
        return self.series_total + self.handicap

    @property
    def highest_game(self) -> int:
        return max(self.games)


@dataclass(frozen=True)
class SideResult:
    """Aggregated scores and points for one team in one match."""

    team_id: int
    game_totals: tuple[int, int, int]
    scratch_total: int
    handicap_total: int
    players_bowled: int
    game_points: tuple[int, int, int]
    series_point: int

    @property
    def final_score(self) -> int:
        return self.scratch_total + self.handicap_total

    @property
    def total_points(self) -> int:
        return sum(self.game_points) + self.series_point

    @property
    def games_bowled(self) -> int:
        return self.players_bowled * GAMES_PER_SERIES


@dataclass(frozen=True)
class TeamMatchResult:
    """Outcome of one scored match; winner_team_id is None on a tie."""

    match_id: int
    tournament_id: int
    home: SideResult
    away: SideResult
    winner_team_id: int | None

    @property
    def home_team_id(self) -> int:
        return self.home.team_id

    @property
    def away_team_id(self) -> int:
        return self.away.team_id

    @property
    def home_points(self) -> int:
        return self.home.total_points

    @property
    def away_points(self) -> int:
        return self.away.total_points

    @property
    def is_tie(self) -> bool:
        return self.winner_team_id is None

    def side(self, team_id: int) -> SideResult:
        if team_id == self.home.team_id:
            return self.home
        if team_id == self.away.team_id:
            return self.away
        raise KeyError(f"team_id={team_id} did not play match_id={self.match_id}")

    def opponent(self, team_id: int) -> SideResult:
        return self.away if self.side(team_id) is self.home else self.home


@dataclass(frozen=True)
class TournamentRecord:
    tournament_id: int
    name: str
    start_date: date | None = None
    total_sessions: int | None = None


@dataclass(frozen=True)
class MatchRecord:
    """Match row as seen by the engine."""

    match_id: int
    tournament_id: int
    home_team_id: int
    away_team_id: int
    session_number: int | None = None
    status: MatchStatus = MatchStatus.SCHEDULED
    winner_team_id: int | None = None
    match_date: date | None = None

    @property
    def team_ids(self) -> tuple[int, int]:
        return (self.home_team_id, self.away_team_id)


@dataclass(frozen=True)
class MatchRoster:
    """Players eligible to bowl for each side of a match."""

    match_id: int
    home_team_id: int
    away_team_id: int
    home_player_ids: frozenset[int] = field(default_factory=frozenset)
    away_player_ids: frozenset[int] = field(default_factory=frozenset)

    def players_for(self, team_id: int) -> frozenset[int]:
        if team_id == self.home_team_id:
            return self.home_player_ids
        if team_id == self.away_team_id:
            return self.away_player_ids
        return frozenset()


@dataclass(frozen=True)
class TeamStatistics:
    """Cumulative per-tournament team record."""

    tournament_id: int
    team_id: int
    team_name: str
    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    matches_tied: int = 0
    games_played: int = 0
    total_pins: int = 0
    total_score: int = 0
    total_points: int = 0
    rank: int | None = None

    @property
    def average(self) -> float:
        if self.games_played <= 0:
            return 0.0
        return round(self.total_pins / self.games_played, 2)

    @property
    def points_percentage(self) -> float:
        if self.matches_played <= 0:
            return 0.0
        return round(self.total_points / (self.matches_played * POINTS_PER_MATCH) * 100.0, 2)


@dataclass(frozen=True)
class PlayerStatistics:
    """Cumulative per-tournament bowler record."""

    tournament_id: int
    player_id: int
    team_id: int
    matches_played: int = 0
    games_played: int = 0
    total_pins: int = 0
    highest_game: int = 0
    highest_series: int = 0

    @property
    def average(self) -> float:
        if self.games_played <= 0:
            return 0.0
        return round(self.total_pins / self.games_played, 2)


__all__ = [
    "GAMES_PER_SERIES",
    "POINTS_PER_MATCH",
    "MatchRecord",
    "MatchRoster",
    "MatchState",
    "MatchStatus",
    "Pairing",
    "PlayerGameScore",
    "PlayerStatistics",
    "Schedule",
    "ScheduleSession",
    "SideResult",
    "Team",
    "TeamMatchResult",
    "TeamStatistics",
    "TournamentRecord",
]
