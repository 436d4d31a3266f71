"""Store contract the engine pipeline is injected with."""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from datetime import date
from typing import Protocol, runtime_checkable

from domain.common import (
    MatchRecord,
    MatchRoster,
    MatchStatus,
    Pairing,
    PlayerGameScore,
    PlayerStatistics,
    Team,
    TeamMatchResult,
    TeamStatistics,
    TournamentRecord,
)


@runtime_checkable
class LeagueStore(Protocol):
    """Persistence collaborator; writes are keyed by match/team/player ids."""

    # Tournaments and schedule
    def get_tournament(self, tournament_id: int) -> TournamentRecord | None: ...

    def list_tournament_teams(self, tournament_id: int) -> list[Team]: ...

    def set_total_sessions(self, tournament_id: int, total_sessions: int) -> None: ...

    def create_session(
        self,
        tournament_id: int,
        *,
        session_number: int,
        session_date: date | None,
        bye_team_id: int | None,
        notes: str | None,
    ) -> None: ...

    def create_match(
        self,
        tournament_id: int,
        pairing: Pairing,
        *,
        match_date: date | None,
        match_name: str | None,
    ) -> MatchRecord: ...

    def delete_schedule(self, tournament_id: int) -> tuple[int, int]: ...

    def list_matches(self, tournament_id: int) -> list[MatchRecord]: ...

    # Matches and scores
    def get_match(self, match_id: int) -> MatchRecord | None: ...

    def lock_match(self, match_id: int) -> AbstractContextManager[None]: ...

    def get_roster(self, match_id: int) -> MatchRoster: ...

    def has_player_score(self, match_id: int, player_id: int) -> bool: ...

    def add_player_score(self, score: PlayerGameScore) -> None: ...

    def list_player_scores(self, match_id: int) -> list[PlayerGameScore]: ...

    def list_tournament_player_scores(
        self,
        tournament_id: int,
        *,
        completed_only: bool = True,
    ) -> list[PlayerGameScore]: ...

    def set_match_outcome(self, match_id: int, *, status: MatchStatus, winner_team_id: int | None) -> None: ...

    def upsert_match_result(self, result: TeamMatchResult) -> None: ...

    def get_match_result(self, match_id: int) -> TeamMatchResult | None: ...

    def list_match_results(self, tournament_id: int, *, completed_only: bool = True) -> list[TeamMatchResult]: ...

    # Statistics
    def get_team_statistics(self, tournament_id: int) -> list[TeamStatistics]: ...

    def upsert_team_statistics(self, stats: Sequence[TeamStatistics]) -> None: ...

    def replace_team_statistics(self, tournament_id: int, stats: Sequence[TeamStatistics]) -> None: ...

    def get_player_statistics(self, tournament_id: int) -> list[PlayerStatistics]: ...

    def upsert_player_statistics(self, stats: Sequence[PlayerStatistics]) -> None: ...

    def replace_player_statistics(self, tournament_id: int, stats: Sequence[PlayerStatistics]) -> None: ...


__all__ = ["LeagueStore"]
