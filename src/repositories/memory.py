"""Dictionary-backed league store for tests and dry runs."""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date

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
from domain.errors import DuplicateScoreError, InvalidInputError


@dataclass(frozen=True)
class StoredSession:
    tournament_id: int
    session_number: int
    session_date: date | None
    bye_team_id: int | None
    notes: str | None


class InMemoryLeagueStore:
    """LeagueStore implementation holding every row in process memory."""

    def __init__(self) -> None:
        self._tournaments: dict[int, TournamentRecord] = {}
        self._teams: dict[int, list[Team]] = {}
        self._rosters: dict[tuple[int, int], set[int]] = {}
        self._sessions: dict[int, list[StoredSession]] = {}
        self._matches: dict[int, MatchRecord] = {}
        self._match_names: dict[int, str | None] = {}
        self._scores: dict[int, list[PlayerGameScore]] = {}
        self._results: dict[int, TeamMatchResult] = {}
        self._team_stats: dict[tuple[int, int], TeamStatistics] = {}
        self._player_stats: dict[tuple[int, int], PlayerStatistics] = {}
        # One lock per match id, kept for the life of the store.
        self._match_locks: dict[int, threading.Lock] = {}
        self._guard = threading.Lock()
        self._next_id = 0

    # Seeding helpers
    def add_tournament(
        self,
        name: str,
        *,
        start_date: date | None = None,
        total_sessions: int | None = None,
    ) -> TournamentRecord:
        tournament = TournamentRecord(
            tournament_id=self._allocate_id(),
            name=name,
            start_date=start_date,
            total_sessions=total_sessions,
        )
        self._tournaments[tournament.tournament_id] = tournament
        self._teams[tournament.tournament_id] = []
        return tournament

    def add_team(self, tournament_id: int, name: str, *, seed_number: int | None = None) -> Team:
        self._require_tournament(tournament_id)
        team = Team(team_id=self._allocate_id(), name=name, seed_number=seed_number)
        self._teams[tournament_id].append(team)
        return team

    def add_player(self, tournament_id: int, team_id: int) -> int:
        """Create a player and roster them to one team for the tournament."""
        if team_id not in {team.team_id for team in self._teams.get(tournament_id, [])}:
            raise InvalidInputError(f"team_id={team_id} is not registered in tournament_id={tournament_id}")
        player_id = self._allocate_id()
        self._rosters.setdefault((tournament_id, team_id), set()).add(player_id)
        return player_id

    def list_sessions(self, tournament_id: int) -> list[StoredSession]:
        return list(self._sessions.get(tournament_id, []))

    def match_name(self, match_id: int) -> str | None:
        return self._match_names.get(match_id)

    # Tournaments and schedule
    def get_tournament(self, tournament_id: int) -> TournamentRecord | None:
        return self._tournaments.get(tournament_id)

    def list_tournament_teams(self, tournament_id: int) -> list[Team]:
        return sorted(self._teams.get(tournament_id, []), key=Team.sort_key)

    def set_total_sessions(self, tournament_id: int, total_sessions: int) -> None:
        tournament = self._require_tournament(tournament_id)
        self._tournaments[tournament_id] = replace(tournament, total_sessions=total_sessions)

    def create_session(
        self,
        tournament_id: int,
        *,
        session_number: int,
        session_date: date | None,
        bye_team_id: int | None,
        notes: str | None,
    ) -> None:
        self._require_tournament(tournament_id)
        self._sessions.setdefault(tournament_id, []).append(
            StoredSession(
                tournament_id=tournament_id,
                session_number=session_number,
                session_date=session_date,
                bye_team_id=bye_team_id,
                notes=notes,
            )
        )

    def create_match(
        self,
        tournament_id: int,
        pairing: Pairing,
        *,
        match_date: date | None,
        match_name: str | None,
    ) -> MatchRecord:
        self._require_tournament(tournament_id)
        match = MatchRecord(
            match_id=self._allocate_id(),
            tournament_id=tournament_id,
            home_team_id=pairing.home_team_id,
            away_team_id=pairing.away_team_id,
            session_number=pairing.session_number,
            match_date=match_date,
        )
        self._matches[match.match_id] = match
        self._match_names[match.match_id] = match_name
        return match

    def delete_schedule(self, tournament_id: int) -> tuple[int, int]:
        match_ids = [match_id for match_id, match in self._matches.items() if match.tournament_id == tournament_id]
        for match_id in match_ids:
            del self._matches[match_id]
            self._match_names.pop(match_id, None)
            self._results.pop(match_id, None)
        removed_sessions = len(self._sessions.pop(tournament_id, []))
        return len(match_ids), removed_sessions

    def list_matches(self, tournament_id: int) -> list[MatchRecord]:
        return sorted(
            (match for match in self._matches.values() if match.tournament_id == tournament_id),
            key=lambda match: (match.session_number or 0, match.match_id),
        )

    # Matches and scores
    def get_match(self, match_id: int) -> MatchRecord | None:
        return self._matches.get(match_id)

    @contextmanager
    def lock_match(self, match_id: int) -> Iterator[None]:
        with self._guard:
            lock = self._match_locks.setdefault(match_id, threading.Lock())
        with lock:
            yield

    def get_roster(self, match_id: int) -> MatchRoster:
        match = self._matches[match_id]
        return MatchRoster(
            match_id=match_id,
            home_team_id=match.home_team_id,
            away_team_id=match.away_team_id,
            home_player_ids=frozenset(self._rosters.get((match.tournament_id, match.home_team_id), ())),
            away_player_ids=frozenset(self._rosters.get((match.tournament_id, match.away_team_id), ())),
        )

    def has_player_score(self, match_id: int, player_id: int) -> bool:
        return any(score.player_id == player_id for score in self._scores.get(match_id, []))

    def add_player_score(self, score: PlayerGameScore) -> None:
        if self.has_player_score(score.match_id, score.player_id):
            raise DuplicateScoreError(match_id=score.match_id, player_id=score.player_id)
        self._scores.setdefault(score.match_id, []).append(score)

    def list_player_scores(self, match_id: int) -> list[PlayerGameScore]:
        return list(self._scores.get(match_id, []))

    def list_tournament_player_scores(
        self,
        tournament_id: int,
        *,
        completed_only: bool = True,
    ) -> list[PlayerGameScore]:
        return [
            score
            for match in self.list_matches(tournament_id)
            if not completed_only or match.status == MatchStatus.COMPLETED
            for score in self._scores.get(match.match_id, [])
        ]

    def set_match_outcome(self, match_id: int, *, status: MatchStatus, winner_team_id: int | None) -> None:
        self._matches[match_id] = replace(self._matches[match_id], status=status, winner_team_id=winner_team_id)

    def set_match_status(self, match_id: int, status: MatchStatus) -> None:
        self._matches[match_id] = replace(self._matches[match_id], status=status)

    def upsert_match_result(self, result: TeamMatchResult) -> None:
        self._results[result.match_id] = result

    def get_match_result(self, match_id: int) -> TeamMatchResult | None:
        return self._results.get(match_id)

    def list_match_results(self, tournament_id: int, *, completed_only: bool = True) -> list[TeamMatchResult]:
        return [
            self._results[match.match_id]
            for match in self.list_matches(tournament_id)
            if match.match_id in self._results and (not completed_only or match.status == MatchStatus.COMPLETED)
        ]

    # Statistics
    def get_team_statistics(self, tournament_id: int) -> list[TeamStatistics]:
        rows = [stats for (owner_id, _), stats in self._team_stats.items() if owner_id == tournament_id]
        return sorted(rows, key=lambda stats: (stats.rank is None, stats.rank or 0, stats.team_id))

    def upsert_team_statistics(self, stats: Sequence[TeamStatistics]) -> None:
        for item in stats:
            self._team_stats[(item.tournament_id, item.team_id)] = item

    def replace_team_statistics(self, tournament_id: int, stats: Sequence[TeamStatistics]) -> None:
        for key in [key for key in self._team_stats if key[0] == tournament_id]:
            del self._team_stats[key]
        self.upsert_team_statistics(stats)

    def get_player_statistics(self, tournament_id: int) -> list[PlayerStatistics]:
        rows = [stats for (owner_id, _), stats in self._player_stats.items() if owner_id == tournament_id]
        return sorted(rows, key=lambda stats: stats.player_id)

    def upsert_player_statistics(self, stats: Sequence[PlayerStatistics]) -> None:
        for item in stats:
            self._player_stats[(item.tournament_id, item.player_id)] = item

    def replace_player_statistics(self, tournament_id: int, stats: Sequence[PlayerStatistics]) -> None:
        for key in [key for key in self._player_stats if key[0] == tournament_id]:
            del self._player_stats[key]
        self.upsert_player_statistics(stats)

    def _allocate_id(self) -> int:
        with self._guard:
            self._next_id += 1
            return self._next_id

    def _require_tournament(self, tournament_id: int) -> TournamentRecord:
        tournament = self._tournaments.get(tournament_id)
        if tournament is None:
            raise InvalidInputError(f"tournament_id={tournament_id} not found")
        return tournament


__all__ = ["InMemoryLeagueStore", "StoredSession"]
