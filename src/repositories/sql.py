"""SQLAlchemy-backed league store."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from domain import common
from domain.errors import DuplicateScoreError, InvalidInputError
from models import (
    Base,
    LeagueSession,
    Match,
    PlayerMatchScore,
    PlayerStatisticsRecord,
    Team,
    TeamMatchScore,
    TeamPlayer,
    TeamStatisticsRecord,
    Tournament,
    TournamentTeam,
)
from repositories.base import BaseStatisticsRepository


def _team_stats_to_row(stats: common.TeamStatistics) -> dict[str, Any]:
    return {
        "tournament_id": stats.tournament_id,
        "team_id": stats.team_id,
        "total_matches_played": stats.matches_played,
        "matches_won": stats.matches_won,
        "matches_lost": stats.matches_lost,
        "matches_tied": stats.matches_tied,
        "games_played": stats.games_played,
        "total_pins": stats.total_pins,
        "total_team_score": stats.total_score,
        "total_points": stats.total_points,
        "rank_position": stats.rank,
    }


def _row_to_team_stats(row: TeamStatisticsRecord) -> common.TeamStatistics:
    # team_name is filled in by the store from the teams table.
    return common.TeamStatistics(
        tournament_id=row.tournament_id,
        team_id=row.team_id,
        team_name="",
        matches_played=row.total_matches_played,
        matches_won=row.matches_won,
        matches_lost=row.matches_lost,
        matches_tied=row.matches_tied,
        games_played=row.games_played,
        total_pins=row.total_pins,
        total_score=row.total_team_score,
        total_points=row.total_points,
        rank=row.rank_position,
    )


def _player_stats_to_row(stats: common.PlayerStatistics) -> dict[str, Any]:
    return {
        "tournament_id": stats.tournament_id,
        "player_id": stats.player_id,
        "team_id": stats.team_id,
        "matches_played": stats.matches_played,
        "games_played": stats.games_played,
        "total_pins": stats.total_pins,
        "highest_game": stats.highest_game,
        "highest_series": stats.highest_series,
    }


def _row_to_player_stats(row: PlayerStatisticsRecord) -> common.PlayerStatistics:
    return common.PlayerStatistics(
        tournament_id=row.tournament_id,
        player_id=row.player_id,
        team_id=row.team_id,
        matches_played=row.matches_played,
        games_played=row.games_played,
        total_pins=row.total_pins,
        highest_game=row.highest_game,
        highest_series=row.highest_series,
    )


TEAM_STATISTICS_REPOSITORY = BaseStatisticsRepository[TeamStatisticsRecord, common.TeamStatistics](
    row_model=TeamStatisticsRecord,
    entity_id_column="team_id",
    stats_to_row=_team_stats_to_row,
    row_to_stats=_row_to_team_stats,
    entity_id_of=lambda stats: stats.team_id,
)

PLAYER_STATISTICS_REPOSITORY = BaseStatisticsRepository[PlayerStatisticsRecord, common.PlayerStatistics](
    row_model=PlayerStatisticsRecord,
    entity_id_column="player_id",
    stats_to_row=_player_stats_to_row,
    row_to_stats=_row_to_player_stats,
    entity_id_of=lambda stats: stats.player_id,
)


def ensure_league_schema(engine: Engine) -> None:
    """Create all league tables and indexes if they do not exist."""
    Base.metadata.create_all(bind=engine, checkfirst=True)


def _to_match_record(row: Match) -> common.MatchRecord:
    return common.MatchRecord(
        match_id=row.id,
        tournament_id=row.tournament_id,
        home_team_id=row.home_team_id,
        away_team_id=row.away_team_id,
        session_number=row.session_number,
        status=common.MatchStatus(row.status),
        winner_team_id=row.winner_team_id,
        match_date=row.match_date,
    )


def _to_player_score(row: PlayerMatchScore) -> common.PlayerGameScore:
    return common.PlayerGameScore(
        match_id=row.match_id,
        player_id=row.player_id,
        team_id=row.team_id,
        game1=row.game1_score,
        game2=row.game2_score,
        game3=row.game3_score,
        handicap=row.handicap_applied,
    )


def _to_side(row: TeamMatchScore) -> common.SideResult:
    return common.SideResult(
        team_id=row.team_id,
        game_totals=(row.game1_total, row.game2_total, row.game3_total),
        scratch_total=row.total_team_score,
        handicap_total=row.total_handicap,
        players_bowled=row.players_bowled,
        game_points=(row.game1_point, row.game2_point, row.game3_point),
        series_point=row.series_point,
    )


def _side_payload(side: common.SideResult, *, is_home: bool) -> dict[str, Any]:
    return {
        "is_home": is_home,
        "game1_total": side.game_totals[0],
        "game2_total": side.game_totals[1],
        "game3_total": side.game_totals[2],
        "total_team_score": side.scratch_total,
        "total_handicap": side.handicap_total,
        "players_bowled": side.players_bowled,
        "game1_point": side.game_points[0],
        "game2_point": side.game_points[1],
        "game3_point": side.game_points[2],
        "series_point": side.series_point,
        "total_points": side.total_points,
    }


class SqlLeagueStore:
    """LeagueStore over one SQLAlchemy session; callers own commit/rollback."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # Tournaments and schedule
    def get_tournament(self, tournament_id: int) -> common.TournamentRecord | None:
        row = self.session.get(Tournament, tournament_id)
        if row is None:
            return None
        return common.TournamentRecord(
            tournament_id=row.id,
            name=row.name,
            start_date=row.start_date,
            total_sessions=row.total_sessions,
        )

    def list_tournament_teams(self, tournament_id: int) -> list[common.Team]:
        rows = self.session.execute(
            select(Team.id, Team.name, TournamentTeam.seed_number)
            .join(TournamentTeam, TournamentTeam.team_id == Team.id)
            .where(TournamentTeam.tournament_id == tournament_id)
        ).all()
        teams = [common.Team(team_id=row.id, name=row.name, seed_number=row.seed_number) for row in rows]
        return sorted(teams, key=common.Team.sort_key)

    def set_total_sessions(self, tournament_id: int, total_sessions: int) -> None:
        tournament = self.session.get(Tournament, tournament_id)
        if tournament is None:
            raise InvalidInputError(f"tournament_id={tournament_id} not found")
        tournament.total_sessions = total_sessions
        tournament.updated_at = datetime.now(UTC).replace(tzinfo=None)
        self.session.flush()

    def create_session(
        self,
        tournament_id: int,
        *,
        session_number: int,
        session_date: date | None,
        bye_team_id: int | None,
        notes: str | None,
    ) -> None:
        self.session.add(
            LeagueSession(
                tournament_id=tournament_id,
                session_number=session_number,
                session_name=f"Session {session_number}",
                session_date=session_date,
                bye_team_id=bye_team_id,
                notes=notes,
            )
        )
        self.session.flush()

    def create_match(
        self,
        tournament_id: int,
        pairing: common.Pairing,
        *,
        match_date: date | None,
        match_name: str | None,
    ) -> common.MatchRecord:
        session_id = self.session.execute(
            select(LeagueSession.id).where(
                LeagueSession.tournament_id == tournament_id,
                LeagueSession.session_number == pairing.session_number,
            )
        ).scalar_one_or_none()
        row = Match(
            tournament_id=tournament_id,
            session_id=session_id,
            session_number=pairing.session_number,
            home_team_id=pairing.home_team_id,
            away_team_id=pairing.away_team_id,
            status=common.MatchStatus.SCHEDULED.value,
            match_date=match_date,
            match_name=match_name,
        )
        self.session.add(row)
        self.session.flush()
        return _to_match_record(row)

    def delete_schedule(self, tournament_id: int) -> tuple[int, int]:
        match_ids = select(Match.id).where(Match.tournament_id == tournament_id)
        self.session.execute(delete(TeamMatchScore).where(TeamMatchScore.match_id.in_(match_ids)))
        removed_matches = self.session.execute(delete(Match).where(Match.tournament_id == tournament_id)).rowcount
        removed_sessions = self.session.execute(
            delete(LeagueSession).where(LeagueSession.tournament_id == tournament_id)
        ).rowcount
        self.session.flush()
        return int(removed_matches or 0), int(removed_sessions or 0)

    def list_matches(self, tournament_id: int) -> list[common.MatchRecord]:
        rows = self.session.execute(
            select(Match)
            .where(Match.tournament_id == tournament_id)
            .order_by(func.coalesce(Match.session_number, 0), Match.id)
        ).scalars()
        return [_to_match_record(row) for row in rows]

    # Matches and scores
    def get_match(self, match_id: int) -> common.MatchRecord | None:
        row = self.session.get(Match, match_id)
        return None if row is None else _to_match_record(row)

    @contextmanager
    def lock_match(self, match_id: int) -> Iterator[None]:
        """Hold a row lock on the match for the rest of the transaction."""
        self.session.execute(select(Match.id).where(Match.id == match_id).with_for_update(nowait=False))
        yield

    def get_roster(self, match_id: int) -> common.MatchRoster:
        match = self.session.get(Match, match_id)
        if match is None:
            raise InvalidInputError(f"match_id={match_id} not found")
        rows = self.session.execute(
            select(TeamPlayer.team_id, TeamPlayer.player_id).where(
                TeamPlayer.tournament_id == match.tournament_id,
                TeamPlayer.team_id.in_((match.home_team_id, match.away_team_id)),
                TeamPlayer.is_active.is_(True),
            )
        ).all()
        return common.MatchRoster(
            match_id=match_id,
            home_team_id=match.home_team_id,
            away_team_id=match.away_team_id,
            home_player_ids=frozenset(row.player_id for row in rows if row.team_id == match.home_team_id),
            away_player_ids=frozenset(row.player_id for row in rows if row.team_id == match.away_team_id),
        )

    def has_player_score(self, match_id: int, player_id: int) -> bool:
        found = self.session.execute(
            select(PlayerMatchScore.id).where(
                PlayerMatchScore.match_id == match_id,
                PlayerMatchScore.player_id == player_id,
            )
        ).first()
        return found is not None

    def add_player_score(self, score: common.PlayerGameScore) -> None:
        if self.has_player_score(score.match_id, score.player_id):
            raise DuplicateScoreError(match_id=score.match_id, player_id=score.player_id)
        self.session.add(
            PlayerMatchScore(
                match_id=score.match_id,
                team_id=score.team_id,
                player_id=score.player_id,
                game1_score=score.game1,
                game2_score=score.game2,
                game3_score=score.game3,
                handicap_applied=score.handicap,
            )
        )
        self.session.flush()

    def list_player_scores(self, match_id: int) -> list[common.PlayerGameScore]:
        rows = self.session.execute(
            select(PlayerMatchScore).where(PlayerMatchScore.match_id == match_id).order_by(PlayerMatchScore.id)
        ).scalars()
        return [_to_player_score(row) for row in rows]

    def list_tournament_player_scores(
        self,
        tournament_id: int,
        *,
        completed_only: bool = True,
    ) -> list[common.PlayerGameScore]:
        statement = (
            select(PlayerMatchScore)
            .join(Match, Match.id == PlayerMatchScore.match_id)
            .where(Match.tournament_id == tournament_id)
            .order_by(PlayerMatchScore.match_id, PlayerMatchScore.id)
        )
        if completed_only:
            statement = statement.where(Match.status == common.MatchStatus.COMPLETED.value)
        return [_to_player_score(row) for row in self.session.execute(statement).scalars()]

    def set_match_outcome(
        self,
        match_id: int,
        *,
        status: common.MatchStatus,
        winner_team_id: int | None,
    ) -> None:
        match = self.session.get(Match, match_id)
        if match is None:
            raise InvalidInputError(f"match_id={match_id} not found")
        match.status = status.value
        match.winner_team_id = winner_team_id
        match.updated_at = datetime.now(UTC).replace(tzinfo=None)
        self.session.flush()

    def upsert_match_result(self, result: common.TeamMatchResult) -> None:
        for side, is_home in ((result.home, True), (result.away, False)):
            payload = _side_payload(side, is_home=is_home)
            row = self.session.execute(
                select(TeamMatchScore).where(
                    TeamMatchScore.match_id == result.match_id,
                    TeamMatchScore.team_id == side.team_id,
                )
            ).scalar_one_or_none()
            if row is None:
                self.session.add(TeamMatchScore(match_id=result.match_id, team_id=side.team_id, **payload))
                continue
            for key, value in payload.items():
                setattr(row, key, value)
            row.recorded_at = datetime.now(UTC).replace(tzinfo=None)
        self.session.flush()

    def get_match_result(self, match_id: int) -> common.TeamMatchResult | None:
        match = self.session.get(Match, match_id)
        if match is None:
            return None
        rows = self.session.execute(select(TeamMatchScore).where(TeamMatchScore.match_id == match_id)).scalars()
        return self._assemble_result(match, list(rows))

    def list_match_results(
        self,
        tournament_id: int,
        *,
        completed_only: bool = True,
    ) -> list[common.TeamMatchResult]:
        statement = (
            select(Match, TeamMatchScore)
            .join(TeamMatchScore, TeamMatchScore.match_id == Match.id)
            .where(Match.tournament_id == tournament_id)
            .order_by(func.coalesce(Match.session_number, 0), Match.id)
        )
        if completed_only:
            statement = statement.where(Match.status == common.MatchStatus.COMPLETED.value)

        grouped: dict[int, tuple[Match, list[TeamMatchScore]]] = {}
        for match, side_row in self.session.execute(statement).all():
            grouped.setdefault(match.id, (match, []))[1].append(side_row)

        results: list[common.TeamMatchResult] = []
        for match, side_rows in grouped.values():
            result = self._assemble_result(match, side_rows)
            if result is not None:
                results.append(result)
        return results

    # Statistics
    def get_team_statistics(self, tournament_id: int) -> list[common.TeamStatistics]:
        names = dict(
            self.session.execute(
                select(Team.id, Team.name)
                .join(TeamStatisticsRecord, TeamStatisticsRecord.team_id == Team.id)
                .where(TeamStatisticsRecord.tournament_id == tournament_id)
            ).all()
        )
        stats = [
            replace(item, team_name=names.get(item.team_id, str(item.team_id)))
            for item in TEAM_STATISTICS_REPOSITORY.list_for_tournament(self.session, tournament_id)
        ]
        return sorted(stats, key=lambda item: (item.rank is None, item.rank or 0, item.team_id))

    def upsert_team_statistics(self, stats: Sequence[common.TeamStatistics]) -> None:
        TEAM_STATISTICS_REPOSITORY.upsert(self.session, stats)

    def replace_team_statistics(self, tournament_id: int, stats: Sequence[common.TeamStatistics]) -> None:
        TEAM_STATISTICS_REPOSITORY.replace_for_tournament(self.session, tournament_id, stats)

    def get_player_statistics(self, tournament_id: int) -> list[common.PlayerStatistics]:
        return PLAYER_STATISTICS_REPOSITORY.list_for_tournament(self.session, tournament_id)

    def upsert_player_statistics(self, stats: Sequence[common.PlayerStatistics]) -> None:
        PLAYER_STATISTICS_REPOSITORY.upsert(self.session, stats)

    def replace_player_statistics(self, tournament_id: int, stats: Sequence[common.PlayerStatistics]) -> None:
        PLAYER_STATISTICS_REPOSITORY.replace_for_tournament(self.session, tournament_id, stats)

    def _assemble_result(self, match: Match, side_rows: Sequence[TeamMatchScore]) -> common.TeamMatchResult | None:
        by_team = {row.team_id: row for row in side_rows}
        home_row = by_team.get(match.home_team_id)
        away_row = by_team.get(match.away_team_id)
        if home_row is None or away_row is None:
            return None
        home = _to_side(home_row)
        away = _to_side(away_row)
        winner_team_id: int | None = None
        if home.total_points > away.total_points:
            winner_team_id = home.team_id
        elif away.total_points > home.total_points:
            winner_team_id = away.team_id
        return common.TeamMatchResult(
            match_id=match.id,
            tournament_id=match.tournament_id,
            home=home,
            away=away,
            winner_team_id=winner_team_id,
        )


__all__ = [
    "PLAYER_STATISTICS_REPOSITORY",
    "TEAM_STATISTICS_REPOSITORY",
    "SqlLeagueStore",
    "ensure_league_schema",
]
