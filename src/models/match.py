"""matches, player_match_scores and team_match_scores table models."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base

MATCH_STATUSES = ("scheduled", "in_progress", "completed", "cancelled", "postponed")


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint("home_team_id <> away_team_id", name="ck_matches_distinct_teams"),
        Index("idx_matches_tournament_session", "tournament_id", "session_number"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"), nullable=False)
    session_id: Mapped[int | None] = mapped_column(ForeignKey("league_sessions.id"), nullable=True)
    session_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    home_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    away_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    winner_team_id: Mapped[int | None] = mapped_column(ForeignKey("teams.id"), nullable=True)
    status: Mapped[str] = mapped_column(
        Enum(*MATCH_STATUSES, name="match_status", native_enum=False),
        nullable=False,
        default="scheduled",
    )
    match_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    match_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )


class PlayerMatchScore(Base):
    """One bowler's three-game series in one match."""

    __tablename__ = "player_match_scores"
    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_player_match_scores_match_player"),
        CheckConstraint("game1_score BETWEEN 0 AND 300", name="ck_player_match_scores_game1"),
        CheckConstraint("game2_score BETWEEN 0 AND 300", name="ck_player_match_scores_game2"),
        CheckConstraint("game3_score BETWEEN 0 AND 300", name="ck_player_match_scores_game3"),
        Index("idx_player_match_scores_match", "match_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    game1_score: Mapped[int] = mapped_column(Integer, nullable=False)
    game2_score: Mapped[int] = mapped_column(Integer, nullable=False)
    game3_score: Mapped[int] = mapped_column(Integer, nullable=False)
    handicap_applied: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )


class TeamMatchScore(Base):
    """Aggregated side result and match points, one row per team per match."""

    __tablename__ = "team_match_scores"
    __table_args__ = (
        UniqueConstraint("match_id", "team_id", name="uq_team_match_scores_match_team"),
        CheckConstraint("total_points BETWEEN 0 AND 4", name="ck_team_match_scores_points"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    is_home: Mapped[bool] = mapped_column(nullable=False)
    game1_total: Mapped[int] = mapped_column(Integer, nullable=False)
    game2_total: Mapped[int] = mapped_column(Integer, nullable=False)
    game3_total: Mapped[int] = mapped_column(Integer, nullable=False)
    total_team_score: Mapped[int] = mapped_column(Integer, nullable=False)
    total_handicap: Mapped[int] = mapped_column(Integer, nullable=False)
    players_bowled: Mapped[int] = mapped_column(Integer, nullable=False)
    game1_point: Mapped[int] = mapped_column(Integer, nullable=False)
    game2_point: Mapped[int] = mapped_column(Integer, nullable=False)
    game3_point: Mapped[int] = mapped_column(Integer, nullable=False)
    series_point: Mapped[int] = mapped_column(Integer, nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
