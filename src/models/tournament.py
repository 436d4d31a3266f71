"""tournaments, tournament_teams and league_sessions table models."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Tournament(Base):
    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(String(512), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_sessions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        Enum("draft", "active", "completed", "cancelled", name="tournament_status", native_enum=False),
        nullable=False,
        default="draft",
    )
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


class TournamentTeam(Base):
    """Team registration (with optional seed) for one tournament."""

    __tablename__ = "tournament_teams"
    __table_args__ = (UniqueConstraint("tournament_id", "team_id", name="uq_tournament_teams_registration"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"), nullable=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    seed_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="registered")


class LeagueSession(Base):
    __tablename__ = "league_sessions"
    __table_args__ = (UniqueConstraint("tournament_id", "session_number", name="uq_league_sessions_number"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"), nullable=False)
    session_number: Mapped[int] = mapped_column(Integer, nullable=False)
    session_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    session_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    bye_team_id: Mapped[int | None] = mapped_column(ForeignKey("teams.id"), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(512), nullable=True)
