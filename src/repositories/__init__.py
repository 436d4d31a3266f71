"""Database repository helpers."""

from repositories.memory import InMemoryLeagueStore
from repositories.sql import SqlLeagueStore, ensure_league_schema

__all__ = ["InMemoryLeagueStore", "SqlLeagueStore", "ensure_league_schema"]
