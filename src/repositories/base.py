"""Generic persistence scaffold for per-tournament statistics tables."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

RowModelT = TypeVar("RowModelT")
DomainStatsT = TypeVar("DomainStatsT")


class BaseStatisticsRepository(Generic[RowModelT, DomainStatsT]):
    """Reusable load/upsert/replace operations keyed by (tournament, entity)."""

    def __init__(
        self,
        *,
        row_model: type[RowModelT],
        entity_id_column: str,
        stats_to_row: Callable[[DomainStatsT], dict[str, Any]],
        row_to_stats: Callable[[RowModelT], DomainStatsT],
        entity_id_of: Callable[[DomainStatsT], int],
    ) -> None:
        self.row_model = row_model
        self.entity_id_column = entity_id_column
        self.stats_to_row = stats_to_row
        self.row_to_stats = row_to_stats
        self.entity_id_of = entity_id_of

    def list_for_tournament(self, session: Session, tournament_id: int) -> list[DomainStatsT]:
        tournament_column = getattr(self.row_model, "tournament_id")
        entity_column = getattr(self.row_model, self.entity_id_column)
        rows = session.execute(
            select(self.row_model).where(tournament_column == tournament_id).order_by(entity_column)
        ).scalars()
        return [self.row_to_stats(row) for row in rows]

    def upsert(self, session: Session, stats: Sequence[DomainStatsT]) -> None:
        """Update rows in place when present, insert them otherwise."""
        tournament_column = getattr(self.row_model, "tournament_id")
        entity_column = getattr(self.row_model, self.entity_id_column)
        for item in stats:
            payload = self.stats_to_row(item)
            row = session.execute(
                select(self.row_model).where(
                    tournament_column == payload["tournament_id"],
                    entity_column == self.entity_id_of(item),
                )
            ).scalar_one_or_none()
            if row is None:
                session.add(self.row_model(**payload))  # type: ignore[call-arg]
                continue
            for key, value in payload.items():
                setattr(row, key, value)
            if hasattr(row, "last_updated"):
                setattr(row, "last_updated", datetime.now(UTC).replace(tzinfo=None))
        session.flush()

    def replace_for_tournament(self, session: Session, tournament_id: int, stats: Sequence[DomainStatsT]) -> None:
        """Delete every row for the tournament and insert the given statistics."""
        tournament_column = getattr(self.row_model, "tournament_id")
        session.execute(delete(self.row_model).where(tournament_column == tournament_id))
        if stats:
            session.add_all([self.row_model(**self.stats_to_row(item)) for item in stats])  # type: ignore[call-arg]
        session.flush()
