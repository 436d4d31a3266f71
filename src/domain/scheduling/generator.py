"""Round-robin schedule generation using the circle method."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from domain.common import Pairing, Schedule, ScheduleSession, Team
from domain.errors import InvalidInputError

logger = logging.getLogger(__name__)

# Slot value for the synthetic placeholder added when the team count is odd.
BYE_SLOT = -1


def order_teams(teams: Sequence[Team], override_order: Sequence[int] | None = None) -> list[Team]:
    """Return teams in scheduling order.

    Default order is seed ascending (unseeded teams last), then name. An
    override must list every team id exactly once.
    """
    team_ids = [team.team_id for team in teams]
    if len(team_ids) != len(set(team_ids)):
        raise InvalidInputError(f"Duplicate team ids in team list: {team_ids}")

    if override_order is None:
        return sorted(teams, key=lambda team: team.sort_key())

    by_id = {team.team_id: team for team in teams}
    override = list(override_order)
    if len(override) != len(set(override)) or set(override) != set(by_id):
        raise InvalidInputError(
            f"override_order must be a permutation of team ids {sorted(by_id)}, got {override}"
        )
    return [by_id[team_id] for team_id in override]


def session_count(team_count: int) -> int:
    """Number of sessions needed for a single round robin."""
    return team_count if team_count % 2 == 1 else team_count - 1


def session_slots(team_ids: Sequence[int], session_index: int) -> list[int]:
    """Slot layout for one session: slot 0 fixed, ring rotated right by session_index."""
    ring_size = len(team_ids) - 1
    slots = [team_ids[0]]
    for position in range(ring_size):
        slots.append(team_ids[1 + ((position - session_index) % ring_size)])
    return slots


class ScheduleGenerator:
    """Stateless circle-method generator."""

    def generate(self, teams: Sequence[Team], *, override_order: Sequence[int] | None = None) -> Schedule:
        if len(teams) < 2:
            raise InvalidInputError("At least 2 teams are required for round robin scheduling")

        ordered = order_teams(teams, override_order)
        team_ids = [team.team_id for team in ordered]
        if BYE_SLOT in team_ids:
            raise InvalidInputError(f"team_id={BYE_SLOT} is reserved for the bye placeholder")

        has_bye = len(team_ids) % 2 == 1
        if has_bye:
            team_ids.append(BYE_SLOT)
        slot_count = len(team_ids)

        sessions: list[ScheduleSession] = []
        for session_index in range(slot_count - 1):
            session_number = session_index + 1
            slots = session_slots(team_ids, session_index)
            pairings: list[Pairing] = []
            bye_team_id: int | None = None

            for i in range(slot_count // 2):
                home_id = slots[i]
                away_id = slots[slot_count - 1 - i]
                if home_id == BYE_SLOT:
                    bye_team_id = away_id
                    continue
                if away_id == BYE_SLOT:
                    bye_team_id = home_id
                    continue
                pairings.append(
                    Pairing(
                        session_number=session_number,
                        home_team_id=home_id,
                        away_team_id=away_id,
                        match_number=len(pairings) + 1,
                    )
                )

            sessions.append(
                ScheduleSession(
                    session_number=session_number,
                    pairings=tuple(pairings),
                    bye_team_id=bye_team_id,
                )
            )

        schedule = Schedule(teams=tuple(ordered), sessions=tuple(sessions))
        logger.debug(
            "generated round robin teams=%d sessions=%d pairings=%d",
            len(ordered),
            len(sessions),
            schedule.total_pairings,
        )
        return schedule


def generate_schedule(teams: Sequence[Team], *, override_order: Sequence[int] | None = None) -> Schedule:
    """Generate a complete single round robin for the given teams."""
    return ScheduleGenerator().generate(teams, override_order=override_order)


__all__ = [
    "BYE_SLOT",
    "ScheduleGenerator",
    "generate_schedule",
    "order_teams",
    "session_count",
    "session_slots",
]
