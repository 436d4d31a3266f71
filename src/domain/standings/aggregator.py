"""Fold match outcomes into team and player statistics and ranked standings."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, fields, replace

from domain.common import PlayerGameScore, PlayerStatistics, TeamMatchResult, TeamStatistics

_COMPARED_TEAM_FIELDS = tuple(
    item.name for item in fields(TeamStatistics) if item.name not in ("team_name", "rank")
)


def empty_team_statistics(tournament_id: int, team_id: int, team_name: str) -> TeamStatistics:
    return TeamStatistics(tournament_id=tournament_id, team_id=team_id, team_name=team_name)


def apply_team_delta(stats: TeamStatistics, result: TeamMatchResult) -> TeamStatistics:
    """Add one finalized match to a single team's cumulative record."""
    side = result.side(stats.team_id)
    won = result.winner_team_id == stats.team_id
    tied = result.winner_team_id is None
    return replace(
        stats,
        matches_played=stats.matches_played + 1,
        matches_won=stats.matches_won + (1 if won else 0),
        matches_lost=stats.matches_lost + (0 if won or tied else 1),
        matches_tied=stats.matches_tied + (1 if tied else 0),
        games_played=stats.games_played + side.games_bowled,
        total_pins=stats.total_pins + side.scratch_total,
        total_score=stats.total_score + side.final_score,
        total_points=stats.total_points + side.total_points,
        rank=None,
    )


def apply_match(
    stats_by_team: Mapping[int, TeamStatistics],
    result: TeamMatchResult,
    team_names: Mapping[int, str] | None = None,
) -> dict[int, TeamStatistics]:
    """Return a new mapping with both sides of the match updated."""
    names = team_names or {}
    updated = dict(stats_by_team)
    for team_id in (result.home_team_id, result.away_team_id):
        current = updated.get(team_id) or empty_team_statistics(
            result.tournament_id, team_id, names.get(team_id, str(team_id))
        )
        updated[team_id] = apply_team_delta(current, result)
    return updated


def ranking_key(stats: TeamStatistics) -> tuple[int, int, str, int]:
    """Points desc, total score desc, team name asc, team id asc."""
    return (-stats.total_points, -stats.total_score, stats.team_name, stats.team_id)


def rank_standings(stats: Iterable[TeamStatistics]) -> list[TeamStatistics]:
    ordered = sorted(stats, key=ranking_key)
    return [replace(item, rank=position) for position, item in enumerate(ordered, start=1)]


def recompute_standings(
    tournament_id: int,
    history: Sequence[TeamMatchResult],
    team_names: Mapping[int, str] | None = None,
) -> list[TeamStatistics]:
    """Rebuild ranked team statistics from the full match history.

    Every team in team_names gets a row even without matches; results from
    other tournaments are ignored.
    """
    names = dict(team_names or {})
    stats_by_team: dict[int, TeamStatistics] = {
        team_id: empty_team_statistics(tournament_id, team_id, name) for team_id, name in names.items()
    }
    for result in history:
        if result.tournament_id != tournament_id:
            continue
        stats_by_team = apply_match(stats_by_team, result, names)
    return rank_standings(stats_by_team.values())


def apply_player_scores(
    stats_by_player: Mapping[int, PlayerStatistics],
    tournament_id: int,
    scores: Iterable[PlayerGameScore],
) -> dict[int, PlayerStatistics]:
    updated = dict(stats_by_player)
    for score in scores:
        current = updated.get(score.player_id) or PlayerStatistics(
            tournament_id=tournament_id,
            player_id=score.player_id,
            team_id=score.team_id,
        )
        updated[score.player_id] = replace(
            current,
            team_id=score.team_id,
            matches_played=current.matches_played + 1,
            games_played=current.games_played + len(score.games),
            total_pins=current.total_pins + score.series_total,
            highest_game=max(current.highest_game, score.highest_game),
            highest_series=max(current.highest_series, score.series_total),
        )
    return updated


def recompute_player_statistics(tournament_id: int, scores: Iterable[PlayerGameScore]) -> list[PlayerStatistics]:
    """Player table ordered by average desc, then total pins desc."""
    ordered_scores = sorted(scores, key=lambda score: (score.match_id, score.player_id))
    stats = apply_player_scores({}, tournament_id, ordered_scores)
    return sorted(stats.values(), key=lambda item: (-item.average, -item.total_pins, item.player_id))


@dataclass(frozen=True)
class StandingsDrift:
    """One field that differs between stored and recomputed statistics."""

    team_id: int
    field_name: str
    stored: object
    recomputed: object


def compare_standings(
    stored: Iterable[TeamStatistics],
    recomputed: Iterable[TeamStatistics],
) -> list[StandingsDrift]:
    stored_by_team = {item.team_id: item for item in stored}
    recomputed_by_team = {item.team_id: item for item in recomputed}
    drifts: list[StandingsDrift] = []
    for team_id in sorted(set(stored_by_team) | set(recomputed_by_team)):
        left = stored_by_team.get(team_id)
        right = recomputed_by_team.get(team_id)
        if left is None or right is None:
            drifts.append(
                StandingsDrift(
                    team_id=team_id,
                    field_name="row",
                    stored=None if left is None else "present",
                    recomputed=None if right is None else "present",
                )
            )
            continue
        for field_name in _COMPARED_TEAM_FIELDS:
            stored_value = getattr(left, field_name)
            recomputed_value = getattr(right, field_name)
            if stored_value != recomputed_value:
                drifts.append(
                    StandingsDrift(
                        team_id=team_id,
                        field_name=field_name,
                        stored=stored_value,
                        recomputed=recomputed_value,
                    )
                )
    return drifts


__all__ = [
    "StandingsDrift",
    "apply_match",
    "apply_player_scores",
    "apply_team_delta",
    "compare_standings",
    "empty_team_statistics",
    "rank_standings",
    "ranking_key",
    "recompute_player_statistics",
    "recompute_standings",
]
