"""Team and player standings."""

from domain.standings.aggregator import (
    StandingsDrift,
    apply_match,
    apply_player_scores,
    apply_team_delta,
    compare_standings,
    empty_team_statistics,
    rank_standings,
    recompute_player_statistics,
    recompute_standings,
)

__all__ = [
    "StandingsDrift",
    "apply_match",
    "apply_player_scores",
    "apply_team_delta",
    "compare_standings",
    "empty_team_statistics",
    "rank_standings",
    "recompute_player_statistics",
    "recompute_standings",
]
