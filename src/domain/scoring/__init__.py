"""Match scoring."""

from domain.scoring.config import (
    DEFAULT_LEAGUE_CONFIG_DIR,
    DEFAULT_LEAGUE_CONFIG_PATH,
    LeagueConfig,
    ScheduleRules,
    ScoringRules,
    SeriesPointBasis,
    load_league_config,
    load_league_configs,
)
from domain.scoring.scorer import MatchScorer, compare_points, match_state

__all__ = [
    "DEFAULT_LEAGUE_CONFIG_DIR",
    "DEFAULT_LEAGUE_CONFIG_PATH",
    "LeagueConfig",
    "MatchScorer",
    "ScheduleRules",
    "ScoringRules",
    "SeriesPointBasis",
    "compare_points",
    "load_league_config",
    "load_league_configs",
    "match_state",
]
