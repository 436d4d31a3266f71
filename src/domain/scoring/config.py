"""Load league scoring rules from TOML files."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from domain.config_base import BaseLeagueConfig, load_config_file, load_configs

ROOT_DIR = Path(__file__).resolve().parents[3]
DEFAULT_LEAGUE_CONFIG_DIR = ROOT_DIR / "configs" / "leagues"
DEFAULT_LEAGUE_CONFIG_PATH = DEFAULT_LEAGUE_CONFIG_DIR / "default.toml"


class SeriesPointBasis(str, Enum):
    """Which series total decides the series point."""

    SCRATCH = "scratch"
    HANDICAP = "handicap"


@dataclass(frozen=True)
class ScoringRules:
    max_game_score: int = 300
    series_point_basis: SeriesPointBasis = SeriesPointBasis.HANDICAP


@dataclass(frozen=True)
class ScheduleRules:
    days_between_sessions: int = 7


@dataclass(frozen=True)
class LeagueConfig(BaseLeagueConfig):
    """Scoring and scheduling rules for one league."""

    scoring: ScoringRules = field(default_factory=ScoringRules)
    schedule: ScheduleRules = field(default_factory=ScheduleRules)

    def as_config_json(self) -> dict[str, Any]:
        return {
            "max_game_score": self.scoring.max_game_score,
            "series_point_basis": self.scoring.series_point_basis.value,
            "days_between_sessions": self.schedule.days_between_sessions,
        }


def load_league_config(file_path: Path) -> LeagueConfig:
    """Load and validate a single league TOML file."""
    return load_config_file(file_path, _parse_league_config)


def load_league_configs(config_dir: Path) -> list[LeagueConfig]:
    """Load and validate all league TOML config files in a directory."""
    return load_configs(config_dir, _parse_league_config, duplicate_name_label="league")


def _parse_league_config(raw: dict[str, Any], file_path: Path) -> LeagueConfig:
    league_raw = raw.get("league", {})
    scoring_raw = raw.get("scoring", {})
    schedule_raw = raw.get("schedule", {})

    name = str(league_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [league].name is required")

    description_value = league_raw.get("description")
    description = None if description_value is None else str(description_value)

    basis_value = str(scoring_raw.get("series_point_basis", SeriesPointBasis.HANDICAP.value)).strip().lower()
    try:
        basis = SeriesPointBasis(basis_value)
    except ValueError as exc:
        choices = ", ".join(item.value for item in SeriesPointBasis)
        raise ValueError(
            f"{file_path}: [scoring].series_point_basis must be one of: {choices}"
        ) from exc

    scoring = ScoringRules(
        max_game_score=int(scoring_raw.get("max_game_score", 300)),
        series_point_basis=basis,
    )
    if scoring.max_game_score <= 0:
        raise ValueError(f"{file_path}: [scoring].max_game_score must be > 0")

    schedule = ScheduleRules(days_between_sessions=int(schedule_raw.get("days_between_sessions", 7)))
    if schedule.days_between_sessions < 0:
        raise ValueError(f"{file_path}: [schedule].days_between_sessions must be >= 0")

    return LeagueConfig(
        name=name,
        description=description,
        file_path=file_path,
        scoring=scoring,
        schedule=schedule,
    )


__all__ = [
    "DEFAULT_LEAGUE_CONFIG_DIR",
    "DEFAULT_LEAGUE_CONFIG_PATH",
    "LeagueConfig",
    "ScheduleRules",
    "ScoringRules",
    "SeriesPointBasis",
    "load_league_config",
    "load_league_configs",
]
