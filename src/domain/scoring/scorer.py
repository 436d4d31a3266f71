"""Convert player game scores into team totals, match points and a winner."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from domain.common import (
    GAMES_PER_SERIES,
    MatchRoster,
    MatchState,
    MatchStatus,
    PlayerGameScore,
    SideResult,
    TeamMatchResult,
)
from domain.errors import NotRosteredError, ScoresIncompleteError, ValidationError
from domain.scoring.config import ScoringRules, SeriesPointBasis


def compare_points(home_value: int, away_value: int) -> tuple[int, int]:
    """One point to the strictly higher side, none to either on a tie."""
    if home_value > away_value:
        return 1, 0
    if away_value > home_value:
        return 0, 1
    return 0, 0


def match_state(scores: Iterable[PlayerGameScore], roster: MatchRoster, status: MatchStatus) -> MatchState:
    if status == MatchStatus.COMPLETED:
        return MatchState.FINALIZED

    scored_teams = {score.team_id for score in scores}
    if not scored_teams:
        return MatchState.AWAITING_SCORES
    if {roster.home_team_id, roster.away_team_id} <= scored_teams:
        return MatchState.BOTH_TEAMS_SCORED
    return MatchState.PARTIALLY_SCORED


class MatchScorer:
    """Stateless scorer for three-game team matches."""

    def __init__(self, rules: ScoringRules | None = None) -> None:
        self.rules = rules or ScoringRules()

    def validate_player_score(self, score: PlayerGameScore, roster: MatchRoster | None = None) -> None:
        for game_number, game_score in enumerate(score.games, start=1):
            if isinstance(game_score, bool) or not isinstance(game_score, int):
                raise ValidationError(f"game{game_number} score must be an integer, got {game_score!r}")
            if game_score < 0 or game_score > self.rules.max_game_score:
                raise ValidationError(
                    f"game{game_number} score {game_score} must be between 0 and {self.rules.max_game_score}"
                )
        if isinstance(score.handicap, bool) or not isinstance(score.handicap, int):
            raise ValidationError(f"handicap must be an integer, got {score.handicap!r}")
        if score.handicap < 0:
            raise ValidationError(f"handicap {score.handicap} must be >= 0")

        if roster is None:
            return
        if score.team_id not in (roster.home_team_id, roster.away_team_id):
            raise NotRosteredError(
                f"team_id={score.team_id} is not part of match_id={score.match_id}",
                match_id=score.match_id,
                team_id=score.team_id,
            )
        if score.player_id not in roster.players_for(score.team_id):
            raise NotRosteredError(
                f"player_id={score.player_id} is not rostered to team_id={score.team_id} "
                f"for match_id={score.match_id}",
                match_id=score.match_id,
                team_id=score.team_id,
                player_id=score.player_id,
            )

    def score_match(
        self,
        *,
        match_id: int,
        tournament_id: int,
        home_team_id: int,
        away_team_id: int,
        scores: Sequence[PlayerGameScore],
    ) -> TeamMatchResult:
        home_scores = [score for score in scores if score.team_id == home_team_id]
        away_scores = [score for score in scores if score.team_id == away_team_id]
        missing = [
            team_id
            for team_id, side_scores in ((home_team_id, home_scores), (away_team_id, away_scores))
            if not side_scores
        ]
        if missing:
            raise ScoresIncompleteError(match_id=match_id, missing_team_ids=missing)

        home_games = _game_totals(home_scores)
        away_games = _game_totals(away_scores)
        game_points = [compare_points(home_games[index], away_games[index]) for index in range(GAMES_PER_SERIES)]

        home_scratch = sum(score.series_total for score in home_scores)
        away_scratch = sum(score.series_total for score in away_scores)
        home_handicap = sum(score.handicap for score in home_scores)
        away_handicap = sum(score.handicap for score in away_scores)
        if self.rules.series_point_basis == SeriesPointBasis.HANDICAP:
            home_series_point, away_series_point = compare_points(
                home_scratch + home_handicap, away_scratch + away_handicap
            )
        else:
            home_series_point, away_series_point = compare_points(home_scratch, away_scratch)

        home = SideResult(
            team_id=home_team_id,
            game_totals=home_games,
            scratch_total=home_scratch,
            handicap_total=home_handicap,
            players_bowled=len(home_scores),
            game_points=tuple(points[0] for points in game_points),  # type: ignore[arg-type]
            series_point=home_series_point,
        )
        away = SideResult(
            team_id=away_team_id,
            game_totals=away_games,
            scratch_total=away_scratch,
            handicap_total=away_handicap,
            players_bowled=len(away_scores),
            game_points=tuple(points[1] for points in game_points),  # type: ignore[arg-type]
            series_point=away_series_point,
        )

        winner_team_id: int | None = None
        if home.total_points > away.total_points:
            winner_team_id = home_team_id
        elif away.total_points > home.total_points:
            winner_team_id = away_team_id

        return TeamMatchResult(
            match_id=match_id,
            tournament_id=tournament_id,
            home=home,
            away=away,
            winner_team_id=winner_team_id,
        )


def _game_totals(scores: Sequence[PlayerGameScore]) -> tuple[int, int, int]:
    return (
        sum(score.game1 for score in scores),
        sum(score.game2 for score in scores),
        sum(score.game3 for score in scores),
    )


__all__ = ["MatchScorer", "compare_points", "match_state"]
