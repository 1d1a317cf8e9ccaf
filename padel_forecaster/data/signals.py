"""
Signal collectors feeding the match outcome predictor.

Each collector reads persisted match history and falls back to a neutral
value when there is nothing to go on: rating 1000, form / head-to-head /
partnership 0.5, streak 0. Collectors always supply both sides of a
signal pair so the predictor never sees a one-sided input.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from ..config import DEFAULT_CONFIG, PredictorConfig
from ..models.match import MatchRecord
from ..models.partnership import Partnership
from ..models.prediction import PredictionOptions, PredictionResult
from ..predictors.match_predictor import MatchOutcomePredictor

logger = logging.getLogger(__name__)

NEUTRAL_RATE = 0.5

_RESULT_COLUMNS = ["match_id", "player_id", "team_number", "is_win", "played_at"]


@dataclass
class StreakHistoryItem:
    """A run of consecutive wins or losses."""

    streak: int
    type: str  # "win" | "loss"
    start_match_id: str
    end_match_id: str
    start_date: pd.Timestamp
    end_date: pd.Timestamp


@dataclass
class PlayerStreaks:
    """Streak summary for one player."""

    current_streak: int = 0
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    streak_history: List[StreakHistoryItem] = field(default_factory=list)


@dataclass
class PlayerForm:
    """Recent results summary for one player."""

    player_id: str
    recent_matches: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    elo_change: float = 0.0
    current_streak: int = 0
    form_indicator: str = "neutral"  # "hot" | "neutral" | "cold"


def to_utc(value) -> pd.Timestamp:
    """Naive timestamps are taken as UTC."""
    ts = pd.Timestamp(value)
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")


def latest_ratings(
    rating_rows: Union[pd.DataFrame, Iterable[Mapping]],
    player_ids: Sequence[str],
    default: float = DEFAULT_CONFIG.default_rating,
) -> Dict[str, float]:
    """
    Latest rating per player.

    Args:
        rating_rows: Rows with player_id, rating and created_at
        player_ids: Players to look up
        default: Rating for players with no history

    Returns:
        Mapping of player id to rating, one entry per requested player
    """
    frame = rating_rows if isinstance(rating_rows, pd.DataFrame) else pd.DataFrame(list(rating_rows))
    ratings = {player_id: default for player_id in player_ids}
    if frame.empty:
        return ratings

    frame = frame[frame["player_id"].isin(player_ids)].copy()
    if frame.empty:
        return ratings

    frame["created_at"] = pd.to_datetime(frame["created_at"], utc=True)
    latest = (
        frame.sort_values("created_at", ascending=False, kind="mergesort")
        .drop_duplicates("player_id", keep="first")
    )
    for row in latest.itertuples(index=False):
        ratings[row.player_id] = float(row.rating)
    return ratings


def team_rating(ratings: Mapping[str, float], pair: Sequence[str], default: float = DEFAULT_CONFIG.default_rating) -> int:
    """Average rating of a pair, rounded half up."""
    values = [ratings.get(player_id, default) for player_id in pair]
    return int(math.floor(sum(values) / len(values) + 0.5))


class MatchHistory:
    """Per-player match results used to derive prediction signals."""

    def __init__(self, matches: Iterable[MatchRecord]):
        self.matches = sorted(matches, key=lambda m: to_utc(m.played_at))
        rows = []
        for match in self.matches:
            winner = match.winner
            for team_number, team in ((1, match.team1), (2, match.team2)):
                for player_id in team:
                    rows.append({
                        "match_id": match.match_id,
                        "player_id": player_id,
                        "team_number": team_number,
                        "is_win": team_number == winner,
                        "played_at": to_utc(match.played_at),
                    })

        self.frame = pd.DataFrame(rows, columns=_RESULT_COLUMNS)
        if not self.frame.empty:
            self.frame["played_at"] = pd.to_datetime(self.frame["played_at"], utc=True)
        logger.debug("Loaded match history: %d matches, %d player rows", len(self.matches), len(self.frame))

    def __len__(self) -> int:
        return len(self.matches)

    def side_results(self, players: Sequence[str]) -> pd.DataFrame:
        """
        Matches in which every given player was on the same side.

        Returns:
            DataFrame with match_id, team_number, is_win, played_at sorted oldest first
        """
        players = list(dict.fromkeys(players))
        empty = pd.DataFrame(columns=["match_id", "team_number", "is_win", "played_at"])
        if self.frame.empty or not players:
            return empty

        rows = self.frame[self.frame["player_id"].isin(players)]
        if rows.empty:
            return empty
        grouped = (
            rows.groupby(["match_id", "team_number"], sort=False)
            .agg(count=("player_id", "size"), is_win=("is_win", "first"), played_at=("played_at", "first"))
            .reset_index()
        )
        together = grouped[grouped["count"] == len(players)].drop(columns="count")
        return together.sort_values("played_at", kind="mergesort").reset_index(drop=True)

    def recent_form(self, players: Sequence[str], window: int = DEFAULT_CONFIG.form_window) -> float:
        """Win fraction over the last `window` matches of a player set."""
        results = self.side_results(players)
        if results.empty:
            return NEUTRAL_RATE
        return float(results.tail(window)["is_win"].astype(float).mean())

    def head_to_head(self, team_a: Sequence[str], team_b: Sequence[str]) -> float:
        """Win fraction of team_a in matches played against team_b."""
        side_a = self.side_results(team_a)
        side_b = self.side_results(team_b)
        if side_a.empty or side_b.empty:
            return NEUTRAL_RATE

        meetings = side_a.merge(side_b[["match_id", "team_number"]], on="match_id", suffixes=("", "_b"))
        meetings = meetings[meetings["team_number"] != meetings["team_number_b"]]
        if meetings.empty:
            return NEUTRAL_RATE
        return float(meetings["is_win"].astype(float).mean())

    def partnership_rate(
        self,
        pair: Sequence[str],
        min_matches: int = DEFAULT_CONFIG.partnership_min_matches,
    ) -> float:
        """Win fraction of a pair playing together; neutral below `min_matches`."""
        results = self.side_results(pair)
        if len(results) < min_matches:
            return NEUTRAL_RATE
        return float(results["is_win"].astype(float).mean())

    def partnership(self, pair: Sequence[str]) -> Partnership:
        """Aggregated record of a pair playing on the same side."""
        player1_id, player2_id = pair
        results = self.side_results(pair)
        wins = int(results["is_win"].astype(bool).sum()) if not results.empty else 0
        return Partnership(
            player1_id=player1_id,
            player2_id=player2_id,
            matches_played=len(results),
            wins=wins,
            losses=len(results) - wins,
        )

    def current_streak(self, players: Sequence[str]) -> int:
        """Signed streak of a player set: positive for wins, negative for losses."""
        outcomes = self.side_results(players)["is_win"].astype(bool).tolist()
        return _trailing_streak(outcomes)

    def player_streaks(self, player_id: str) -> PlayerStreaks:
        """Current, longest and historical streaks of one player."""
        results = self.side_results([player_id])
        if results.empty:
            return PlayerStreaks()

        summary = PlayerStreaks()
        run_type: Optional[str] = None
        run_start = None
        run_count = 0
        previous = None

        def close_run(end_row):
            summary.streak_history.append(StreakHistoryItem(
                streak=run_count,
                type=run_type,
                start_match_id=run_start.match_id,
                end_match_id=end_row.match_id,
                start_date=run_start.played_at,
                end_date=end_row.played_at,
            ))
            if run_type == "win":
                summary.longest_win_streak = max(summary.longest_win_streak, run_count)
            else:
                summary.longest_loss_streak = max(summary.longest_loss_streak, run_count)

        for row in results.itertuples(index=False):
            outcome = "win" if row.is_win else "loss"
            if outcome == run_type:
                run_count += 1
            else:
                if run_type is not None:
                    close_run(previous)
                run_type = outcome
                run_start = row
                run_count = 1
            previous = row

        close_run(previous)
        summary.current_streak = run_count if run_type == "win" else -run_count
        return summary

    def player_form(self, player_id: str, match_count: int = 10, elo_change: float = 0.0) -> PlayerForm:
        """
        Recent results of one player with a hot/neutral/cold indicator.

        Args:
            player_id: Player to summarise
            match_count: Number of most recent matches to consider
            elo_change: Rating movement over the same window, supplied by the caller

        Returns:
            PlayerForm summary
        """
        results = self.side_results([player_id]).tail(match_count)
        if results.empty:
            return PlayerForm(player_id=player_id)

        outcomes = results["is_win"].astype(bool).tolist()
        wins = sum(outcomes)
        win_rate = wins / len(outcomes)

        indicator = "neutral"
        if len(outcomes) >= 3:
            if win_rate >= 0.6 and elo_change >= 0:
                indicator = "hot"
            elif win_rate <= 0.4 and elo_change <= 0:
                indicator = "cold"

        return PlayerForm(
            player_id=player_id,
            recent_matches=len(outcomes),
            wins=wins,
            losses=len(outcomes) - wins,
            win_rate=win_rate,
            elo_change=elo_change,
            current_streak=_trailing_streak(outcomes),
            form_indicator=indicator,
        )


def _trailing_streak(outcomes: Sequence[bool]) -> int:
    if not outcomes:
        return 0
    last = outcomes[-1]
    count = 0
    for outcome in reversed(outcomes):
        if outcome != last:
            break
        count += 1
    return count if last else -count


def build_prediction_options(
    history: MatchHistory,
    team1: Sequence[str],
    team2: Sequence[str],
    config: PredictorConfig = DEFAULT_CONFIG,
) -> PredictionOptions:
    """Collect every signal for both teams from match history."""
    h2h = history.head_to_head(team1, team2)
    return PredictionOptions(
        team1_form=history.recent_form(team1, config.form_window),
        team2_form=history.recent_form(team2, config.form_window),
        team1_head_to_head=h2h,
        team2_head_to_head=1.0 - h2h,
        team1_streak=history.current_streak(team1),
        team2_streak=history.current_streak(team2),
        team1_partnership_rate=history.partnership_rate(team1, config.partnership_min_matches),
        team2_partnership_rate=history.partnership_rate(team2, config.partnership_min_matches),
    )


def predict_match(
    history: MatchHistory,
    rating_rows: Union[pd.DataFrame, Iterable[Mapping]],
    team1: Sequence[str],
    team2: Sequence[str],
    config: Optional[PredictorConfig] = None,
) -> PredictionResult:
    """
    Predict a match between two pairs from persisted ratings and history.

    Args:
        history: Match history of the group
        rating_rows: Rating rows (player_id, rating, created_at)
        team1: Team 1 player ids
        team2: Team 2 player ids
        config: Optional predictor configuration

    Returns:
        PredictionResult
    """
    config = config or DEFAULT_CONFIG
    ratings = latest_ratings(rating_rows, list(team1) + list(team2), config.default_rating)
    team1_rating = team_rating(ratings, team1, config.default_rating)
    team2_rating = team_rating(ratings, team2, config.default_rating)
    options = build_prediction_options(history, team1, team2, config)

    result = MatchOutcomePredictor(config).predict_match(team1_rating, team2_rating, options)
    logger.info(
        "Predicted %s vs %s: %.1f%% / %.1f%% (%s confidence)",
        "/".join(team1), "/".join(team2),
        result.team1_win_prob * 100, result.team2_win_prob * 100, result.confidence_level,
    )
    return result
