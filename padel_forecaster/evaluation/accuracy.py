"""
Accuracy report for stored match predictions.

Compares the prediction persisted with each match against the actual
result: overall hit rate, hit rate by Elo gap, the biggest upsets, a
per-day trend, the Brier score, and a one-sided binomial test of the
hit rate against a coin flip.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd
import pytz
from scipy.stats import binomtest

from ..config import DEFAULT_CONFIG, PredictorConfig
from ..data.signals import MatchHistory, predict_match, to_utc
from ..models.match import MatchRecord
from ..predictors.match_predictor import FACTOR_ELO

logger = logging.getLogger(__name__)

# (label, lower bound inclusive, upper bound exclusive) on |rating gap|
ELO_GAP_BUCKETS = (
    ("0-50", 0.0, 50.0),
    ("50-100", 50.0, 100.0),
    ("100-200", 100.0, 200.0),
    ("200+", 200.0, float("inf")),
)


@dataclass
class PredictionAccuracy:
    """Summary of how stored predictions fared."""

    total_matches: int = 0
    overall_accuracy: float = 0.0
    brier_score: Optional[float] = None
    p_value: Optional[float] = None
    accuracy_by_elo_gap: List[Dict] = field(default_factory=list)
    biggest_upsets: List[Dict] = field(default_factory=list)
    trend_over_time: List[Dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_matches": self.total_matches,
            "overall_accuracy": self.overall_accuracy,
            "brier_score": self.brier_score,
            "p_value": self.p_value,
            "accuracy_by_elo_gap": self.accuracy_by_elo_gap,
            "biggest_upsets": self.biggest_upsets,
            "trend_over_time": self.trend_over_time,
        }

    def __str__(self) -> str:
        brier = "n/a" if self.brier_score is None else f"{self.brier_score:.4f}"
        return (
            f"Prediction Accuracy:\n"
            f"  Matches: {self.total_matches}\n"
            f"  Accuracy: {self.overall_accuracy:.1%}\n"
            f"  Brier Score: {brier}"
        )


def backfill_predictions(
    matches: Iterable[MatchRecord],
    rating_rows: pd.DataFrame,
    config: Optional[PredictorConfig] = None,
) -> List[MatchRecord]:
    """
    Attach a prediction to every match that lacks one.

    Each prediction only sees matches and rating rows from strictly before
    the match was played, as it would have at creation time. The input
    records are left untouched; filled matches are returned as copies.

    Args:
        matches: Matches to fill in
        rating_rows: Rating rows (player_id, rating, created_at)
        config: Optional predictor configuration

    Returns:
        The matches in play order, each with a prediction
    """
    ordered = sorted(matches, key=lambda m: to_utc(m.played_at))
    ratings = rating_rows.copy()
    if not ratings.empty:
        ratings["created_at"] = pd.to_datetime(ratings["created_at"], utc=True)

    filled = []
    count = 0
    for match in ordered:
        if match.prediction is not None:
            filled.append(match)
            continue
        played_at = to_utc(match.played_at)
        prior_ratings = ratings[ratings["created_at"] < played_at] if not ratings.empty else ratings
        history = MatchHistory(m for m in ordered if to_utc(m.played_at) < played_at)
        prediction = predict_match(history, prior_ratings, match.team1, match.team2, config)
        filled.append(replace(match, prediction=prediction))
        count += 1

    logger.info("Backfilled %d predictions", count)
    return filled


def _elo_gap(match: MatchRecord) -> Optional[float]:
    factor = match.prediction.get_factor(FACTOR_ELO)
    if factor is None:
        return None
    try:
        return abs(float(factor.value))
    except ValueError:
        return None


def predictions_frame(matches: Iterable[MatchRecord]) -> pd.DataFrame:
    """One row per match that carries a stored prediction."""
    rows = []
    for match in matches:
        if match.prediction is None:
            continue
        prediction = match.prediction
        winner = match.winner
        rows.append({
            "match_id": match.match_id,
            "played_at": to_utc(match.played_at),
            "team1": "/".join(match.team1),
            "team2": "/".join(match.team2),
            "team1_win_prob": prediction.team1_win_prob,
            "predicted_winner": prediction.predicted_winner,
            "actual_winner": winner,
            "correct": prediction.predicted_winner == winner,
            "winner_prob": prediction.team1_win_prob if winner == 1 else prediction.team2_win_prob,
            "elo_gap": _elo_gap(match),
        })

    columns = [
        "match_id", "played_at", "team1", "team2", "team1_win_prob", "predicted_winner",
        "actual_winner", "correct", "winner_prob", "elo_gap",
    ]
    frame = pd.DataFrame(rows, columns=columns)
    if not frame.empty:
        frame["played_at"] = pd.to_datetime(frame["played_at"], utc=True)
        frame["elo_gap"] = pd.to_numeric(frame["elo_gap"])
    return frame


def calculate_prediction_accuracy(
    matches: Iterable[MatchRecord],
    max_upsets: int = 5,
    timezone: str = DEFAULT_CONFIG.timezone,
) -> PredictionAccuracy:
    """
    Build the accuracy report.

    Args:
        matches: Matches; those without a stored prediction are ignored
        max_upsets: Number of upsets to list
        timezone: Timezone whose calendar days bucket the trend

    Returns:
        PredictionAccuracy
    """
    frame = predictions_frame(matches)
    if frame.empty:
        logger.info("No stored predictions to evaluate")
        return PredictionAccuracy()

    correct = frame["correct"].astype(bool).to_numpy()
    outcomes = (frame["actual_winner"] == 1).astype(float).to_numpy()
    probs = frame["team1_win_prob"].astype(float).to_numpy()

    n = len(frame)
    hits = int(correct.sum())
    report = PredictionAccuracy(
        total_matches=n,
        overall_accuracy=hits / n,
        brier_score=float(np.mean((probs - outcomes) ** 2)),
        p_value=float(binomtest(hits, n, 0.5, alternative="greater").pvalue),
    )

    for label, low, high in ELO_GAP_BUCKETS:
        in_bucket = frame[(frame["elo_gap"] >= low) & (frame["elo_gap"] < high)]
        if in_bucket.empty:
            continue
        report.accuracy_by_elo_gap.append({
            "elo_range": label,
            "accuracy": float(in_bucket["correct"].astype(float).mean()),
            "matches": int(len(in_bucket)),
        })

    upsets = frame[frame["winner_prob"] < 0.5].sort_values("winner_prob", kind="mergesort").head(max_upsets)
    for row in upsets.itertuples(index=False):
        report.biggest_upsets.append({
            "match_id": row.match_id,
            "underdog_team": row.team1 if row.actual_winner == 1 else row.team2,
            "win_prob": float(row.winner_prob),
            "date": row.played_at.isoformat(),
        })

    local_day = frame["played_at"].dt.tz_convert(pytz.timezone(timezone)).dt.date
    daily = frame.assign(day=local_day).groupby("day")["correct"].agg(lambda s: float(s.astype(float).mean()))
    for day, accuracy in daily.sort_index().items():
        report.trend_over_time.append({"date": day.isoformat(), "accuracy": accuracy})

    logger.info("Evaluated %d predictions: %.1f%% correct", n, report.overall_accuracy * 100)
    return report
