"""Elo rating-based predictor for padel matches."""

from typing import Tuple
from .base import BasePredictor


def elo_win_probability(team1_rating: float, team2_rating: float, scale: float = 400.0) -> float:
    """
    Logistic Elo expected score for team 1.

    A 400-point gap gives the favourite ~90.9%. Exponent overflow resolves
    to 0.0 or 1.0 rather than raising; NaN ratings give NaN.
    """
    exponent = (team2_rating - team1_rating) / scale
    try:
        return 1.0 / (1.0 + 10 ** exponent)
    except OverflowError:
        return 0.0 if exponent > 0 else 1.0


class EloPredictor(BasePredictor):
    """Predictor using the plain Elo curve with no contextual adjustments."""

    def __init__(self, scale: float = 400.0):
        """
        Initialize Elo predictor.

        Args:
            scale: Rating gap that multiplies the odds by ten
        """
        super().__init__("elo")
        self.scale = scale

    def predict(self, team1_rating: float, team2_rating: float) -> Tuple[int, float]:
        """
        Predict winner based on Elo ratings.

        Args:
            team1_rating: Team 1 aggregate rating
            team2_rating: Team 2 aggregate rating

        Returns:
            Tuple of (predicted_winner, win_probability)
        """
        team1_win_prob = elo_win_probability(team1_rating, team2_rating, self.scale)

        if team1_win_prob >= 0.5:
            return 1, team1_win_prob
        else:
            return 2, 1.0 - team1_win_prob
