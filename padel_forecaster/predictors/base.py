"""Base predictor interface for padel match predictions."""

from abc import ABC, abstractmethod
from typing import Tuple


class BasePredictor(ABC):
    """Abstract base class for all prediction models."""

    def __init__(self, name: str):
        """
        Initialize predictor.

        Args:
            name: Name of the predictor model
        """
        self.name = name

    @abstractmethod
    def predict(self, team1_rating: float, team2_rating: float) -> Tuple[int, float]:
        """
        Predict the winner of a match between two teams.

        Args:
            team1_rating: Team 1 aggregate rating
            team2_rating: Team 2 aggregate rating

        Returns:
            Tuple of (predicted_winner, win_probability) where predicted_winner is 1 or 2
        """
        pass

    def get_win_probability(self, team1_rating: float, team2_rating: float) -> float:
        """
        Get the probability that team 1 wins.

        Args:
            team1_rating: Team 1 aggregate rating
            team2_rating: Team 2 aggregate rating

        Returns:
            Probability that team 1 wins (0 to 1)
        """
        winner, prob = self.predict(team1_rating, team2_rating)
        return prob if winner == 1 else (1.0 - prob)
