"""Prediction models."""

from .base import BasePredictor
from .elo import EloPredictor, elo_win_probability
from .match_predictor import (
    MatchOutcomePredictor,
    calculate_match_prediction,
    confidence_level,
)

__all__ = [
    "BasePredictor",
    "EloPredictor",
    "MatchOutcomePredictor",
    "calculate_match_prediction",
    "confidence_level",
    "elo_win_probability",
]
