"""Padel match forecaster: Elo-based match predictions with contextual adjustments."""

from .config import PredictorConfig
from .models.prediction import PredictionOptions, PredictionResult
from .predictors.match_predictor import MatchOutcomePredictor, calculate_match_prediction

__version__ = "0.1.0"

__all__ = [
    "MatchOutcomePredictor",
    "PredictionOptions",
    "PredictionResult",
    "PredictorConfig",
    "calculate_match_prediction",
]
