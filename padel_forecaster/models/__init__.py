"""Data models for matches, partnerships and predictions."""

from .match import MatchRecord, SetScore
from .partnership import Partnership, calculate_synergy_score
from .prediction import (
    PredictionFactor,
    PredictionInputError,
    PredictionOptions,
    PredictionResult,
)

__all__ = [
    "MatchRecord",
    "Partnership",
    "PredictionFactor",
    "PredictionInputError",
    "PredictionOptions",
    "PredictionResult",
    "SetScore",
    "calculate_synergy_score",
]
