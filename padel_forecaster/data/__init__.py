"""Match history loading, validation and signal collection."""

from .loader import DataLoader, DataRequirementError
from .signals import (
    MatchHistory,
    PlayerForm,
    PlayerStreaks,
    build_prediction_options,
    latest_ratings,
    predict_match,
    team_rating,
)

__all__ = [
    "DataLoader",
    "DataRequirementError",
    "MatchHistory",
    "PlayerForm",
    "PlayerStreaks",
    "build_prediction_options",
    "latest_ratings",
    "predict_match",
    "team_rating",
]
