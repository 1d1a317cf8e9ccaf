"""Evaluation of stored predictions."""

from .accuracy import PredictionAccuracy, backfill_predictions, calculate_prediction_accuracy

__all__ = ["PredictionAccuracy", "backfill_predictions", "calculate_prediction_accuracy"]
