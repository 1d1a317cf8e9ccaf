"""
Match outcome predictor.

Combines the base Elo win probability with additive adjustments for recent
form, head-to-head record, current streaks and partnership synergy, then
clamps the result and assigns a confidence band.

Adjustments are applied linearly in probability space (not to the odds),
in a fixed order, and the clamp is applied once at the end.
"""

import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Mapping, Optional, Tuple, Union

import numpy as np

from .base import BasePredictor
from .elo import elo_win_probability
from ..config import DEFAULT_CONFIG, PredictorConfig
from ..models.prediction import (
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    IMPACT_NEUTRAL,
    IMPACT_TEAM1,
    IMPACT_TEAM2,
    PredictionFactor,
    PredictionOptions,
    PredictionResult,
)

logger = logging.getLogger(__name__)

FACTOR_ELO = "ELO advantage"
FACTOR_FORM = "Recent form"
FACTOR_HEAD_TO_HEAD = "Head-to-head"
FACTOR_STREAK = "Current streak"
FACTOR_PARTNERSHIP = "Partner synergy"

OptionsLike = Union[PredictionOptions, Mapping, None]


def _format_number(value: float) -> str:
    """Render a number the way the web client does: no '.0' on integral values."""
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    # numpy scalars repr as "np.float64(...)"
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _to_fixed(value: float, digits: int = 0) -> str:
    """Fixed-point rendering, rounding half away from zero."""
    value = int(value) if isinstance(value, (int, np.integer)) else float(value)
    if isinstance(value, float) and not math.isfinite(value):
        return _format_number(value)
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _percent(weight: float) -> str:
    return f"±{_to_fixed(weight * 100)}%"


def form_adjustment(team1_form: float, team2_form: float, weight: float = 0.05) -> float:
    """Probability shift from the recent win-fraction gap."""
    return (team1_form - team2_form) * weight


def head_to_head_adjustment(team1_h2h: float, team2_h2h: float, weight: float = 0.10) -> float:
    """Probability shift from the head-to-head win-fraction gap."""
    return (team1_h2h - team2_h2h) * weight


def streak_adjustment(
    team1_streak: Optional[int],
    team2_streak: Optional[int],
    weight: float = 0.05,
    scale: float = 3.0,
) -> float:
    """
    Probability shift from current streaks.

    tanh saturates long streaks, so a 10-game streak is worth only a little
    more than a 3-game one. A missing side counts as no streak.
    """
    s1 = team1_streak or 0
    s2 = team2_streak or 0
    return (math.tanh(s1 / scale) - math.tanh(s2 / scale)) * weight


def partnership_adjustment(team1_rate: float, team2_rate: float, weight: float = 0.05) -> float:
    """Probability shift from the pairs' win rates when playing together."""
    return (team1_rate - team2_rate) * weight


def confidence_level(max_prob: float, config: PredictorConfig = DEFAULT_CONFIG) -> str:
    """
    Band the favourite's probability into a confidence label.

    Probabilities beyond the upper sanity bound are treated as unreliable
    and map back to low.
    """
    if config.high_confidence_min <= max_prob <= config.high_confidence_max:
        return CONFIDENCE_HIGH
    if max_prob < config.low_confidence_below or max_prob > config.low_confidence_above:
        return CONFIDENCE_LOW
    return CONFIDENCE_MEDIUM


class MatchOutcomePredictor(BasePredictor):
    """Elo predictor with form, head-to-head, streak and partnership adjustments."""

    def __init__(self, config: Optional[PredictorConfig] = None):
        """
        Initialize match outcome predictor.

        Args:
            config: Weights and bounds (defaults to DEFAULT_CONFIG)
        """
        super().__init__("match_outcome")
        self.config = config or DEFAULT_CONFIG

    def predict(self, team1_rating: float, team2_rating: float) -> Tuple[int, float]:
        result = self.predict_match(team1_rating, team2_rating)
        if result.predicted_winner == 1:
            return 1, result.team1_win_prob
        return 2, result.team2_win_prob

    def predict_match(
        self,
        team1_rating: float,
        team2_rating: float,
        options: OptionsLike = None,
    ) -> PredictionResult:
        """
        Predict a match from team ratings and optional contextual signals.

        Args:
            team1_rating: Team 1 aggregate rating
            team2_rating: Team 2 aggregate rating
            options: PredictionOptions, or a mapping accepted by PredictionOptions.from_dict

        Returns:
            PredictionResult with clamped probabilities, factors and confidence
        """
        cfg = self.config
        if not isinstance(options, PredictionOptions):
            options = PredictionOptions.from_dict(options)

        probability = elo_win_probability(team1_rating, team2_rating, cfg.elo_scale)
        factors: List[PredictionFactor] = [self._elo_factor(team1_rating - team2_rating)]

        if options.has_form:
            delta = form_adjustment(options.team1_form, options.team2_form, cfg.form_weight)
            probability += delta
            self._add_factor(
                factors, FACTOR_FORM, delta, cfg.form_weight,
                options.team1_form > options.team2_form,
            )

        if options.has_head_to_head:
            delta = head_to_head_adjustment(
                options.team1_head_to_head, options.team2_head_to_head, cfg.head_to_head_weight
            )
            probability += delta
            self._add_factor(
                factors, FACTOR_HEAD_TO_HEAD, delta, cfg.head_to_head_weight,
                options.team1_head_to_head > options.team2_head_to_head,
            )

        if options.has_streak:
            delta = streak_adjustment(
                options.team1_streak, options.team2_streak, cfg.streak_weight, cfg.streak_scale
            )
            probability += delta
            self._add_factor(
                factors, FACTOR_STREAK, delta, cfg.streak_weight,
                (options.team1_streak or 0) > (options.team2_streak or 0),
            )

        if options.has_partnership:
            delta = partnership_adjustment(
                options.team1_partnership_rate, options.team2_partnership_rate, cfg.partnership_weight
            )
            probability += delta
            self._add_factor(
                factors, FACTOR_PARTNERSHIP, delta, cfg.partnership_weight,
                options.team1_partnership_rate > options.team2_partnership_rate,
            )

        # np.clip keeps NaN as NaN
        clamped = float(np.clip(probability, cfg.min_probability, cfg.max_probability))
        if clamped != probability:
            logger.debug("Clamped team1 win probability %.4f -> %.4f", probability, clamped)

        predicted_winner = 1 if clamped >= 0.5 else 2
        team2_prob = 1.0 - clamped

        return PredictionResult(
            team1_win_prob=clamped,
            team2_win_prob=team2_prob,
            predicted_winner=predicted_winner,
            confidence_level=confidence_level(max(clamped, team2_prob), cfg),
            factors=tuple(factors),
        )

    def _elo_factor(self, elo_advantage: float) -> PredictionFactor:
        if elo_advantage > 0:
            impact = IMPACT_TEAM1
        elif elo_advantage < 0:
            impact = IMPACT_TEAM2
        else:
            impact = IMPACT_NEUTRAL

        sign = "+" if elo_advantage > 0 else ""
        return PredictionFactor(
            name=FACTOR_ELO,
            value=f"{sign}{_format_number(elo_advantage)}",
            weight=f"{_to_fixed(abs(elo_advantage / self.config.elo_weight_divisor))}%",
            impact=impact,
        )

    def _add_factor(
        self,
        factors: List[PredictionFactor],
        name: str,
        delta: float,
        weight: float,
        team1_ahead: bool,
    ) -> None:
        if not abs(delta) > self.config.materiality_threshold:
            return

        sign = "+" if team1_ahead else ""
        factor = PredictionFactor(
            name=name,
            value=f"{sign}{_to_fixed(delta * 100)}%",
            weight=_percent(weight),
            impact=IMPACT_TEAM1 if delta > 0 else IMPACT_TEAM2,
        )
        logger.debug("Factor %s: %s (%s)", name, factor.value, factor.impact)
        factors.append(factor)


def calculate_match_prediction(
    team1_rating: float,
    team2_rating: float,
    options: OptionsLike = None,
    config: Optional[PredictorConfig] = None,
) -> PredictionResult:
    """
    Predict a match with the default predictor.

    Args:
        team1_rating: Team 1 aggregate rating
        team2_rating: Team 2 aggregate rating
        options: Optional contextual signals (PredictionOptions or mapping)
        config: Optional weights and bounds

    Returns:
        PredictionResult
    """
    return MatchOutcomePredictor(config).predict_match(team1_rating, team2_rating, options)
