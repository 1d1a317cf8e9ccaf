"""Configuration knobs for the padel match forecaster."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Optional


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class PredictorConfig:
    """Weights, bounds and collector defaults used by the predictor."""

    # Base Elo curve
    elo_scale: float = 400.0
    elo_weight_divisor: float = 50.0  # cosmetic "weight" of the ELO advantage factor

    # Additive adjustments, linear in probability space
    form_weight: float = 0.05
    head_to_head_weight: float = 0.10
    streak_weight: float = 0.05
    streak_scale: float = 3.0
    partnership_weight: float = 0.05
    materiality_threshold: float = 0.01

    # Final clamp, applied once after all adjustments
    min_probability: float = 0.05
    max_probability: float = 0.95

    # Confidence banding on max(p, 1 - p)
    high_confidence_min: float = 0.70
    high_confidence_max: float = 0.85
    low_confidence_below: float = 0.55
    low_confidence_above: float = 0.90

    # Signal collector defaults
    default_rating: float = 1000.0
    form_window: int = 10
    partnership_min_matches: int = 3
    timezone: str = "America/Argentina/Buenos_Aires"

    def __post_init__(self):
        if self.min_probability > self.max_probability:
            raise ValueError(
                f"min_probability ({self.min_probability}) must not exceed "
                f"max_probability ({self.max_probability})"
            )
        if self.elo_scale <= 0 or self.streak_scale <= 0:
            raise ValueError("elo_scale and streak_scale must be positive")

    @classmethod
    def from_env(cls, prefix: str = "PADEL_") -> "PredictorConfig":
        """
        Build a config from environment variables.

        Every field can be overridden with ``<prefix><FIELD_NAME>`` in upper
        case, e.g. ``PADEL_FORM_WINDOW=5``. Unparseable values fall back to
        the default.
        """
        overrides = {}
        defaults = cls()
        for f in fields(cls):
            default = getattr(defaults, f.name)
            env_name = f"{prefix}{f.name.upper()}"
            if isinstance(default, bool):
                continue
            if isinstance(default, int):
                overrides[f.name] = _env_int(env_name, default)
            elif isinstance(default, float):
                overrides[f.name] = _env_float(env_name, default)
            else:
                raw: Optional[str] = os.getenv(env_name)
                overrides[f.name] = raw.strip() if raw and raw.strip() else default
        return cls(**overrides)


DEFAULT_CONFIG = PredictorConfig()
