"""Prediction input and output models."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Tuple

CONFIDENCE_HIGH = "high"
CONFIDENCE_MEDIUM = "medium"
CONFIDENCE_LOW = "low"

IMPACT_TEAM1 = "team1"
IMPACT_TEAM2 = "team2"
IMPACT_NEUTRAL = "neutral"

# Pairs that only produce a factor when both sides are supplied.
PAIRED_SIGNALS = (
    ("team1_form", "team2_form"),
    ("team1_head_to_head", "team2_head_to_head"),
    ("team1_partnership_rate", "team2_partnership_rate"),
)

_CAMEL_CASE_KEYS = {
    "team1Form": "team1_form",
    "team2Form": "team2_form",
    "team1HeadToHead": "team1_head_to_head",
    "team2HeadToHead": "team2_head_to_head",
    "team1Streak": "team1_streak",
    "team2Streak": "team2_streak",
    "team1PartnershipRate": "team1_partnership_rate",
    "team2PartnershipRate": "team2_partnership_rate",
}


class PredictionInputError(ValueError):
    """Raised when optional prediction signals are supplied for only one team."""


@dataclass(frozen=True)
class PredictionFactor:
    """A single explained contribution to a prediction."""

    name: str
    value: str
    weight: str
    impact: str

    def __post_init__(self):
        if self.impact not in (IMPACT_TEAM1, IMPACT_TEAM2, IMPACT_NEUTRAL):
            raise ValueError(f"Invalid factor impact: {self.impact}")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "value": self.value,
            "weight": self.weight,
            "impact": self.impact,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PredictionFactor":
        return cls(
            name=data["name"],
            value=data["value"],
            weight=data["weight"],
            impact=data["impact"],
        )


@dataclass(frozen=True)
class PredictionOptions:
    """
    Optional contextual signals for a prediction.

    Form, head-to-head and partnership values are win fractions in [0, 1];
    streaks are signed counts (positive = consecutive wins). Form,
    head-to-head and partnership must be supplied for both teams or for
    neither. A streak may be supplied for one team only, the other side
    then counts as 0.
    """

    team1_form: Optional[float] = None
    team2_form: Optional[float] = None
    team1_head_to_head: Optional[float] = None
    team2_head_to_head: Optional[float] = None
    team1_streak: Optional[int] = None
    team2_streak: Optional[int] = None
    team1_partnership_rate: Optional[float] = None
    team2_partnership_rate: Optional[float] = None

    def __post_init__(self):
        for left, right in PAIRED_SIGNALS:
            left_value = getattr(self, left)
            right_value = getattr(self, right)
            if (left_value is None) != (right_value is None):
                missing = right if left_value is not None else left
                raise PredictionInputError(
                    f"'{left}' and '{right}' must be supplied together; '{missing}' is missing"
                )

    @property
    def has_form(self) -> bool:
        return self.team1_form is not None

    @property
    def has_head_to_head(self) -> bool:
        return self.team1_head_to_head is not None

    @property
    def has_streak(self) -> bool:
        return self.team1_streak is not None or self.team2_streak is not None

    @property
    def has_partnership(self) -> bool:
        return self.team1_partnership_rate is not None

    def to_dict(self) -> dict:
        """Return only the supplied signals."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PredictionOptions":
        """Create options from snake_case or camelCase keys, ignoring unknown keys."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class PredictionResult:
    """Outcome of a single match prediction."""

    team1_win_prob: float
    team2_win_prob: float
    predicted_winner: int
    confidence_level: str
    factors: Tuple[PredictionFactor, ...] = field(default_factory=tuple)

    def get_factor(self, name: str) -> Optional[PredictionFactor]:
        """Return the factor with the given name, if it was emitted."""
        for factor in self.factors:
            if factor.name == name:
                return factor
        return None

    @property
    def favourite_win_prob(self) -> float:
        return max(self.team1_win_prob, self.team2_win_prob)

    def to_dict(self) -> Dict:
        """Convert prediction to a dictionary for persistence."""
        return {
            "team1_win_prob": self.team1_win_prob,
            "team2_win_prob": self.team2_win_prob,
            "predicted_winner": self.predicted_winner,
            "confidence_level": self.confidence_level,
            "factors": [f.to_dict() for f in self.factors],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PredictionResult":
        """Restore a stored prediction."""
        return cls(
            team1_win_prob=float(data["team1_win_prob"]),
            team2_win_prob=float(data["team2_win_prob"]),
            predicted_winner=int(data["predicted_winner"]),
            confidence_level=data["confidence_level"],
            factors=tuple(PredictionFactor.from_dict(f) for f in data.get("factors", [])),
        )
