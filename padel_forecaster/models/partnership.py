"""Partnership model and scoring helpers."""

from dataclasses import dataclass
from typing import Tuple


@dataclass
class Partnership:
    """Aggregated record of two players playing on the same side."""

    player1_id: str
    player2_id: str
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    elo_change_delta: float = 0.0
    common_opponents_beaten: int = 0

    def __post_init__(self):
        if self.player1_id == self.player2_id:
            raise ValueError("A partnership needs two different players")
        if self.matches_played < 0:
            raise ValueError(f"matches_played must be non-negative, got {self.matches_played}")

    @property
    def pair(self) -> Tuple[str, str]:
        """Unordered pair key (sorted player ids)."""
        return tuple(sorted((self.player1_id, self.player2_id)))

    @property
    def win_rate(self) -> float:
        if self.matches_played <= 0:
            return 0.0
        return self.wins / self.matches_played

    def to_dict(self) -> dict:
        return {
            "player1_id": self.player1_id,
            "player2_id": self.player2_id,
            "matches_played": self.matches_played,
            "wins": self.wins,
            "losses": self.losses,
            "win_rate": self.win_rate,
            "elo_change_delta": self.elo_change_delta,
            "common_opponents_beaten": self.common_opponents_beaten,
            "synergy_score": calculate_synergy_score(self),
        }


def calculate_synergy_score(
    partnership: Partnership,
    win_rate_weight: float = 0.5,
    elo_delta_weight: float = 0.3,
    opponent_quality_weight: float = 0.2,
) -> float:
    """
    Blend win rate, Elo movement and opponent quality into one score.

    Args:
        partnership: Partnership to score
        win_rate_weight: Weight of the pair's win rate (0 to 1)
        elo_delta_weight: Weight of the Elo change, normalised by 100 and clamped to [-1, 1]
        opponent_quality_weight: Weight of opponents beaten per match played, capped at 1

    Returns:
        Weighted synergy score
    """
    elo_delta = max(-1.0, min(1.0, partnership.elo_change_delta / 100.0))

    if partnership.matches_played > 0:
        opponent_quality = min(1.0, partnership.common_opponents_beaten / partnership.matches_played)
    else:
        opponent_quality = 0.0

    return (
        partnership.win_rate * win_rate_weight
        + elo_delta * elo_delta_weight
        + opponent_quality * opponent_quality_weight
    )


def partnership_tier(win_rate: float) -> str:
    if win_rate >= 0.7:
        return "excellent"
    if win_rate >= 0.6:
        return "good"
    if win_rate >= 0.5:
        return "fair"
    return "poor"


def matches_badge(matches: int) -> str:
    if matches >= 10:
        return "Established"
    if matches >= 5:
        return "Developing"
    return "New"


def elo_delta_indicator(delta: float) -> str:
    if delta > 2:
        return "positive"
    if delta < -2:
        return "negative"
    return "neutral"
