"""Match record model for padel doubles matches."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from .prediction import PredictionResult


@dataclass
class SetScore:
    """Games won by each team in one set."""

    set_number: int
    team1_games: int
    team2_games: int

    def __post_init__(self):
        if self.team1_games < 0 or self.team2_games < 0:
            raise ValueError(
                f"Set {self.set_number}: games must be non-negative, "
                f"got {self.team1_games}-{self.team2_games}"
            )

    @property
    def winner(self) -> Optional[int]:
        """Team number that won the set, None for an unfinished/tied set."""
        if self.team1_games > self.team2_games:
            return 1
        if self.team2_games > self.team1_games:
            return 2
        return None

    def to_dict(self) -> dict:
        return {
            "set_number": self.set_number,
            "team1_games": self.team1_games,
            "team2_games": self.team2_games,
        }


@dataclass
class MatchRecord:
    """A played doubles match between two pairs."""

    match_id: str
    played_at: datetime
    team1: Tuple[str, str]
    team2: Tuple[str, str]
    sets: List[SetScore] = field(default_factory=list)
    prediction: Optional[PredictionResult] = None

    def __post_init__(self):
        """Validate match data."""
        self.team1 = tuple(self.team1)
        self.team2 = tuple(self.team2)

        if len(self.team1) != 2 or len(self.team2) != 2:
            raise ValueError(f"Match {self.match_id}: each team needs exactly two players")

        if len(set(self.team1 + self.team2)) != 4:
            raise ValueError(f"Match {self.match_id}: players must be unique across teams")

        if not self.sets:
            raise ValueError(f"Match {self.match_id}: at least one set is required")

    @property
    def team1_sets_won(self) -> int:
        return sum(1 for s in self.sets if s.winner == 1)

    @property
    def team2_sets_won(self) -> int:
        return sum(1 for s in self.sets if s.winner == 2)

    @property
    def winner(self) -> int:
        """Winning team number, by sets won (team 2 on a level count)."""
        return 1 if self.team1_sets_won > self.team2_sets_won else 2

    @property
    def players(self) -> Tuple[str, ...]:
        return self.team1 + self.team2

    @property
    def prediction_correct(self) -> Optional[bool]:
        """Whether the stored prediction picked the actual winner."""
        if self.prediction is None:
            return None
        return self.prediction.predicted_winner == self.winner

    def team_of(self, player_id: str) -> Optional[int]:
        if player_id in self.team1:
            return 1
        if player_id in self.team2:
            return 2
        return None

    def to_dict(self) -> dict:
        """Convert match to dictionary."""
        return {
            "match_id": self.match_id,
            "played_at": self.played_at.isoformat(),
            "team1": list(self.team1),
            "team2": list(self.team2),
            "sets": [s.to_dict() for s in self.sets],
            "prediction": self.prediction.to_dict() if self.prediction else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MatchRecord":
        """Create match from dictionary."""
        played_at = data["played_at"]
        if isinstance(played_at, str):
            played_at = datetime.fromisoformat(played_at.replace("Z", "+00:00"))

        sets = [
            SetScore(
                set_number=int(row.get("set_number", idx + 1)),
                team1_games=int(row["team1_games"]),
                team2_games=int(row["team2_games"]),
            )
            for idx, row in enumerate(data.get("sets", []))
        ]

        prediction = data.get("prediction")
        return cls(
            match_id=str(data["match_id"]),
            played_at=played_at,
            team1=tuple(data["team1"]),
            team2=tuple(data["team2"]),
            sets=sets,
            prediction=PredictionResult.from_dict(prediction) if prediction else None,
        )
