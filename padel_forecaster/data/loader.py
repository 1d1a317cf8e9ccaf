"""Data loader for match history and ratings."""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import List

import pandas as pd

from .validators import parse_timestamp, validate_match_row, validate_ratings_payload
from ..models.match import MatchRecord
from ..models.prediction import PredictionResult

logger = logging.getLogger(__name__)


class DataRequirementError(ValueError):
    """Raised when an input file cannot be used at all."""


class DataLoader:
    """Loads match history and ratings from JSON files."""

    @staticmethod
    def _read_json(file_path: str) -> dict:
        try:
            with open(file_path, 'r') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise DataRequirementError(f"Could not read {file_path}: {exc}") from exc

    @staticmethod
    def load_matches_from_json(file_path: str) -> List[MatchRecord]:
        """
        Load match history from a JSON file.

        Invalid match rows are skipped with a warning; a file without a
        'matches' list is rejected.

        Args:
            file_path: Path to JSON file

        Returns:
            List of MatchRecord objects
        """
        data = DataLoader._read_json(file_path)
        if not isinstance(data, dict) or not isinstance(data.get("matches"), list):
            raise DataRequirementError(f"{file_path}: matches payload must include a 'matches' list")

        matches = []
        for idx, row in enumerate(data["matches"]):
            errors = validate_match_row(row, idx)
            if errors:
                logger.warning("Skipping invalid match row: %s", "; ".join(errors))
                continue
            try:
                matches.append(MatchRecord.from_dict(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping match row %d: %s", idx, exc)

        logger.info("Loaded %d matches from %s", len(matches), file_path)
        return matches

    @staticmethod
    def load_ratings_from_json(file_path: str) -> pd.DataFrame:
        """
        Load rating rows (player_id, rating, created_at) from a JSON file.

        Args:
            file_path: Path to JSON file with a 'ratings' list

        Returns:
            DataFrame of rating rows; empty when the file has none
        """
        data = DataLoader._read_json(file_path)
        if not isinstance(data, dict) or not isinstance(data.get("ratings"), list):
            raise DataRequirementError(f"{file_path}: ratings payload must include a 'ratings' list")

        rows = []
        for idx, row in enumerate(data["ratings"]):
            errors = validate_ratings_payload({"ratings": [row]})
            if errors:
                logger.warning("Skipping rating row %d: %s", idx, "; ".join(errors))
                continue
            rows.append({
                "player_id": str(row["player_id"]),
                "rating": float(row["rating"]),
                "created_at": parse_timestamp(row["created_at"]),
            })

        return pd.DataFrame(rows, columns=["player_id", "rating", "created_at"])

    @staticmethod
    def save_prediction_to_json(prediction: PredictionResult, file_path: str) -> None:
        """
        Save a prediction to a JSON file.

        Args:
            prediction: Prediction to save
            file_path: Output file path
        """
        with open(file_path, 'w') as f:
            json.dump(prediction.to_dict(), f, indent=2)

    @staticmethod
    def save_matches_to_json(matches: List[MatchRecord], file_path: str) -> None:
        with open(file_path, 'w') as f:
            json.dump({"matches": [m.to_dict() for m in matches]}, f, indent=2)

    @staticmethod
    def create_sample_data(file_path: str) -> None:
        """
        Create a sample history file with matches and ratings.

        Args:
            file_path: Output file path
        """
        start = datetime(2026, 3, 5, 20, 0, tzinfo=timezone.utc)
        pairings = [
            (("ana", "bruno"), ("carla", "diego"), [(6, 3), (6, 4)]),
            (("ana", "bruno"), ("carla", "diego"), [(4, 6), (6, 2), (6, 3)]),
            (("ana", "carla"), ("bruno", "diego"), [(6, 7), (3, 6)]),
            (("ana", "bruno"), ("carla", "diego"), [(7, 5), (6, 4)]),
            (("bruno", "diego"), ("ana", "carla"), [(2, 6), (6, 4), (4, 6)]),
            (("ana", "bruno"), ("carla", "diego"), [(6, 1), (6, 2)]),
        ]

        matches = []
        for idx, (team1, team2, sets) in enumerate(pairings):
            matches.append({
                "match_id": f"m{idx + 1}",
                "played_at": (start + timedelta(weeks=idx)).isoformat(),
                "team1": list(team1),
                "team2": list(team2),
                "sets": [
                    {"set_number": n + 1, "team1_games": t1, "team2_games": t2}
                    for n, (t1, t2) in enumerate(sets)
                ],
            })

        ratings = [
            {"player_id": "ana", "rating": 1085, "created_at": "2026-04-09T22:00:00+00:00"},
            {"player_id": "bruno", "rating": 1040, "created_at": "2026-04-09T22:00:00+00:00"},
            {"player_id": "carla", "rating": 965, "created_at": "2026-04-09T22:00:00+00:00"},
            {"player_id": "diego", "rating": 930, "created_at": "2026-04-09T22:00:00+00:00"},
        ]

        with open(file_path, 'w') as f:
            json.dump({"matches": matches, "ratings": ratings}, f, indent=2)
