"""Schema validators for match history and rating payloads."""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_timestamp(value) -> Optional[pd.Timestamp]:
    """Parse a timestamp as UTC; naive values are taken as UTC."""
    if value is None or isinstance(value, bool):
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")


def _to_int(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def validate_match_row(row, idx: int = 0) -> List[str]:
    errors: List[str] = []
    if not isinstance(row, dict):
        return [f"matches[{idx}] must be an object"]

    required = {"match_id", "played_at", "team1", "team2", "sets"}
    missing = [k for k in sorted(required) if k not in row]
    if missing:
        return [f"matches[{idx}] missing fields: {', '.join(missing)}"]

    players = []
    for team_key in ("team1", "team2"):
        team = row.get(team_key)
        if not isinstance(team, list) or len(team) != 2:
            errors.append(f"matches[{idx}].{team_key} must list exactly two player ids")
        else:
            players.extend(str(p) for p in team)
    if len(players) == 4 and len(set(players)) != 4:
        errors.append(f"matches[{idx}] players must be unique across teams")

    sets = row.get("sets")
    if not isinstance(sets, list) or not sets:
        errors.append(f"matches[{idx}] must include at least one set")
    else:
        for s_idx, set_row in enumerate(sets):
            if not isinstance(set_row, dict):
                errors.append(f"matches[{idx}].sets[{s_idx}] must be an object")
                continue
            for field in ("team1_games", "team2_games"):
                games = _to_int(set_row.get(field))
                if games is None or games < 0:
                    errors.append(f"matches[{idx}].sets[{s_idx}] missing/invalid '{field}'")
    return errors


def validate_matches_payload(payload: Dict) -> List[str]:
    matches = payload.get("matches") if isinstance(payload, dict) else None
    if not isinstance(matches, list):
        return ["matches payload must include a 'matches' list"]

    errors: List[str] = []
    seen_ids = set()
    for idx, row in enumerate(matches):
        row_errors = validate_match_row(row, idx)
        errors.extend(row_errors)
        if not row_errors:
            match_id = str(row["match_id"])
            if match_id in seen_ids:
                errors.append(f"matches[{idx}] duplicate match_id '{match_id}'")
            seen_ids.add(match_id)
    return errors


def validate_ratings_payload(payload: Dict) -> List[str]:
    ratings = payload.get("ratings") if isinstance(payload, dict) else None
    if not isinstance(ratings, list):
        return ["ratings payload must include a 'ratings' list"]

    errors: List[str] = []
    for idx, row in enumerate(ratings):
        if not isinstance(row, dict):
            errors.append(f"ratings[{idx}] must be an object")
            continue
        missing = [k for k in ("player_id", "rating", "created_at") if k not in row]
        if missing:
            errors.append(f"ratings[{idx}] missing fields: {', '.join(missing)}")
            continue
        if _to_float(row.get("rating")) is None:
            errors.append(f"ratings[{idx}] missing/invalid numeric field 'rating'")
        if parse_timestamp(row.get("created_at")) is None:
            errors.append(f"ratings[{idx}] missing/invalid timestamp field 'created_at'")
    return errors
