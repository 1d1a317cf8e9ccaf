"""Main CLI interface for the padel match forecaster."""

import argparse
import json
import logging
import sys

import pandas as pd

from .config import PredictorConfig
from .data.loader import DataLoader, DataRequirementError
from .data.signals import MatchHistory, latest_ratings, predict_match, team_rating
from .evaluation.accuracy import backfill_predictions, calculate_prediction_accuracy
from .predictors.match_predictor import MatchOutcomePredictor

logger = logging.getLogger(__name__)


def _load_ratings(path: str) -> pd.DataFrame:
    try:
        return DataLoader.load_ratings_from_json(path)
    except DataRequirementError as exc:
        logger.warning("No usable ratings (%s); every player starts at the default rating", exc)
        return pd.DataFrame(columns=["player_id", "rating", "created_at"])


def predict(args):
    """Predict a single match."""
    config = PredictorConfig.from_env()
    team1, team2 = tuple(args.team1), tuple(args.team2)

    if len(set(team1 + team2)) != 4:
        print("Error: the four players must be different")
        return 1

    try:
        matches = DataLoader.load_matches_from_json(args.input)
    except DataRequirementError as exc:
        print(f"Error loading data: {exc}")
        return 1

    ratings = _load_ratings(args.ratings or args.input)

    if args.ratings_only:
        player_ratings = latest_ratings(ratings, list(team1 + team2), config.default_rating)
        prediction = MatchOutcomePredictor(config).predict_match(
            team_rating(player_ratings, team1, config.default_rating),
            team_rating(player_ratings, team2, config.default_rating),
        )
    else:
        prediction = predict_match(MatchHistory(matches), ratings, team1, team2, config)

    print(f"\n{'='*60}")
    print(f"MATCH PREDICTION - {'/'.join(team1)} vs {'/'.join(team2)}")
    print(f"{'='*60}\n")
    print(f"Team 1 win probability: {prediction.team1_win_prob:.1%}")
    print(f"Team 2 win probability: {prediction.team2_win_prob:.1%}")
    print(f"Predicted winner: team {prediction.predicted_winner} ({prediction.confidence_level} confidence)")
    print("\nFactors:")
    for factor in prediction.factors:
        print(f"   - {factor.name}: {factor.value} (weight {factor.weight}, favours {factor.impact})")

    if args.output:
        DataLoader.save_prediction_to_json(prediction, args.output)
        print(f"\nSaved prediction to {args.output}")

    return 0


def accuracy(args):
    """Report how stored predictions fared."""
    config = PredictorConfig.from_env()
    try:
        matches = DataLoader.load_matches_from_json(args.input)
    except DataRequirementError as exc:
        print(f"Error loading data: {exc}")
        return 1

    if args.backfill:
        matches = backfill_predictions(matches, _load_ratings(args.ratings or args.input), config)

    report = calculate_prediction_accuracy(matches, max_upsets=args.upsets, timezone=config.timezone)
    if report.total_matches == 0:
        print("No matches with stored predictions. Use --backfill to compute them.")
        return 1

    print(report)
    if report.accuracy_by_elo_gap:
        print("\nBy Elo gap:")
        for bucket in report.accuracy_by_elo_gap:
            print(f"   {bucket['elo_range']:>8}: {bucket['accuracy']:.1%} ({bucket['matches']} matches)")
    if report.biggest_upsets:
        print("\nBiggest upsets:")
        for upset in report.biggest_upsets:
            print(f"   {upset['match_id']}: {upset['underdog_team']} won at {upset['win_prob']:.1%}")

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(report.to_dict(), f, indent=2)
        print(f"\nSaved report to {args.output}")
    return 0


def create_sample(args):
    """Create sample data file."""
    print(f"Creating sample data at {args.output}...")
    DataLoader.create_sample_data(args.output)
    print("✓ Sample data created!")
    print("\nYou can now run predictions with:")
    print(f"  padel-forecaster predict --input {args.output} --team1 ana bruno --team2 carla diego")
    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Padel match forecaster - Elo predictions with form, head-to-head, streak and partnership signals"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    predict_parser = subparsers.add_parser("predict", help="Predict a match between two pairs")
    predict_parser.add_argument(
        "--input", "-i",
        required=True,
        help="JSON file with a 'matches' list (and optionally 'ratings')"
    )
    predict_parser.add_argument("--ratings", "-r", default=None, help="Separate JSON file with a 'ratings' list")
    predict_parser.add_argument("--team1", nargs=2, required=True, metavar="PLAYER", help="Team 1 player ids")
    predict_parser.add_argument("--team2", nargs=2, required=True, metavar="PLAYER", help="Team 2 player ids")
    predict_parser.add_argument(
        "--ratings-only",
        action="store_true",
        help="Skip form, head-to-head, streak and partnership signals"
    )
    predict_parser.add_argument("--output", "-o", default=None, help="Optional output JSON for the prediction")

    accuracy_parser = subparsers.add_parser("accuracy", help="Evaluate stored predictions against results")
    accuracy_parser.add_argument("--input", "-i", required=True, help="JSON file with a 'matches' list")
    accuracy_parser.add_argument("--ratings", "-r", default=None, help="Separate JSON file with a 'ratings' list")
    accuracy_parser.add_argument(
        "--backfill",
        action="store_true",
        help="Compute predictions for matches that have none, using only earlier data"
    )
    accuracy_parser.add_argument("--upsets", type=int, default=5, help="Number of upsets to list (default: 5)")
    accuracy_parser.add_argument("--output", "-o", default=None, help="Optional output JSON for the report")

    sample_parser = subparsers.add_parser("sample", help="Create sample match history")
    sample_parser.add_argument(
        "--output", "-o",
        default="sample_matches.json",
        help="Output file for sample data (default: sample_matches.json)"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "predict":
        return predict(args)
    elif args.command == "accuracy":
        return accuracy(args)
    elif args.command == "sample":
        return create_sample(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
