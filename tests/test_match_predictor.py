"""Unit tests for the match outcome predictor."""

import math

import numpy as np
import pytest

from padel_forecaster.config import PredictorConfig
from padel_forecaster.models.prediction import PredictionInputError, PredictionOptions
from padel_forecaster.predictors.match_predictor import (
    MatchOutcomePredictor,
    calculate_match_prediction,
    confidence_level,
    form_adjustment,
    head_to_head_adjustment,
    partnership_adjustment,
    streak_adjustment,
)


def factor(result, name):
    return result.get_factor(name)


# Base Elo probability

def test_equal_ratings_are_a_coin_flip():
    result = calculate_match_prediction(1500, 1500)
    assert result.team1_win_prob == 0.5
    assert result.team2_win_prob == 0.5
    assert result.confidence_level == "low"


def test_exact_tie_goes_to_team1():
    result = calculate_match_prediction(1500, 1500)
    assert result.predicted_winner == 1


def test_higher_rated_team_is_favoured():
    result = calculate_match_prediction(1600, 1400)
    assert result.team1_win_prob > 0.5
    assert result.team2_win_prob < 0.5
    assert result.predicted_winner == 1


def test_lower_rated_team1_is_underdog():
    result = calculate_match_prediction(1400, 1600)
    assert result.team1_win_prob < 0.5
    assert result.team2_win_prob > 0.5
    assert result.predicted_winner == 2


def test_400_point_gap_calibration():
    result = calculate_match_prediction(1400, 1000)
    # 10 / 11, clamped band not reached
    assert result.team1_win_prob == pytest.approx(10 / 11)


def test_very_low_and_very_high_ratings():
    low = calculate_match_prediction(500, 600)
    high = calculate_match_prediction(2500, 2600)
    assert low.team1_win_prob < 0.5
    assert high.team1_win_prob < 0.5
    assert low.team1_win_prob == pytest.approx(high.team1_win_prob)


# ELO advantage factor

def test_elo_factor_is_always_first():
    result = calculate_match_prediction(1500, 1500, {"team1Form": 0.9, "team2Form": 0.1})
    assert result.factors[0].name == "ELO advantage"


def test_elo_factor_positive_gap():
    elo = factor(calculate_match_prediction(1600, 1400), "ELO advantage")
    assert elo.value == "+200"
    assert elo.weight == "4%"
    assert elo.impact == "team1"


def test_elo_factor_negative_gap():
    elo = factor(calculate_match_prediction(1400, 1600), "ELO advantage")
    assert elo.value == "-200"
    assert elo.impact == "team2"


def test_elo_factor_no_gap():
    elo = factor(calculate_match_prediction(1500, 1500), "ELO advantage")
    assert elo.value == "0"
    assert elo.weight == "0%"
    assert elo.impact == "neutral"


def test_elo_factor_float_ratings_render_like_integers():
    elo = factor(calculate_match_prediction(1600.0, 1400.0), "ELO advantage")
    assert elo.value == "+200"


def test_elo_factor_fractional_gap_and_half_up_weight():
    elo = factor(calculate_match_prediction(1525.5, 1500), "ELO advantage")
    assert elo.value == "+25.5"
    # 25.5 / 50 = 0.51 -> "1%"
    assert elo.weight == "1%"

    elo = factor(calculate_match_prediction(1525, 1500), "ELO advantage")
    # 0.5 rounds away from zero
    assert elo.weight == "1%"


@pytest.mark.parametrize("team1_rating,team2_rating,value,weight", [
    (np.float64(1525.5), np.float64(1500.0), "+25.5", "1%"),
    (np.float64(1600.0), np.float64(1400.0), "+200", "4%"),
    (np.int64(1600), np.int64(1400), "+200", "4%"),
    (np.int64(1400), np.int64(1600), "-200", "4%"),
])
def test_elo_factor_numpy_scalar_ratings(team1_rating, team2_rating, value, weight):
    elo = factor(calculate_match_prediction(team1_rating, team2_rating), "ELO advantage")
    assert elo.value == value
    assert elo.weight == weight


def test_only_elo_factor_without_signals():
    result = calculate_match_prediction(1600, 1400)
    assert [f.name for f in result.factors] == ["ELO advantage"]


# Recent form

def test_form_factor_when_provided():
    result = calculate_match_prediction(1500, 1500, PredictionOptions(team1_form=0.7, team2_form=0.3))
    form = factor(result, "Recent form")
    assert form is not None
    assert form.impact == "team1"
    assert form.value == "+2%"
    assert form.weight == "±5%"


def test_better_form_raises_probability():
    base = calculate_match_prediction(1500, 1500)
    adjusted = calculate_match_prediction(1500, 1500, {"team1_form": 0.8, "team2_form": 0.2})
    assert adjusted.team1_win_prob > base.team1_win_prob
    assert adjusted.team1_win_prob == pytest.approx(0.53)
    assert adjusted.predicted_winner == 1
    assert factor(adjusted, "Recent form").impact == "team1"


def test_poor_form_lowers_probability():
    adjusted = calculate_match_prediction(1500, 1500, {"team1_form": 0.2, "team2_form": 0.8})
    assert adjusted.team1_win_prob < 0.5
    assert adjusted.predicted_winner == 2
    form = factor(adjusted, "Recent form")
    assert form.impact == "team2"
    assert form.value == "-3%"


def test_immaterial_form_moves_probability_without_factor():
    result = calculate_match_prediction(1500, 1500, {"team1_form": 0.55, "team2_form": 0.45})
    assert result.team1_win_prob == pytest.approx(0.505)
    assert factor(result, "Recent form") is None


@pytest.mark.parametrize("team1_form,team2_form,expected_impact", [
    (0.5, 0.0, None),       # delta exactly at the threshold
    (0.375, 0.0, None),
    (0.0, 0.5, None),
    (0.625, 0.0, "team1"),  # first step past the threshold
    (0.0, 0.625, "team2"),
])
def test_materiality_threshold_is_exclusive(team1_form, team2_form, expected_impact):
    # binary fractions keep the deltas exact: 0.25 * 0.5 == 0.125
    config = PredictorConfig(form_weight=0.25, materiality_threshold=0.125)
    result = MatchOutcomePredictor(config).predict_match(
        1500, 1500, {"team1_form": team1_form, "team2_form": team2_form}
    )
    form = factor(result, "Recent form")
    if expected_impact is None:
        assert form is None
    else:
        assert form.impact == expected_impact


@pytest.mark.parametrize("team1_form,team2_form,emitted", [
    (0.61, 0.4, True),   # 0.0105
    (0.59, 0.4, False),  # 0.0095
])
def test_materiality_threshold_with_default_weights(team1_form, team2_form, emitted):
    result = calculate_match_prediction(1500, 1500, {"team1_form": team1_form, "team2_form": team2_form})
    assert (factor(result, "Recent form") is not None) is emitted


def test_equal_form_is_neutral():
    result = calculate_match_prediction(1500, 1500, {"team1_form": 0.5, "team2_form": 0.5})
    assert result.team1_win_prob == pytest.approx(0.5)
    assert factor(result, "Recent form") is None


# Head-to-head

def test_head_to_head_factor_when_provided():
    result = calculate_match_prediction(1500, 1500, {"team1_head_to_head": 0.8, "team2_head_to_head": 0.2})
    h2h = factor(result, "Head-to-head")
    assert h2h.impact == "team1"
    assert h2h.value == "+6%"
    assert h2h.weight == "±10%"


def test_head_to_head_has_double_the_form_weight():
    assert head_to_head_adjustment(1.0, 0.0) == pytest.approx(2 * form_adjustment(1.0, 0.0))
    assert head_to_head_adjustment(0.3, 0.7) == pytest.approx(2 * form_adjustment(0.3, 0.7))

    form_result = calculate_match_prediction(1500, 1500, {"team1_form": 1.0, "team2_form": 0.0})
    h2h_result = calculate_match_prediction(1500, 1500, {"team1_head_to_head": 1.0, "team2_head_to_head": 0.0})
    assert h2h_result.team1_win_prob > form_result.team1_win_prob


def test_equal_head_to_head_is_neutral():
    result = calculate_match_prediction(1500, 1500, {"team1_head_to_head": 0.5, "team2_head_to_head": 0.5})
    assert result.team1_win_prob == pytest.approx(0.5)


# Streaks

def test_streak_factor_when_provided():
    result = calculate_match_prediction(1500, 1500, {"team1_streak": 5, "team2_streak": -2})
    streak = factor(result, "Current streak")
    assert streak.impact == "team1"
    assert streak.value == "+8%"
    assert streak.weight == "±5%"


def test_winning_and_losing_streaks_move_probability():
    assert calculate_match_prediction(1500, 1500, {"team1_streak": 5, "team2_streak": -5}).team1_win_prob > 0.5
    assert calculate_match_prediction(1500, 1500, {"team1_streak": -5, "team2_streak": 5}).team1_win_prob < 0.5


def test_equal_streaks_are_neutral():
    result = calculate_match_prediction(1500, 1500, {"team1_streak": 0, "team2_streak": 0})
    assert result.team1_win_prob == pytest.approx(0.5)
    assert factor(result, "Current streak") is None


def test_one_sided_streak_defaults_other_side_to_zero():
    one_sided = calculate_match_prediction(1500, 1500, {"team1_streak": 3})
    explicit = calculate_match_prediction(1500, 1500, {"team1_streak": 3, "team2_streak": 0})
    assert one_sided.team1_win_prob == explicit.team1_win_prob
    assert factor(one_sided, "Current streak").value == "+4%"

    only_team2 = calculate_match_prediction(1500, 1500, {"team2_streak": 4})
    assert only_team2.team1_win_prob < 0.5
    assert factor(only_team2, "Current streak").impact == "team2"


def test_streak_saturates():
    three = streak_adjustment(3, 0)
    ten = streak_adjustment(10, 0)
    assert ten > three
    assert ten < 3.33 * three

    streak3 = calculate_match_prediction(1500, 1500, {"team1_streak": 3, "team2_streak": 0})
    streak10 = calculate_match_prediction(1500, 1500, {"team1_streak": 10, "team2_streak": 0})
    assert streak10.team1_win_prob - 0.5 < (streak3.team1_win_prob - 0.5) * 3


def test_streak_adjustment_strictly_increasing():
    deltas = [streak_adjustment(s, 0) for s in range(-12, 13)]
    assert all(b > a for a, b in zip(deltas, deltas[1:]))


def test_streak_adjustment_never_exceeds_weight():
    assert abs(streak_adjustment(1000, -1000)) <= 0.1


# Partnership synergy

def test_partnership_factor_when_provided():
    result = calculate_match_prediction(1500, 1500, {"team1_partnership_rate": 0.9, "team2_partnership_rate": 0.5})
    synergy = factor(result, "Partner synergy")
    assert synergy.impact == "team1"
    assert synergy.value == "+2%"
    assert synergy.weight == "±5%"


def test_partnership_adjustment():
    assert partnership_adjustment(0.9, 0.3) == pytest.approx(0.03)
    result = calculate_match_prediction(1500, 1500, {"team1_partnership_rate": 0.5, "team2_partnership_rate": 0.5})
    assert result.team1_win_prob == pytest.approx(0.5)


# Combined adjustments and ordering

def test_factor_order_is_fixed():
    result = calculate_match_prediction(1500, 1500, {
        "team1_partnership_rate": 0.9,
        "team2_partnership_rate": 0.1,
        "team1_streak": 4,
        "team2_streak": -4,
        "team1_head_to_head": 0.9,
        "team2_head_to_head": 0.1,
        "team1_form": 0.9,
        "team2_form": 0.1,
    })
    assert [f.name for f in result.factors] == [
        "ELO advantage",
        "Recent form",
        "Head-to-head",
        "Current streak",
        "Partner synergy",
    ]


def test_adjustments_are_cumulative():
    options = {
        "team1_form": 0.8,
        "team2_form": 0.2,
        "team1_head_to_head": 0.7,
        "team2_head_to_head": 0.3,
        "team1_streak": 3,
        "team2_streak": -1,
        "team1_partnership_rate": 0.8,
        "team2_partnership_rate": 0.4,
    }
    result = calculate_match_prediction(1500, 1500, options)
    expected = (
        0.5
        + form_adjustment(0.8, 0.2)
        + head_to_head_adjustment(0.7, 0.3)
        + streak_adjustment(3, -1)
        + partnership_adjustment(0.8, 0.4)
    )
    assert result.team1_win_prob == pytest.approx(expected)
    assert result.predicted_winner == 1


def test_signals_can_overturn_a_small_rating_gap():
    base = calculate_match_prediction(1450, 1550)
    adjusted = calculate_match_prediction(1450, 1550, {
        "team1_form": 1.0,
        "team2_form": 0.0,
        "team1_head_to_head": 1.0,
        "team2_head_to_head": 0.0,
        "team1_streak": 10,
        "team2_streak": -10,
    })
    assert adjusted.team1_win_prob > base.team1_win_prob + 0.15
    assert adjusted.predicted_winner == 1


# Clamping and complement

def test_clamps_to_upper_bound():
    result = calculate_match_prediction(2000, 1000, {
        "team1_form": 1.0,
        "team2_form": 0.0,
        "team1_head_to_head": 1.0,
        "team2_head_to_head": 0.0,
        "team1_streak": 10,
        "team2_streak": -10,
        "team1_partnership_rate": 1.0,
        "team2_partnership_rate": 0.0,
    })
    assert result.team1_win_prob == 0.95
    assert result.team1_win_prob + result.team2_win_prob == 1.0
    assert result.confidence_level == "low"


def test_clamps_to_lower_bound():
    result = calculate_match_prediction(1000, 2000, {
        "team1_form": 0.0,
        "team2_form": 1.0,
        "team1_head_to_head": 0.0,
        "team2_head_to_head": 1.0,
        "team1_streak": -10,
        "team2_streak": 10,
    })
    assert result.team1_win_prob == 0.05
    assert result.predicted_winner == 2


def test_clamp_is_applied_once_at_the_end():
    # Base is above 0.95 but the signals pull it back inside the band
    result = calculate_match_prediction(2000, 1000, {"team1_head_to_head": 0.0, "team2_head_to_head": 1.0})
    assert result.team1_win_prob == pytest.approx(1 / (1 + 10 ** -2.5) - 0.1)


@pytest.mark.parametrize("team1_rating", [0, 900, 1234.5, 1500, 2100, 3000])
@pytest.mark.parametrize("team2_rating", [0, 1000, 1499, 2999])
@pytest.mark.parametrize("form", [None, (0.0, 1.0), (0.9, 0.2)])
def test_probabilities_are_bounded_and_sum_to_one(team1_rating, team2_rating, form):
    options = {} if form is None else {"team1_form": form[0], "team2_form": form[1]}
    result = calculate_match_prediction(team1_rating, team2_rating, options)
    assert 0.05 <= result.team1_win_prob <= 0.95
    assert result.team1_win_prob + result.team2_win_prob == 1.0
    if result.team1_win_prob > 0.5:
        assert result.predicted_winner == 1
    elif result.team1_win_prob < 0.5:
        assert result.predicted_winner == 2


def test_huge_rating_gaps_do_not_raise():
    assert calculate_match_prediction(0, 500000).team1_win_prob == 0.05
    assert calculate_match_prediction(500000, 0).team1_win_prob == 0.95


def test_nan_rating_propagates():
    result = calculate_match_prediction(float("nan"), 1500)
    assert math.isnan(result.team1_win_prob)
    assert math.isnan(result.team2_win_prob)
    assert result.factors[0].impact == "neutral"


# Confidence banding

@pytest.mark.parametrize("max_prob,expected", [
    (0.5, "low"),
    (0.5499, "low"),
    (0.55, "medium"),
    (0.6999, "medium"),
    (0.70, "high"),
    (0.78, "high"),
    (0.85, "high"),
    (0.86, "medium"),
    (0.90, "medium"),
    (0.9001, "low"),
    (0.95, "low"),
])
def test_confidence_bands(max_prob, expected):
    assert confidence_level(max_prob) == expected


def test_confidence_from_predictions():
    assert calculate_match_prediction(1500, 1500).confidence_level == "low"
    assert calculate_match_prediction(1550, 1450).confidence_level == "medium"
    assert calculate_match_prediction(1600, 1400).confidence_level == "high"
    # Too certain to be trusted
    assert calculate_match_prediction(1800, 1200).confidence_level == "low"


def test_confidence_is_symmetric():
    assert calculate_match_prediction(1400, 1600).confidence_level == "high"


# Options handling

def test_one_sided_form_is_rejected():
    with pytest.raises(PredictionInputError):
        calculate_match_prediction(1500, 1500, {"team1_form": 0.7})


def test_one_sided_partnership_is_rejected():
    with pytest.raises(ValueError):
        PredictionOptions(team2_partnership_rate=0.4)


def test_camel_case_options_are_accepted():
    result = calculate_match_prediction(1500, 1500, {"team1HeadToHead": 0.8, "team2HeadToHead": 0.2})
    assert factor(result, "Head-to-head") is not None


def test_custom_config_changes_weights():
    config = PredictorConfig(form_weight=0.10)
    result = calculate_match_prediction(1500, 1500, {"team1_form": 0.8, "team2_form": 0.2}, config=config)
    assert result.team1_win_prob == pytest.approx(0.56)
    assert factor(result, "Recent form").weight == "±10%"


def test_predictor_interface():
    predictor = MatchOutcomePredictor()
    assert predictor.name == "match_outcome"

    winner, prob = predictor.predict(1400, 1600)
    assert winner == 2
    assert prob > 0.5
    assert predictor.get_win_probability(1400, 1600) == pytest.approx(1 - prob)


def test_prediction_is_deterministic():
    options = {"team1_form": 0.6, "team2_form": 0.4, "team1_streak": 2}
    assert calculate_match_prediction(1520, 1490, options) == calculate_match_prediction(1520, 1490, options)
