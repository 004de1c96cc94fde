"""Financial health sub-scores and composite."""
import math
from datetime import date

from finlens.core.data_models import Category, ExpenseBreakdown, TargetPolicy, Transaction
from finlens.core.health import (
    burn_ratio_score,
    calculate_financial_health,
    composite_score,
    creep_score,
    health_label,
    pacing_score,
    sharpe_score,
    stability_score,
)

CATEGORIES = [
    Category(id="rent", name="Rent", priority="needs"),
    Category(id="fun", name="Fun", priority="wants"),
]


def _expense(when, amount, category="rent"):
    return Transaction(date=when, amount=amount, type="expense", categoryId=category, isPaid=True)


def _income(when, amount):
    return Transaction(date=when, amount=amount, type="income")


def _steady_history():
    history = []
    for month in range(1, 7):
        history.append(_income(date(2024, month, 1), 3000))
        history.append(_expense(date(2024, month, 10), 2000))
    return history


def test_burn_ratio_exact_buffer_boundary():
    """Test 1: spend equal to the buffered target scores 100; 1% above does not"""
    policy = TargetPolicy(needs=500, wants=300, savings=200)
    buffered = 800 * 1.1

    at_boundary = burn_ratio_score(ExpenseBreakdown(wantsDirect=buffered), policy, [], cursor=30, month_days=30)
    above = burn_ratio_score(ExpenseBreakdown(wantsDirect=buffered * 1.01), policy, [], cursor=30, month_days=30)

    assert at_boundary == 100
    assert above < 100


def test_burn_ratio_penalises_wants_harder_than_needs():
    policy = TargetPolicy(needs=500, wants=300, savings=200)
    overspend = 800 * 1.1 * 1.2

    needs_heavy = burn_ratio_score(ExpenseBreakdown(needs=overspend), policy, [], 30, 30)
    wants_heavy = burn_ratio_score(ExpenseBreakdown(wantsDirect=overspend), policy, [], 30, 30)

    assert 0 <= wants_heavy < needs_heavy < 100


def test_burn_ratio_uses_historical_same_day_average():
    policy = TargetPolicy(needs=100, wants=100, savings=0)

    # Historical 3000/month scaled to day 15 of 30 = 1500, buffered to 1650.
    assert burn_ratio_score(ExpenseBreakdown(needs=1600), policy, [3000, 0, 3000], 15, 30) == 100


def test_sharpe_with_zero_variance_is_finite():
    """Test 2: identical net savings rely on the variance floor"""
    score = sharpe_score([500.0] * 6)

    assert math.isfinite(score)
    assert score == 100


def test_sharpe_negative_and_insufficient_data():
    assert sharpe_score([100.0]) == 50
    # avg -100, std 200 -> ratio -0.5
    assert sharpe_score([100.0, -300.0]) == 12.5
    assert sharpe_score([-100.0, -300.0]) == 0


def test_pacing_score_rules():
    assert pacing_score(100, []) == 0
    assert pacing_score(50, [100, 0, 100]) == 100
    assert pacing_score(150, [100]) == 50
    assert pacing_score(500, [100]) == 0


def test_stability_and_creep_need_enough_data():
    assert stability_score([1000, 0, 0]) == 50
    assert stability_score([1000, 1000, 1000]) == 100
    assert creep_score([(1000, 500), (1000, 500)]) == 50


def test_creep_detects_expense_growth():
    points = [(1000, 500), (1000, 500), (1000, 600), (1000, 600)]

    # Expenses +20% against flat income.
    assert creep_score(points) == 0
    assert creep_score([(1000, 500), (1000, 500), (1200, 600), (1200, 600)]) == 100


def test_steady_household_scores_excellent():
    """Test 3: full composite on a flat, well-funded history"""
    current = [_expense(date(2024, 7, 10), 1500)]

    score = calculate_financial_health(
        current,
        _steady_history(),
        3000,
        date(2024, 7, 1),
        categories=CATEGORIES,
        today=date(2024, 8, 5),
    )

    assert (score.pacing, score.burnRatio, score.stability, score.sharpe, score.creep) == (100, 100, 100, 100, 100)
    assert score.totalScore == 100
    assert score.label == "Excellent"


def test_sub_scores_stay_bounded():
    """Test 4: sub-scores in [0, 100] even for a bad month"""
    history = _steady_history() + [_expense(date(2024, 6, 12), 2500, "fun")]
    current = [_expense(date(2024, 7, 3), 9000, "fun")]

    score = calculate_financial_health(
        current, history, 1000, date(2024, 7, 1), categories=CATEGORIES, today=date(2024, 7, 5)
    )

    for value in (score.pacing, score.burnRatio, score.stability, score.sharpe, score.creep, score.totalScore):
        assert 0 <= value <= 100
    assert score.pacing == 0
    assert score.burnRatio == 0
    assert score.label == "Needs Work"


def test_health_labels():
    assert health_label(90) == "Excellent"
    assert health_label(89) == "Good"
    assert health_label(75) == "Good"
    assert health_label(60) == "Fair"
    assert health_label(59) == "Needs Work"


def test_composite_uses_documented_weights():
    scores = {"pacing": 96, "burnRatio": 65, "stability": 40, "sharpe": 100, "creep": 0}

    # 96*.25 + 65*.25 + 40*.20 + 100*.15 + 0*.15 = 63.25
    assert composite_score(scores) == 63
    # Stability outweighs sharpe: swapping their values moves the total.
    assert composite_score({**scores, "stability": 100, "sharpe": 40}) == 66


def test_uneven_household_weighted_total():
    """Test 5: composite of unequal sub-scores"""
    history = []
    for month in range(1, 7):
        history.append(_income(date(2024, month, 1), 3000))
        history.append(_expense(date(2024, month, 10), 2500 if month % 2 else 1500))
    current = [_expense(date(2024, 7, 10), 2200)]

    score = calculate_financial_health(
        current, history, 2000, date(2024, 7, 1), categories=CATEGORIES, today=date(2024, 8, 5)
    )

    # Recent average 1833.33: pacing 20% over; burn target 1833.33 * 1.1, 1/11 over.
    assert (score.pacing, score.burnRatio, score.stability, score.sharpe, score.creep) == (80, 91, 50, 100, 100)
    # 80*.25 + 90.91*.25 + 50*.20 + 100*.15 + 100*.15 = 82.73
    assert score.totalScore == 83
    assert score.label == "Good"
