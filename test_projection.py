"""Current-month estimate and daily projection maps."""
from datetime import date

import pytest

from finlens.core.data_models import Transaction
from finlens.core.projection import estimate_current_month, project_daily_expenses, project_daily_income


def _expense(when, amount, paid=True):
    return Transaction(date=when, amount=amount, type="expense", isPaid=paid)


def _income(when, amount):
    return Transaction(date=when, amount=amount, type="income")


def test_estimate_on_last_day_equals_actual():
    """Test 1: no extrapolation once the month has fully elapsed"""
    transactions = [_expense(date(2024, 6, 2), 120), _expense(date(2024, 6, 30), 300)]

    estimate = estimate_current_month(transactions, baseline=5000, today=date(2024, 6, 30))

    assert estimate.remaining == 0
    assert estimate.total == estimate.actual == 420


def test_estimate_blends_actual_and_prorated_baseline():
    """Test 2: remaining = baseline * remainingDays / daysInMonth"""
    transactions = [
        _expense(date(2024, 6, 3), 60),
        _expense(date(2024, 6, 9), 40),
        _expense(date(2024, 6, 8), 999, paid=False),
        _expense(date(2024, 6, 20), 500),
        _income(date(2024, 6, 1), 3000),
    ]

    estimate = estimate_current_month(transactions, baseline=3000, today=date(2024, 6, 10))

    assert estimate.actual == 100
    assert estimate.remaining == pytest.approx(2000)
    assert estimate.total == pytest.approx(2100)


def test_estimate_without_baseline_uses_actual_only():
    """Test 3: empty history means no extrapolation"""
    estimate = estimate_current_month([_expense(date(2024, 6, 3), 75)], baseline=0, today=date(2024, 6, 10))

    assert estimate.remaining == 0
    assert estimate.total == 75


def test_daily_expenses_follow_historical_intensity():
    """Test 4: the spend gap lands on historically busy days"""
    history = [_expense(date(2024, 4, 20), 300), _expense(date(2024, 5, 20), 300)]
    current = [_expense(date(2024, 6, 4), 100)]

    projection = project_daily_expenses(history, current, month_days=30, today_day=10)

    assert projection[20] == pytest.approx(200)
    assert sum(projection.values()) == pytest.approx(200)
    assert min(projection) == 11


def test_daily_expenses_spread_evenly_without_future_history():
    """Test 5: uniform split when remaining days have no history"""
    history = [_expense(date(2024, 4, 5), 400), _expense(date(2024, 5, 5), 400)]

    projection = project_daily_expenses(history, [], month_days=30, today_day=10)

    assert len(projection) == 20
    assert all(value == pytest.approx(20) for value in projection.values())


def test_daily_expenses_empty_history_or_no_gap():
    """Test 6: nothing to project"""
    assert project_daily_expenses([], [], month_days=30, today_day=10) == {}
    history = [_expense(date(2024, 5, 20), 100)]
    assert project_daily_expenses(history, [_expense(date(2024, 6, 2), 150)], 30, 10) == {}


def test_daily_income_predicts_salary_and_petty_income():
    """Test 7: missing salary on the median pay day, petty income at month end"""
    history = [
        _income(date(2024, 4, 25), 3000),
        _income(date(2024, 4, 3), 20),
        _income(date(2024, 5, 25), 3000),
        _income(date(2024, 5, 3), 20),
    ]

    projection = project_daily_income(history, [], month_days=30, today_day=10)

    assert projection == {25: 3000, 30: 20}


def test_daily_income_skips_salary_already_received():
    """Test 8: a salary-sized income this month suppresses the prediction"""
    history = [_income(date(2024, 4, 25), 3000), _income(date(2024, 5, 25), 3000)]
    current = [_income(date(2024, 6, 8), 3000)]

    assert project_daily_income(history, current, month_days=30, today_day=10) == {}


def test_daily_income_predicts_recurring_secondary_income():
    """Test 9: secondary income seen in most months is expected mid-month"""
    history = [
        _income(date(2024, 3, 25), 3000),
        _income(date(2024, 3, 14), 400),
        _income(date(2024, 4, 25), 3000),
        _income(date(2024, 4, 15), 400),
        _income(date(2024, 5, 25), 3000),
    ]

    projection = project_daily_income(history, [], month_days=30, today_day=10)

    assert projection[25] == 3000
    assert projection[15] == 400
