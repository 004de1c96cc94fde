"""Expense elasticity between lean and abundant months."""
from datetime import date

import pytest

from finlens.core.data_models import Category, Transaction
from finlens.core.elasticity import analyze_expense_elasticity

CATEGORIES = [
    Category(id="dining", name="Dining", priority="wants"),
    Category(id="rent", name="Rent", priority="needs"),
    Category(id="books", name="Books", priority="wants"),
    Category(id="gifts", name="Gifts", priority="wants"),
]


def _expense(month, amount, category, paid=True):
    return Transaction(date=date(2024, month, 10), amount=amount, type="expense", categoryId=category, isPaid=paid)


def _income(month, amount):
    return Transaction(date=date(2024, month, 1), amount=amount, type="income")


def _history():
    return [
        _income(1, 3000), _expense(1, 400, "dining"), _expense(1, 1000, "rent"),
        _income(2, 3000), _expense(2, 300, "dining"), _expense(2, 1000, "rent"),
        # Lean month.
        _income(3, 2000), _expense(3, 100, "dining"), _expense(3, 1000, "rent"),
        _expense(3, 200, "books"), _expense(3, 50, "gifts"),
        # Abundant month.
        _income(4, 3500), _expense(4, 500, "dining"), _expense(4, 1000, "rent"), _expense(4, 100, "books"),
    ]


def test_flexible_category_is_detected():
    """Test 1: dining drops 80% in the lean month"""
    result = analyze_expense_elasticity(_history(), CATEGORIES)

    dining = result["Dining"]
    assert dining.leanAvg == 100
    assert dining.abundantAvg == 500
    assert dining.reduction == pytest.approx(80)
    assert dining.flexible is True

    rent = result["Rent"]
    assert rent.reduction == 0
    assert rent.flexible is False


def test_reduction_is_clamped_and_undefined_categories_dropped():
    """Test 2: higher lean spend clamps to 0; no abundant spend means no entry"""
    result = analyze_expense_elasticity(_history(), CATEGORIES)

    books = result["Books"]
    assert books.reduction == 0
    assert books.leanAvg == 200
    assert books.abundantAvg == 100
    assert books.flexible is False
    assert "Gifts" not in result
    for entry in result.values():
        assert entry.reduction >= 0
        assert entry.flexible == (entry.reduction > 20)


def test_requires_two_months_of_expenses():
    """Test 3: income-only months do not count as data points"""
    transactions = [_expense(1, 100, "dining"), _income(2, 3000), _expense(1, 50, "dining", paid=False)]

    assert analyze_expense_elasticity(transactions, CATEGORIES) == {}
    assert analyze_expense_elasticity([], CATEGORIES) == {}
    assert analyze_expense_elasticity(_history(), None) == {}


def test_category_average_uses_months_where_it_appears():
    """Test 4: quartiles round up and average per appearance"""
    transactions = []
    for month, income, dining in [(1, 1000, 900), (2, 5000, 300), (3, 5000, 200), (4, 1000, 800), (5, 5000, 0), (6, 3000, 100)]:
        transactions.append(_income(month, income))
        transactions.append(_expense(month, 100, "rent"))
        if dining:
            transactions.append(_expense(month, dining, "dining"))

    result = analyze_expense_elasticity(transactions, CATEGORIES)

    # Six months -> two lean (Jan, Apr) and two abundant (May, Mar); May has no dining.
    assert result["Dining"].leanAvg == 850
    assert result["Dining"].abundantAvg == 200
    assert result["Dining"].reduction == 0
