"""Current-month expense estimate and day-level projections."""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from .data_models import ExpenseEstimate, Transaction
from .dates import days_in_month, month_key

# Incomes at or above this amount that are not the salary count as "secondary".
SECONDARY_INCOME_FLOOR = 100.0
_DEFAULT_SALARY_DAY = 25


def estimate_current_month(
    current_month_transactions: Sequence[Transaction],
    baseline: float,
    today: Optional[date] = None,
) -> ExpenseEstimate:
    """Blend actual spend to date with a pro-rated share of the baseline.

    ``remaining = baseline * remainingDays / daysInMonth``. Without a baseline
    nothing is extrapolated, and on the last day of the month the estimate is
    exactly the actual total.
    """
    today = today or date.today()
    month_days = days_in_month(today.year, today.month)

    actual = 0.0
    for tx in current_month_transactions or []:
        if not tx.is_paid_expense:
            continue
        effective = tx.effective_date
        if (effective.year, effective.month) != (today.year, today.month) or effective.day > today.day:
            continue
        actual += tx.amount

    remaining_days = month_days - today.day
    remaining = baseline * remaining_days / month_days if baseline and baseline > 0 else 0.0
    if remaining_days == 0:
        remaining = 0.0
    return ExpenseEstimate(actual=actual, remaining=remaining, total=actual + remaining)


def project_daily_expenses(
    history: Sequence[Transaction],
    current: Sequence[Transaction],
    month_days: int,
    today_day: int,
) -> Dict[int, float]:
    """Spread the expected rest-of-month spend over the remaining days.

    The gap between the historical monthly average and what has already been
    spent is distributed proportionally to how much was historically spent on
    each day of the month; evenly when those days have no history.
    """
    day_weights: Dict[int, float] = defaultdict(float)
    months = set()
    total_history = 0.0
    for tx in history or []:
        if tx.type != "expense":
            continue
        effective = tx.effective_date
        total_history += tx.amount
        day_weights[effective.day] += tx.amount
        months.add(month_key(effective))

    if not months:
        return {}

    avg_monthly = total_history / len(months)
    current_total = sum(tx.amount for tx in current or [] if tx.type == "expense")
    gap = max(0.0, avg_monthly - current_total)
    if gap <= 0:
        return {}

    future_days = range(today_day + 1, month_days + 1)
    future_weight = sum(day_weights.get(day, 0.0) for day in future_days)
    if future_weight > 0:
        return {day: gap * day_weights.get(day, 0.0) / future_weight for day in future_days}
    if len(future_days) > 0:
        share = gap / len(future_days)
        return {day: share for day in future_days}
    return {}


def project_daily_income(
    history: Sequence[Transaction],
    current: Sequence[Transaction],
    month_days: int,
    today_day: int,
) -> Dict[int, float]:
    """Predict salary, secondary and petty income still expected this month."""
    months: Dict[str, List[tuple]] = defaultdict(list)
    for tx in history or []:
        if tx.type != "income":
            continue
        effective = tx.effective_date
        months[month_key(effective)].append((tx.amount, effective.day))

    if not months:
        return {}

    num_months = len(months)
    salaries: List[tuple] = []
    secondary_totals: List[float] = []
    petty_total = 0.0
    for entries in months.values():
        ordered = sorted(entries, key=lambda item: item[0], reverse=True)
        salaries.append(ordered[0])
        rest = [amount for amount, _day in ordered[1:]]
        secondary_totals.append(sum(amount for amount in rest if amount >= SECONDARY_INCOME_FLOOR))
        petty_total += sum(amount for amount in rest if amount < SECONDARY_INCOME_FLOOR)

    avg_salary = sum(amount for amount, _day in salaries) / num_months
    salary_days = sorted(day for _amount, day in salaries)
    median_salary_day = salary_days[len(salary_days) // 2] if salary_days else _DEFAULT_SALARY_DAY
    secondary_totals.sort()
    median_secondary = secondary_totals[len(secondary_totals) // 2]
    avg_petty = petty_total / num_months

    current_amounts = sorted((tx.amount for tx in current or [] if tx.type == "income"), reverse=True)
    current_max = current_amounts[0] if current_amounts else 0.0
    current_secondary = sum(
        amount for amount in current_amounts if SECONDARY_INCOME_FLOOR <= amount < avg_salary * 0.8
    )

    predictions: Dict[int, float] = defaultdict(float)
    if current_max < avg_salary * 0.8 and median_salary_day > today_day:
        predictions[median_salary_day] += avg_salary

    secondary_likelihood = sum(1 for total in secondary_totals if total > 0) / num_months
    if current_secondary < median_secondary * 0.7 and secondary_likelihood > 0.5:
        middle_day = min(month_days, max(today_day + 1, 15))
        predictions[middle_day] += median_secondary

    if avg_petty > 0 and today_day < month_days:
        predictions[month_days] += avg_petty

    return dict(predictions)
