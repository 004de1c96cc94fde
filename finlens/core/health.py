"""Composite financial health score built from five sub-metrics.

1. Pacing: spend-to-date against the same point of the previous 3 months.
2. Burn ratio: spend-to-date against a buffered "smart" spending target.
3. Stability: volatility of monthly expenses (coefficient of variation).
4. Sharpe: risk-adjusted consistency of monthly net savings.
5. Creep: expense growth against income growth.
"""
from __future__ import annotations

import logging
import math
from datetime import date
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .buckets import (
    DEFAULT_LOOKBACK_MONTHS,
    build_monthly_buckets,
    category_lookup,
    custom_budget_ids,
    summarize_expenses,
)
from .data_models import (
    Category,
    CustomBudget,
    EngineSettings,
    ExpenseBreakdown,
    Goal,
    HealthScore,
    MonthlyBucket,
    TargetPolicy,
    Transaction,
)
from .dates import day_cursor, days_in_month
from .numeric import clamp, coefficient_of_variation, mean, population_std, to_score
from .targets import resolve_target_policy

logger = logging.getLogger("finlens.core.health")

NEUTRAL_SCORE = 50.0
PACING_MONTHS = 3
BURN_BUFFER = 1.1

SCORE_WEIGHTS: Dict[str, float] = {
    "pacing": 0.25,
    "burnRatio": 0.25,
    "stability": 0.20,
    "sharpe": 0.15,
    "creep": 0.15,
}

HEALTH_LABELS: Tuple[Tuple[int, str], ...] = ((90, "Excellent"), (75, "Good"), (60, "Fair"))
DEFAULT_LABEL = "Needs Work"


def health_label(total_score: int) -> str:
    for threshold, label in HEALTH_LABELS:
        if total_score >= threshold:
            return label
    return DEFAULT_LABEL


def composite_score(scores: Dict[str, float]) -> int:
    """Weighted sum of the unrounded sub-scores, rounded half-up."""
    return to_score(sum(scores[name] * weight for name, weight in SCORE_WEIGHTS.items()))


def pacing_score(current_spend: float, history_points: Sequence[float]) -> float:
    """Score spend-to-date against the average of the non-zero history points."""
    points = [value for value in history_points if value > 0]
    if not points:
        return 0.0
    average = mean(points)
    if current_spend <= average:
        return 100.0
    deviation = (current_spend - average) / average
    return max(0.0, 100 - deviation * 100)


def burn_ratio_score(
    current: ExpenseBreakdown,
    policy: TargetPolicy,
    recent_totals: Sequence[float],
    cursor: int,
    month_days: int,
) -> float:
    """
    Compare spend-to-date with max(linear ceiling, historical same-day average)
    plus a 10% buffer. Overage is penalised harder when it is wants-heavy.
    """
    progress = cursor / month_days
    linear_target = policy.spendingCeiling * progress
    # Month totals scaled by elapsed share of the month, not true cumulative spend.
    historical = [total * progress for total in recent_totals if total > 0]
    historical_target = mean(historical)
    buffered_target = max(linear_target, historical_target) * BURN_BUFFER

    spend = current.total
    if spend <= buffered_target:
        return 100.0

    over_ratio = (spend - buffered_target) / buffered_target if buffered_target > 0 else 1.0
    wants_ratio = current.wants / spend if spend > 0 else 0.0
    penalty_multiplier = 0.5 + wants_ratio
    return max(0.0, 100 - over_ratio * penalty_multiplier * 200)


def stability_score(monthly_expenses: Sequence[float]) -> float:
    values = [value for value in monthly_expenses if value > 0]
    if len(values) < 2:
        return NEUTRAL_SCORE
    return clamp(100 - coefficient_of_variation(values) * 200, 0.0, 100.0)


def sharpe_score(net_savings: Sequence[float]) -> float:
    """Mean over std of monthly net savings with a variance floor."""
    if len(net_savings) < 2:
        return NEUTRAL_SCORE
    average = mean(net_savings)
    floor = max(1.0, abs(average) * 0.01)
    ratio = average / max(population_std(net_savings), floor)
    if ratio < 0:
        return clamp(25 + ratio * 25, 0.0, 25.0)
    return min(100.0, float(to_score(25 + math.sqrt(ratio) * 65)))


def _growth(start: float, end: float) -> float:
    if start == 0:
        return 0.0 if end <= 0 else 1.0
    return (end - start) / start


def creep_score(points: Sequence[Tuple[float, float]]) -> float:
    """``points`` are (income, expenses) pairs ordered oldest first."""
    if len(points) < 3:
        return NEUTRAL_SCORE
    start_income = mean([income for income, _ in points[:2]])
    end_income = mean([income for income, _ in points[-2:]])
    start_expenses = mean([expenses for _, expenses in points[:2]])
    end_expenses = mean([expenses for _, expenses in points[-2:]])

    creep_delta = _growth(start_expenses, end_expenses) - _growth(start_income, end_income)
    if creep_delta <= 0:
        return 100.0
    return max(0.0, 100 - creep_delta * 500)


def _current_breakdown(
    transactions: Sequence[Transaction],
    reference_date: date,
    categories: Dict[str, Category],
    budget_ids: Set[str],
    cursor: int,
) -> ExpenseBreakdown:
    in_month = [
        tx
        for tx in transactions or []
        if (tx.effective_date.year, tx.effective_date.month) == (reference_date.year, reference_date.month)
    ]
    return summarize_expenses(in_month, categories, budget_ids, day_limit=cursor)


def calculate_financial_health(
    transactions: Sequence[Transaction],
    full_history: Sequence[Transaction],
    monthly_income: float,
    reference_date: date,
    settings: Optional[EngineSettings] = None,
    goals: Optional[Sequence[Goal]] = None,
    categories: Optional[Sequence[Category]] = None,
    custom_budgets: Optional[Sequence[CustomBudget]] = None,
    today: Optional[date] = None,
) -> HealthScore:
    """Score the month containing ``reference_date`` on a 0-100 scale."""
    today = today or date.today()
    lookup = category_lookup(categories)
    budget_ids = custom_budget_ids(custom_budgets)

    buckets: List[MonthlyBucket] = build_monthly_buckets(
        full_history or [], reference_date, categories, custom_budgets, DEFAULT_LOOKBACK_MONTHS
    )
    recent = buckets[:PACING_MONTHS]
    cursor = day_cursor(reference_date, today)
    month_days = days_in_month(reference_date.year, reference_date.month)

    current = _current_breakdown(transactions, reference_date, lookup, budget_ids, cursor)

    pacing_points = [
        summarize_expenses(bucket.transactions, lookup, budget_ids, day_limit=cursor).total for bucket in recent
    ]
    historical_income = mean([bucket.totalIncome for bucket in recent if bucket.totalIncome > 0])
    policy = resolve_target_policy(goals, monthly_income, settings, historical_income)

    with_income = [bucket for bucket in buckets if bucket.totalIncome > 0]
    raw: Dict[str, float] = {
        "pacing": pacing_score(current.total, pacing_points),
        "burnRatio": burn_ratio_score(
            current, policy, [bucket.totalExpenses for bucket in recent], cursor, month_days
        ),
        "stability": stability_score([bucket.totalExpenses for bucket in buckets]),
        "sharpe": sharpe_score([bucket.totalIncome - bucket.totalExpenses for bucket in with_income]),
        "creep": creep_score(
            [(bucket.totalIncome, bucket.totalExpenses) for bucket in reversed(with_income)]
        ),
    }

    total_score = composite_score(raw)
    logger.debug("Health score for %s: %s (%s)", reference_date.isoformat(), total_score, raw)
    return HealthScore(
        totalScore=total_score,
        pacing=to_score(raw["pacing"]),
        burnRatio=to_score(raw["burnRatio"]),
        stability=to_score(raw["stability"]),
        sharpe=to_score(raw["sharpe"]),
        creep=to_score(raw["creep"]),
        label=health_label(total_score),
    )
