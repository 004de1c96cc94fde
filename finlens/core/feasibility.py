"""Affordability of a proposed custom budget and how to fund it."""
from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .buckets import group_by_month
from .data_models import (
    ElasticityEntry,
    EngineSettings,
    FeasibilityMetrics,
    FeasibilityResult,
    FundingRecommendation,
    FundingStrategy,
    Grade,
    SprintInstallment,
    Transaction,
)
from .dates import coerce_to_date, month_key, shift_month, whole_months_between
from .numeric import coefficient_of_variation, round_half_up, to_score

logger = logging.getLogger("finlens.core.feasibility")

NOT_AFFORDABLE_SENTINEL = 999
SPRINT_HISTORY_MONTHS = 6
STABLE_CV_THRESHOLD = 0.15
FUNDING_SHARE = 0.8

# (max affordability ratio, min projected savings rate %, grade, affordable, message);
# evaluated in order, first match wins.
GRADE_TABLE: Tuple[Tuple[float, Optional[float], Grade, bool, str], ...] = (
    (0.3, 15.0, "A", True, "Highly affordable with minimal impact on your savings"),
    (0.5, 10.0, "B", True, "Affordable with moderate impact on savings"),
    (0.7, 5.0, "C", True, "Manageable but will significantly reduce savings"),
    (1.0, None, "D", False, "Challenging - would consume most of your available surplus"),
)
FALLBACK_GRADE: Tuple[Grade, bool, str] = ("F", False, "Not recommended - exceeds your typical monthly surplus")
INSUFFICIENT_DATA_MESSAGE = "Insufficient data for analysis"


def grade_budget(affordability_ratio: float, projected_savings_rate: float) -> Tuple[Grade, bool, str]:
    for max_ratio, min_rate, grade, affordable, message in GRADE_TABLE:
        if affordability_ratio > max_ratio:
            continue
        if min_rate is not None and projected_savings_rate <= min_rate:
            continue
        return grade, affordable, message
    return FALLBACK_GRADE


def temporal_context(start: date, end: date, now: date) -> str:
    if start > now:
        return "future"
    if end >= now:
        return "ongoing"
    return "past"


def _monthly_flows(transactions: Sequence[Transaction], now: date, months: int) -> List[Tuple[float, float]]:
    """(income, paid expenses) for the current month and the ``months - 1`` before it."""
    grouped = group_by_month(transactions)
    flows = []
    for offset in range(months):
        year, month = shift_month(now.year, now.month, -offset)
        month_txs = grouped.get(month_key(date(year, month, 1)), [])
        income = sum(tx.amount for tx in month_txs if tx.type == "income")
        expenses = sum(tx.amount for tx in month_txs if tx.is_paid_expense)
        flows.append((income, expenses))
    return flows


def check_budget_impact(
    proposed_amount: Optional[float],
    start_date: Any,
    end_date: Any,
    transactions: Optional[Sequence[Transaction]],
    settings: Optional[EngineSettings] = None,
    now: Optional[date] = None,
) -> FeasibilityResult:
    """Grade a proposed budget against trailing average net cash flow."""
    start = coerce_to_date(start_date)
    end = coerce_to_date(end_date)
    if not proposed_amount or start is None or end is None or transactions is None:
        return FeasibilityResult(
            feasibilityGrade="F",
            isAffordable=False,
            message=INSUFFICIENT_DATA_MESSAGE,
            temporalContext="unknown",
        )

    settings = settings or EngineSettings()
    now = now or date.today()
    lookback = settings.lookbackMonths

    flows = _monthly_flows(transactions, now, lookback)
    avg_income = sum(income for income, _ in flows) / lookback
    avg_expenses = sum(expenses for _, expenses in flows) / lookback
    avg_net_flow = avg_income - avg_expenses

    duration_months = max(1, whole_months_between(start, end) + 1)
    monthly_cost = proposed_amount / duration_months

    current_rate = avg_net_flow / avg_income * 100 if avg_income > 0 else 0.0
    projected_rate = (avg_net_flow - monthly_cost) / avg_income * 100 if avg_income > 0 else 0.0
    ratio = monthly_cost / avg_net_flow if avg_net_flow > 0 else float(NOT_AFFORDABLE_SENTINEL)
    months_to_recover = (
        math.ceil(proposed_amount / avg_net_flow) if avg_net_flow > 0 else NOT_AFFORDABLE_SENTINEL
    )

    grade, affordable, message = grade_budget(ratio, projected_rate)
    logger.debug("Budget %.2f over %s months graded %s (ratio %.3f)", proposed_amount, duration_months, grade, ratio)

    return FeasibilityResult(
        feasibilityGrade=grade,
        isAffordable=affordable,
        message=message,
        temporalContext=temporal_context(start, end, now),
        metrics=FeasibilityMetrics(
            avgMonthlyIncome=to_score(avg_income),
            avgMonthlyExpenses=to_score(avg_expenses),
            avgNetFlow=to_score(avg_net_flow),
            currentSavingsRate=round_half_up(current_rate, 1),
            projectedSavingsRate=round_half_up(projected_rate, 1),
            savingsRateImpact=round_half_up(current_rate - projected_rate, 1),
            monthlyBudgetCost=to_score(monthly_cost),
            affordabilityRatio=round_half_up(ratio, 2),
            opportunityCost=to_score(proposed_amount),
            monthsToRecover=months_to_recover,
        ),
    )


def _checksum_schedule(target_amount: float, plan: Sequence[Tuple[float, str, Optional[str]]]) -> List[SprintInstallment]:
    """Round each installment to cents; the last one takes the remainder."""
    schedule: List[SprintInstallment] = []
    accumulated = 0.0
    for index, (raw_amount, confidence, note) in enumerate(plan):
        if index == len(plan) - 1:
            amount = round_half_up(target_amount - accumulated, 2)
        else:
            amount = round_half_up(raw_amount, 2)
        accumulated += amount
        schedule.append(SprintInstallment(month=index + 1, amount=amount, confidence=confidence, note=note))
    return schedule


def calculate_savings_sprint(
    target_amount: float,
    months: int,
    transactions: Sequence[Transaction],
    today: Optional[date] = None,
) -> List[SprintInstallment]:
    """
    Monthly contribution schedule for reaching ``target_amount``.
    Stable spending history (or too little of it) gives an equal split;
    volatile history front-loads 60% of the target into the first half.
    """
    if not target_amount or target_amount <= 0 or not months or months <= 0:
        return []

    today = today or date.today()
    history = [expenses for _, expenses in _monthly_flows(transactions or [], today, min(months, SPRINT_HISTORY_MONTHS))]

    if len(history) < 2:
        share = target_amount / months
        return _checksum_schedule(target_amount, [(share, "low", None)] * months)

    if coefficient_of_variation(history) < STABLE_CV_THRESHOLD:
        share = target_amount / months
        return _checksum_schedule(target_amount, [(share, "high", None)] * months)

    first_half = math.ceil(months / 2)
    second_half = months - first_half
    plan = [(target_amount * 0.6 / first_half, "high", "Higher contribution during stable period")] * first_half
    if second_half:
        plan += [(target_amount * 0.4 / second_half, "medium", "Reduced contribution for flexibility")] * second_half
    return _checksum_schedule(target_amount, plan)


def suggest_funding_strategy(
    needed_amount: float,
    elasticity: Optional[Mapping[str, ElasticityEntry]],
) -> FundingStrategy:
    """Cover ``needed_amount`` by trimming the most flexible categories first."""
    if not elasticity:
        return FundingStrategy(
            strategy="reduce_all",
            message="Reduce spending across all categories proportionally",
        )

    flexible = sorted(
        ((name, entry) for name, entry in elasticity.items() if entry.flexible and entry.abundantAvg > 0),
        key=lambda item: item[1].reduction,
        reverse=True,
    )
    if not flexible:
        return FundingStrategy(strategy="savings", message="Use existing savings or build up over time")

    recommendations: List[FundingRecommendation] = []
    remaining = float(needed_amount)
    for name, entry in flexible:
        if remaining <= 0:
            break
        suggested = min((entry.abundantAvg - entry.leanAvg) * FUNDING_SHARE, remaining)
        # Rounded suggestions never add up to more than what is needed.
        reduction = min(to_score(suggested), math.floor(remaining))
        if reduction <= 0:
            continue
        recommendations.append(
            FundingRecommendation(
                category=name,
                suggestedReduction=reduction,
                currentSpending=to_score(entry.abundantAvg),
                historicalReductionRate=to_score(entry.reduction),
            )
        )
        remaining -= reduction

    remaining_to_fund = max(0, to_score(remaining))
    if remaining_to_fund == 0:
        strategy = "category_reduction"
        message = "Fund this budget by temporarily reducing flexible spending"
    else:
        strategy = "hybrid"
        message = "Reduce flexible spending and save %s from income" % remaining_to_fund
    return FundingStrategy(
        strategy=strategy,
        message=message,
        recommendations=recommendations,
        remainingToFund=remaining_to_fund,
    )
