"""Monthly aggregation shared by the health and projection metrics."""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from .data_models import Category, CustomBudget, ExpenseBreakdown, MonthlyBucket, Transaction
from .dates import month_bounds, month_key, shift_month
from .numeric import mean

DEFAULT_LOOKBACK_MONTHS = 6


def custom_budget_ids(custom_budgets: Optional[Iterable[CustomBudget]]) -> Set[str]:
    """IDs of real (non-system) custom budgets."""
    return {budget.id for budget in custom_budgets or [] if not budget.isSystemBudget}


def category_lookup(categories: Optional[Iterable[Category]]) -> Dict[str, Category]:
    return {category.id: category for category in categories or []}


def expense_priority(tx: Transaction, categories: Mapping[str, Category]) -> str:
    """Transaction override, then category priority, then "wants"."""
    if tx.financialPriority:
        return tx.financialPriority
    category = categories.get(tx.categoryId) if tx.categoryId else None
    if category is not None:
        return category.priority
    return "wants"


def summarize_expenses(
    transactions: Iterable[Transaction],
    categories: Mapping[str, Category],
    budget_ids: Set[str],
    day_limit: Optional[int] = None,
) -> ExpenseBreakdown:
    """Split realised spend into needs / direct wants / custom-budget wants.

    Only paid expenses count. Cash-wallet outflows are skipped so the same
    money is not counted twice, and savings-priority expenses are transfers
    rather than consumption. An expense linked to a custom budget is counted
    once, under custom wants.
    """
    needs = wants_direct = wants_custom = 0.0
    for tx in transactions:
        if not tx.is_paid_expense or tx.is_wallet_outflow:
            continue
        if day_limit is not None and tx.effective_date.day > day_limit:
            continue
        if tx.budgetId and tx.budgetId in budget_ids:
            wants_custom += tx.amount
            continue
        priority = expense_priority(tx, categories)
        if priority == "needs":
            needs += tx.amount
        elif priority == "wants":
            wants_direct += tx.amount
    return ExpenseBreakdown(needs=needs, wantsDirect=wants_direct, wantsCustom=wants_custom)


def group_by_month(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    grouped: Dict[str, List[Transaction]] = defaultdict(list)
    for tx in transactions:
        grouped[month_key(tx.effective_date)].append(tx)
    return grouped


def build_monthly_buckets(
    transactions: Sequence[Transaction],
    reference_date: date,
    categories: Optional[Sequence[Category]] = None,
    custom_budgets: Optional[Sequence[CustomBudget]] = None,
    months: int = DEFAULT_LOOKBACK_MONTHS,
) -> List[MonthlyBucket]:
    """One bucket per month for offsets ``1..months`` before ``reference_date``.

    Buckets are ordered most recent first. The input is grouped in a single
    pass; months without data get an empty bucket.
    """
    grouped = group_by_month(transactions or [])
    lookup = category_lookup(categories)
    budget_ids = custom_budget_ids(custom_budgets)

    buckets: List[MonthlyBucket] = []
    for offset in range(1, months + 1):
        year, month = shift_month(reference_date.year, reference_date.month, -offset)
        month_start, month_end = month_bounds(year, month)
        month_txs = grouped.get(month_key(month_start), [])

        breakdown = summarize_expenses(month_txs, lookup, budget_ids)
        income = sum(tx.amount for tx in month_txs if tx.type == "income")
        buckets.append(
            MonthlyBucket(
                offset=offset,
                monthStart=month_start,
                monthEnd=month_end,
                transactions=list(month_txs),
                totalIncome=income,
                totalExpenses=breakdown.total,
                needsExpenses=breakdown.needs,
                wantsExpenses=breakdown.wants,
            )
        )
    return buckets


def historical_baseline(buckets: Sequence[MonthlyBucket]) -> float:
    """Average monthly expense over the buckets that saw any spending."""
    totals = [bucket.totalExpenses for bucket in buckets if bucket.totalExpenses > 0]
    return mean(totals)
