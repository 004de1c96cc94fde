"""Which expense categories compress when money is tight."""
from __future__ import annotations

import logging
import math
from typing import Dict, Optional, Sequence

import pandas as pd

from .buckets import category_lookup
from .data_models import Category, ElasticityEntry, Transaction
from .dates import month_key

logger = logging.getLogger("finlens.core.elasticity")

# Share of months taken from each end of the efficiency ranking.
_QUARTILE = 0.25
# Reductions above this percentage mark a category as flexible.
FLEXIBLE_REDUCTION_THRESHOLD = 20.0


def _monthly_frame(transactions: Sequence[Transaction], categories: Dict[str, Category]) -> pd.DataFrame:
    rows = []
    for tx in transactions:
        if not tx.is_paid_expense:
            continue
        category = categories.get(tx.categoryId) if tx.categoryId else None
        rows.append(
            {
                "month": month_key(tx.effective_date),
                "category": category.name if category is not None else None,
                "amount": tx.amount,
            }
        )
    return pd.DataFrame(rows, columns=["month", "category", "amount"])


def analyze_expense_elasticity(
    transactions: Sequence[Transaction],
    categories: Optional[Sequence[Category]],
) -> Dict[str, ElasticityEntry]:
    """
    Compare per-category spend between lean and abundant months.
    Months are ranked by efficiency (income - expense); the bottom and top
    quarter (at least one month each) are averaged per category, and the
    relative drop from abundant to lean is the category's reduction.
    """
    if not transactions or categories is None:
        return {}

    lookup = category_lookup(categories)
    expenses = _monthly_frame(transactions, lookup)
    if expenses.empty:
        return {}

    # Chronological index; the stable sort below keeps ties in that order.
    months = pd.DataFrame(index=pd.Index(sorted(expenses["month"].unique()), name="month"))
    months["expenses"] = expenses.groupby("month")["amount"].sum()

    income_by_month: Dict[str, float] = {}
    for tx in transactions:
        if tx.type != "income":
            continue
        key = month_key(tx.date)
        # Income only counts toward months with expense activity.
        if key in months.index:
            income_by_month[key] = income_by_month.get(key, 0.0) + tx.amount
    months["income"] = pd.Series(income_by_month, dtype=float)
    months["income"] = months["income"].fillna(0.0)

    if len(months) < 2:
        return {}

    months["efficiency"] = months["income"] - months["expenses"]
    ranked = months.sort_values("efficiency", kind="mergesort")
    group_size = math.ceil(len(ranked) * _QUARTILE)
    lean_months = ranked.index[:group_size]
    abundant_months = ranked.index[-group_size:]

    categorized = expenses.dropna(subset=["category"])
    if categorized.empty:
        return {}
    spend = categorized.pivot_table(index="month", columns="category", values="amount", aggfunc="sum")
    # Averages are per month in which the category appears; NaN cells are skipped.
    lean_avg = spend.reindex(lean_months).mean(skipna=True).fillna(0.0)
    abundant_avg = spend.reindex(abundant_months).mean(skipna=True).fillna(0.0)

    elasticity: Dict[str, ElasticityEntry] = {}
    for name in spend.columns:
        lean = float(lean_avg.get(name, 0.0))
        abundant = float(abundant_avg.get(name, 0.0))
        if abundant <= 0:
            continue
        reduction = (abundant - lean) / abundant * 100
        elasticity[str(name)] = ElasticityEntry(
            reduction=max(0.0, reduction),
            leanAvg=lean,
            abundantAvg=abundant,
            flexible=reduction > FLEXIBLE_REDUCTION_THRESHOLD,
        )

    logger.debug("Elasticity computed for %s categories over %s months", len(elasticity), len(months))
    return elasticity
