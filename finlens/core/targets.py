"""Resolve goals into monthly per-priority ceilings."""
from __future__ import annotations

from typing import Dict, Optional, Sequence

from .data_models import EngineSettings, Goal, TargetPolicy

# 50/30/20 rule used when the user has not configured a goal for a priority.
DEFAULT_TARGET_PERCENTAGES: Dict[str, float] = {"needs": 50.0, "wants": 30.0, "savings": 20.0}


def resolve_budget_limit(
    goal: Goal,
    monthly_income: float,
    settings: EngineSettings,
    historical_average_income: float = 0.0,
) -> float:
    """Monthly limit for one goal.

    Absolute mode returns the flat ``target_amount``. Percentage mode applies
    ``target_percentage`` to income; with ``fixedLifestyleMode`` and an income
    above the historical average, needs/wants stay pinned to the historical
    basis and savings absorbs the overflow.
    """
    if not settings.goalMode:
        return float(goal.target_amount or 0.0)

    percentage = goal.target_percentage or 0.0
    if settings.fixedLifestyleMode and 0 < historical_average_income < monthly_income:
        overflow = monthly_income - historical_average_income
        standard = historical_average_income * percentage / 100
        if goal.priority == "savings":
            return standard + overflow
        return standard

    return monthly_income * percentage / 100


def resolve_target_policy(
    goals: Optional[Sequence[Goal]],
    monthly_income: float,
    settings: Optional[EngineSettings] = None,
    historical_average_income: float = 0.0,
) -> TargetPolicy:
    settings = settings or EngineSettings()
    by_priority = {goal.priority: goal for goal in goals or []}

    limits: Dict[str, float] = {}
    for priority, default_percentage in DEFAULT_TARGET_PERCENTAGES.items():
        goal = by_priority.get(priority)
        if goal is None:
            goal = Goal(priority=priority, target_percentage=default_percentage)
            # Defaults are percentages; without an absolute amount fall back to the rule.
            limits[priority] = resolve_budget_limit(
                goal,
                monthly_income,
                settings.model_copy(update={"goalMode": True}),
                historical_average_income,
            )
            continue
        limits[priority] = resolve_budget_limit(goal, monthly_income, settings, historical_average_income)

    return TargetPolicy(needs=limits["needs"], wants=limits["wants"], savings=limits["savings"])
