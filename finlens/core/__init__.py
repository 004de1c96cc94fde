"""Core package exposing the FinLens analytics engine."""

from .archetypes import generate_budget_archetypes
from .buckets import build_monthly_buckets, historical_baseline
from .data_models import (
    Archetype,
    Category,
    CustomBudget,
    EngineSettings,
    Event,
    FeasibilityResult,
    Goal,
    HealthScore,
    TargetPolicy,
    Transaction,
)
from .elasticity import analyze_expense_elasticity
from .events import analyze_event_patterns
from .feasibility import calculate_savings_sprint, check_budget_impact, suggest_funding_strategy
from .health import calculate_financial_health
from .projection import estimate_current_month, project_daily_expenses, project_daily_income
from .targets import resolve_target_policy

__all__ = [
    "Archetype",
    "Category",
    "CustomBudget",
    "EngineSettings",
    "Event",
    "FeasibilityResult",
    "Goal",
    "HealthScore",
    "TargetPolicy",
    "Transaction",
    "analyze_event_patterns",
    "analyze_expense_elasticity",
    "build_monthly_buckets",
    "calculate_financial_health",
    "calculate_savings_sprint",
    "check_budget_impact",
    "estimate_current_month",
    "generate_budget_archetypes",
    "historical_baseline",
    "project_daily_expenses",
    "project_daily_income",
    "resolve_target_policy",
    "suggest_funding_strategy",
]
