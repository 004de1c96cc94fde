from __future__ import annotations

import hashlib
import logging
from datetime import date, datetime
from typing import Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

from finlens.core.archetypes import generate_budget_archetypes
from finlens.core.buckets import build_monthly_buckets, historical_baseline
from finlens.core.dates import days_in_month
from finlens.core.elasticity import analyze_expense_elasticity
from finlens.core.events import analyze_event_patterns
from finlens.core.feasibility import calculate_savings_sprint, check_budget_impact, suggest_funding_strategy
from finlens.core.health import calculate_financial_health
from finlens.core.projection import estimate_current_month, project_daily_expenses, project_daily_income

from ..schemas import (
    CacheInfo,
    ElasticityRequest,
    ElasticityResponse,
    EventsRequest,
    EventsResponse,
    FeasibilityRequest,
    FeasibilityResponse,
    HealthRequest,
    HealthResponse,
    ProjectionRequest,
    ProjectionResponse,
)
from ..state import result_cache, result_cache_lock

logger = logging.getLogger("finlens.backend.analytics")

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def cache_key(kind: str, payload: BaseModel, reference: Optional[date] = None) -> str:
    """Hash of the request snapshot plus the date the result depends on."""
    digest = hashlib.sha256()
    digest.update(payload.model_dump_json().encode("utf-8"))
    digest.update((reference or date.today()).isoformat().encode("utf-8"))
    return f"{kind}:{digest.hexdigest()}"


def _cache_info(entry: Dict[str, object]) -> CacheInfo:
    try:
        calculated_at = datetime.fromisoformat(str(entry["calculated_at"]))
    except (KeyError, ValueError) as exc:
        logger.warning("Failed to read cache info: %s", exc)
        return CacheInfo(is_cached=True)
    age = datetime.utcnow() - calculated_at
    return CacheInfo(
        is_cached=True,
        calculated_at=entry["calculated_at"],
        age_minutes=int(age.total_seconds() / 60),
    )


def _memoized(
    key: str,
    response_model: Type[ResponseT],
    compute: Callable[[], ResponseT],
    force_refresh: bool = False,
) -> ResponseT:
    entry = None
    if not force_refresh:
        with result_cache_lock:
            entry = result_cache.get(key)
    if entry is not None:
        logger.info("Serving analytics result from cache (%s)", key.split(":", 1)[0])
        response = response_model.model_validate(entry["payload"])
        return response.model_copy(update={"cache_info": _cache_info(entry)})

    response = compute()
    entry = {
        "payload": response.model_dump(mode="json"),
        "calculated_at": datetime.utcnow().isoformat(),
    }
    with result_cache_lock:
        result_cache[key] = entry
    return response


def get_health_score(payload: HealthRequest, force_refresh: bool = False) -> HealthResponse:
    def compute() -> HealthResponse:
        score = calculate_financial_health(
            payload.transactions,
            payload.full_history,
            payload.monthly_income,
            payload.reference_date,
            payload.settings,
            payload.goals,
            payload.categories,
            payload.custom_budgets,
            today=payload.today,
        )
        return HealthResponse(score=score)

    key = cache_key("health", payload, payload.today)
    return _memoized(key, HealthResponse, compute, force_refresh)


def get_projection(payload: ProjectionRequest, force_refresh: bool = False) -> ProjectionResponse:
    def compute() -> ProjectionResponse:
        today = payload.today or date.today()
        buckets = build_monthly_buckets(payload.history, today, payload.categories, payload.custom_budgets)
        baseline = historical_baseline(buckets)
        month_days = days_in_month(today.year, today.month)
        return ProjectionResponse(
            baseline=baseline,
            estimate=estimate_current_month(payload.transactions, baseline, today),
            daily_expenses=project_daily_expenses(payload.history, payload.transactions, month_days, today.day),
            daily_income=project_daily_income(payload.history, payload.transactions, month_days, today.day),
        )

    key = cache_key("projection", payload, payload.today)
    return _memoized(key, ProjectionResponse, compute, force_refresh)


def get_elasticity(payload: ElasticityRequest, force_refresh: bool = False) -> ElasticityResponse:
    def compute() -> ElasticityResponse:
        return ElasticityResponse(elasticity=analyze_expense_elasticity(payload.transactions, payload.categories))

    return _memoized(cache_key("elasticity", payload), ElasticityResponse, compute, force_refresh)


def get_events(payload: EventsRequest, force_refresh: bool = False) -> EventsResponse:
    def compute() -> EventsResponse:
        events = analyze_event_patterns(payload.transactions, payload.categories)
        logger.info("Detected %s events from %s transactions", len(events), len(payload.transactions))
        return EventsResponse(events=events, archetypes=generate_budget_archetypes(events))

    return _memoized(cache_key("events", payload), EventsResponse, compute, force_refresh)


def get_feasibility(payload: FeasibilityRequest, force_refresh: bool = False) -> FeasibilityResponse:
    def compute() -> FeasibilityResponse:
        result = check_budget_impact(
            payload.proposed_amount,
            payload.start_date,
            payload.end_date,
            payload.transactions,
            payload.settings,
            now=payload.now,
        )
        funding = None
        sprint = []
        if payload.proposed_amount:
            elasticity = analyze_expense_elasticity(payload.transactions, payload.categories)
            funding = suggest_funding_strategy(payload.proposed_amount, elasticity)
            if payload.sprint_months:
                sprint = calculate_savings_sprint(
                    payload.proposed_amount, payload.sprint_months, payload.transactions, today=payload.now
                )
        return FeasibilityResponse(result=result, funding=funding, sprint=sprint)

    key = cache_key("feasibility", payload, payload.now)
    return _memoized(key, FeasibilityResponse, compute, force_refresh)
