from __future__ import annotations

import logging
from typing import Callable, TypeVar

from fastapi import APIRouter, HTTPException, status

from ..schemas import (
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
from ..services import analytics

logger = logging.getLogger("finlens.backend.analytics")

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

T = TypeVar("T")


def _run(name: str, handler: Callable[[], T]) -> T:
    try:
        return handler()
    except HTTPException:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("Analytics %s failed", name)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Analytics computation failed: {exc}",
        ) from exc


@router.post("/health", response_model=HealthResponse)
def post_health(payload: HealthRequest, force_refresh: bool = False):
    """Composite financial health score for the month of ``reference_date``."""
    return _run("health", lambda: analytics.get_health_score(payload, force_refresh=force_refresh))


@router.post("/projection", response_model=ProjectionResponse)
def post_projection(payload: ProjectionRequest, force_refresh: bool = False):
    return _run("projection", lambda: analytics.get_projection(payload, force_refresh=force_refresh))


@router.post("/elasticity", response_model=ElasticityResponse)
def post_elasticity(payload: ElasticityRequest, force_refresh: bool = False):
    return _run("elasticity", lambda: analytics.get_elasticity(payload, force_refresh=force_refresh))


@router.post("/events", response_model=EventsResponse)
def post_events(payload: EventsRequest, force_refresh: bool = False):
    """Detected life events plus the budget archetypes built from them."""
    return _run("events", lambda: analytics.get_events(payload, force_refresh=force_refresh))


@router.post("/feasibility", response_model=FeasibilityResponse)
def post_feasibility(payload: FeasibilityRequest, force_refresh: bool = False):
    """
    Grade a proposed budget.

    Also returns a funding strategy and, when ``sprint_months`` is set, a
    savings sprint schedule for the proposed amount.
    """
    return _run("feasibility", lambda: analytics.get_feasibility(payload, force_refresh=force_refresh))
