from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from finlens.core.data_models import (
    Archetype,
    Category,
    CustomBudget,
    ElasticityEntry,
    EngineSettings,
    Event,
    ExpenseEstimate,
    FeasibilityResult,
    FundingStrategy,
    Goal,
    HealthScore,
    SprintInstallment,
    Transaction,
)


class CacheInfo(BaseModel):
    is_cached: bool = False
    calculated_at: Optional[str] = None
    age_minutes: Optional[int] = None


# Request schemas
class SnapshotRequest(BaseModel):
    """Full transaction snapshot sent by the caller; nothing is stored server-side."""

    transactions: List[Transaction] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)


class HealthRequest(SnapshotRequest):
    full_history: List[Transaction] = Field(default_factory=list)
    monthly_income: float = 0.0
    reference_date: date
    settings: EngineSettings = Field(default_factory=EngineSettings)
    goals: List[Goal] = Field(default_factory=list)
    custom_budgets: List[CustomBudget] = Field(default_factory=list)
    today: Optional[date] = None


class ProjectionRequest(SnapshotRequest):
    history: List[Transaction] = Field(default_factory=list)
    custom_budgets: List[CustomBudget] = Field(default_factory=list)
    today: Optional[date] = None


class ElasticityRequest(SnapshotRequest):
    pass


class EventsRequest(SnapshotRequest):
    pass


class FeasibilityRequest(SnapshotRequest):
    proposed_amount: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    settings: EngineSettings = Field(default_factory=EngineSettings)
    sprint_months: Optional[int] = Field(default=None, ge=1)
    now: Optional[date] = None


# Response schemas
class HealthResponse(BaseModel):
    score: HealthScore
    cache_info: CacheInfo = Field(default_factory=CacheInfo)


class ProjectionResponse(BaseModel):
    baseline: float
    estimate: ExpenseEstimate
    daily_expenses: Dict[int, float] = Field(default_factory=dict)
    daily_income: Dict[int, float] = Field(default_factory=dict)
    cache_info: CacheInfo = Field(default_factory=CacheInfo)


class ElasticityResponse(BaseModel):
    elasticity: Dict[str, ElasticityEntry] = Field(default_factory=dict)
    cache_info: CacheInfo = Field(default_factory=CacheInfo)


class EventsResponse(BaseModel):
    events: List[Event] = Field(default_factory=list)
    archetypes: List[Archetype] = Field(default_factory=list)
    cache_info: CacheInfo = Field(default_factory=CacheInfo)


class FeasibilityResponse(BaseModel):
    result: FeasibilityResult
    funding: Optional[FundingStrategy] = None
    sprint: List[SprintInstallment] = Field(default_factory=list)
    cache_info: CacheInfo = Field(default_factory=CacheInfo)
