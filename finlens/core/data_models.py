"""Data models shared by the analytics engine and the HTTP layer."""
from __future__ import annotations

import datetime as dt
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Priority = Literal["needs", "wants", "savings"]
TransactionType = Literal["income", "expense"]
TemporalContext = Literal["future", "ongoing", "past", "unknown"]
Grade = Literal["A", "B", "C", "D", "F"]

CASH_WALLET_EXPENSE = "expense_from_wallet"


class _Record(BaseModel):
    """Base for caller-supplied records; unknown keys are tolerated."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class _Value(BaseModel):
    """Base for engine outputs: immutable once constructed."""

    model_config = ConfigDict(frozen=True)


class Transaction(_Record):
    """A single income or expense entry as stored by the ledger."""

    id: Optional[str] = None
    title: Optional[str] = None
    date: dt.date
    paidDate: Optional[dt.date] = None
    amount: float = Field(ge=0)
    type: TransactionType
    categoryId: Optional[str] = None
    isPaid: bool = False
    isCashTransaction: bool = False
    cashTransactionKind: Optional[str] = None
    budgetId: Optional[str] = None
    financialPriority: Optional[Priority] = None

    @property
    def effective_date(self) -> dt.date:
        """Date used for cash-flow bucketing (settlement date for paid expenses)."""
        if self.type == "expense" and self.isPaid and self.paidDate is not None:
            return self.paidDate
        return self.date

    @property
    def is_paid_expense(self) -> bool:
        return self.type == "expense" and self.isPaid

    @property
    def is_wallet_outflow(self) -> bool:
        return self.isCashTransaction and self.cashTransactionKind == CASH_WALLET_EXPENSE


class Category(_Record):
    id: str
    name: str
    priority: Priority = "wants"


class Goal(_Record):
    """Target allocation for one priority class."""

    priority: Priority
    target_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    target_amount: Optional[float] = Field(default=None, ge=0)


class CustomBudget(_Record):
    """Bounded discretionary envelope such as a trip budget."""

    id: str
    name: Optional[str] = None
    allocatedAmount: float = 0.0
    startDate: Optional[dt.date] = None
    endDate: Optional[dt.date] = None
    status: str = "active"
    isSystemBudget: bool = False


class EngineSettings(_Record):
    """User preferences that change how targets are resolved."""

    goalMode: bool = Field(default=True, description="True = percentage targets, False = absolute")
    fixedLifestyleMode: bool = False
    lookbackMonths: int = Field(default=6, ge=1, le=24)


class TargetPolicy(_Value):
    """Monthly ceilings per priority class resolved from goals."""

    needs: float
    wants: float
    savings: float

    @property
    def spendingCeiling(self) -> float:
        return self.needs + self.wants


class ExpenseBreakdown(_Value):
    needs: float = 0.0
    wantsDirect: float = 0.0
    wantsCustom: float = 0.0

    @property
    def wants(self) -> float:
        return self.wantsDirect + self.wantsCustom

    @property
    def total(self) -> float:
        return self.needs + self.wants


class MonthlyBucket(_Value):
    """Per-month aggregate rebuilt on every invocation."""

    offset: int
    monthStart: dt.date
    monthEnd: dt.date
    transactions: List[Transaction] = Field(default_factory=list)
    totalIncome: float = 0.0
    totalExpenses: float = 0.0
    needsExpenses: float = 0.0
    wantsExpenses: float = 0.0


class ExpenseEstimate(_Value):
    actual: float
    remaining: float
    total: float


class ElasticityEntry(_Value):
    reduction: float
    leanAvg: float
    abundantAvg: float
    flexible: bool


class AnchorExpense(_Value):
    title: Optional[str] = None
    amount: float
    category: Optional[str] = None


class Event(_Value):
    """A cluster of elevated spending days that likely share one cause."""

    startDate: dt.date
    endDate: dt.date
    durationDays: int
    totalAmount: float
    transactionCount: int
    categoryPriorityMix: Dict[str, float] = Field(default_factory=dict)
    eventType: str
    anchorExpense: Optional[AnchorExpense] = None
    locations: List[str] = Field(default_factory=list)
    transactions: List[Transaction] = Field(default_factory=list)


class Archetype(_Value):
    type: str
    name: str
    recommendedAmount: int
    typicalDuration: int
    occurrences: int
    categoryBreakdown: Dict[str, float] = Field(default_factory=dict)
    confidence: int
    lastOccurrence: dt.date


class HealthScore(_Value):
    totalScore: int
    pacing: int
    burnRatio: int
    stability: int
    sharpe: int
    creep: int
    label: str


class FeasibilityMetrics(_Value):
    avgMonthlyIncome: int
    avgMonthlyExpenses: int
    avgNetFlow: int
    currentSavingsRate: float
    projectedSavingsRate: float
    savingsRateImpact: float
    monthlyBudgetCost: int
    affordabilityRatio: float
    opportunityCost: int
    monthsToRecover: int


class FeasibilityResult(_Value):
    feasibilityGrade: Grade
    isAffordable: bool
    message: str
    temporalContext: TemporalContext
    metrics: Optional[FeasibilityMetrics] = None


class SprintInstallment(_Value):
    month: int
    amount: float
    confidence: Literal["low", "medium", "high"]
    note: Optional[str] = None


class FundingRecommendation(_Value):
    category: str
    suggestedReduction: int
    currentSpending: int
    historicalReductionRate: int


class FundingStrategy(_Value):
    strategy: Literal["reduce_all", "savings", "category_reduction", "hybrid"]
    message: str
    recommendations: List[FundingRecommendation] = Field(default_factory=list)
    remainingToFund: Optional[int] = None
