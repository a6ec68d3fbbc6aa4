"""Typed portfolio models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Literal, Union

DateLike = Union[date, datetime]
TransactionType = Literal["income", "expense", "investment", "insurance"]
RiskProfile = Literal["conservative", "moderate", "aggressive"]


class AssetCategory(str, Enum):
    STOCKS = "stocks"
    MUTUAL_FUNDS = "mutual_funds"
    FIXED_DEPOSIT = "fixed_deposit"
    GOLD = "gold"
    CASH = "cash"
    OTHER = "other"
    EPF = "epf"


EQUITY_CATEGORIES = frozenset({AssetCategory.STOCKS, AssetCategory.MUTUAL_FUNDS})


class RebalanceAction(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


class GoalStatus(str, Enum):
    AHEAD = "ahead"
    ON_TRACK = "on-track"
    BEHIND = "behind"
    COMPLETED = "completed"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class CashFlow:
    date: DateLike
    amount: float


@dataclass(frozen=True)
class SipContribution:
    date: DateLike
    amount: float
    units: float = 0.0


@dataclass(frozen=True)
class Transaction:
    date: DateLike
    amount: float
    type: TransactionType = "investment"
    description: str = ""
    category: str = ""
    id: str | None = None


@dataclass(frozen=True)
class Asset:
    category: AssetCategory
    current_value: float
    purchase_value: float | None = None
    purchase_date: DateLike | None = None
    sip_contributions: tuple[SipContribution, ...] = ()
    name: str = ""
    symbol: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class Goal:
    target_amount: float
    current_amount: float
    target_date: date
    monthly_contribution: float = 0.0
    expected_return_rate: float = 0.0
    is_inflation_adjusted: bool = False
    name: str = ""
    id: str | None = None


@dataclass(frozen=True)
class CategoryAllocation:
    category: AssetCategory
    current_value: float
    current_percentage: float
    assets: tuple[Asset, ...] = field(default=(), repr=False)


@dataclass(frozen=True)
class RebalancingTarget:
    category: AssetCategory
    target_percentage: float
    current_percentage: float
    target_value: float
    current_value: float
    difference: float
    action: RebalanceAction
    priority: Priority


@dataclass(frozen=True)
class RebalancingSuggestion:
    category: AssetCategory
    asset: Asset | None
    action: RebalanceAction
    amount: float
    reason: str
    priority: Priority
    impact: float


@dataclass(frozen=True)
class RebalancingPlan:
    targets: tuple[RebalancingTarget, ...]
    suggestions: tuple[RebalancingSuggestion, ...]
    is_rebalance_needed: bool
    total_value: float


@dataclass(frozen=True)
class DiversificationScore:
    score: int
    analysis: str
    recommendations: tuple[str, ...]


@dataclass(frozen=True)
class GoalProjection:
    status: GoalStatus
    progress_percent: float
    days_remaining: int
    months_remaining: int
    monthly_rate: float
    effective_target: float
    future_value_of_current: float | None
    remaining_amount: float
    required_monthly_contribution: float
    additional_monthly_needed: float
    projected_months: float | None
    projected_completion_date: date | None
    beyond_horizon: bool
    projected_value_at_target: float | None


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str
    row: int | None = None
    code: str = "invalid_value"


def as_datetime(value: DateLike) -> datetime:
    """Promote a calendar date to midnight so dates and datetimes compare."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo is not None else value
    return datetime(value.year, value.month, value.day)
