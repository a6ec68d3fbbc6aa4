"""Savings-goal funding math under monthly compounding."""

from __future__ import annotations

import math
from datetime import date, timedelta

from wealth_mcp.portfolio.models import DateLike, Goal, GoalProjection, GoalStatus, as_datetime

DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365.25
RATE_EPSILON = 1e-9
ON_TRACK_TOLERANCE = 1e-6
DEFAULT_PROJECTION_CAP_MONTHS = 600
DEFAULT_INFLATION_RATE = 6.0
DEFAULT_AHEAD_MARGIN = 0.1


def _finite(value: float, default: float = 0.0) -> float:
    return value if math.isfinite(value) else default


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _compound(rate: float, periods: float) -> float:
    try:
        return (1.0 + rate) ** periods
    except OverflowError:
        return math.inf


def calculate_months_remaining(days_remaining: int) -> int:
    return max(1, math.ceil(days_remaining / DAYS_PER_MONTH))


def monthly_rate_from_annual(annual_rate_percent: float) -> float:
    return annual_rate_percent / 100.0 / 12.0


def calculate_future_value(
    initial_amount: float,
    monthly_contribution: float,
    monthly_rate: float,
    months: float,
) -> float | None:
    """Balance after ``months`` of growth plus end-of-month contributions.

    None when the balance is too large to represent.
    """
    if months <= 0:
        return initial_amount
    if abs(monthly_rate) < RATE_EPSILON:
        return initial_amount + monthly_contribution * months
    growth = _compound(monthly_rate, months)
    balance = 0.0
    if initial_amount:
        balance += initial_amount * growth
    if monthly_contribution:
        balance += monthly_contribution * (growth - 1.0) / monthly_rate
    return _finite_or_none(balance)


def calculate_required_contribution(remaining_amount: float, monthly_rate: float, months: int) -> float:
    """Monthly payment that accumulates ``remaining_amount`` in ``months``."""
    if remaining_amount <= 0 or months <= 0:
        return 0.0
    if abs(monthly_rate) < RATE_EPSILON:
        return remaining_amount / months
    return _finite(remaining_amount * monthly_rate / (_compound(monthly_rate, months) - 1.0))


def calculate_months_to_target(
    current_amount: float,
    target_amount: float,
    monthly_contribution: float,
    monthly_rate: float,
) -> float | None:
    """Invert the annuity formula: months until the balance reaches target.

    Solves ``P(1+r)^n + c((1+r)^n - 1)/r = T`` for ``n``, which gives
    ``n = ln((T*r + c) / (P*r + c)) / ln(1+r)``. None means the target is
    never reached at this contribution.
    """
    if current_amount >= target_amount:
        return 0.0
    if abs(monthly_rate) < RATE_EPSILON:
        if monthly_contribution <= 0:
            return None
        return (target_amount - current_amount) / monthly_contribution
    if monthly_rate <= -1.0:
        return None
    numerator = target_amount * monthly_rate + monthly_contribution
    denominator = current_amount * monthly_rate + monthly_contribution
    if numerator <= 0 or denominator <= 0:
        return None
    months = math.log(numerator / denominator) / math.log1p(monthly_rate)
    if not math.isfinite(months) or months < 0:
        return None
    return months


def _effective_target(goal: Goal, days_remaining: int, inflation_rate: float) -> float:
    if not goal.is_inflation_adjusted or days_remaining <= 0:
        return goal.target_amount
    return _finite(goal.target_amount * _compound(inflation_rate / 100.0, days_remaining / DAYS_PER_YEAR), goal.target_amount)


def _classify(
    progress_percent: float,
    days_remaining: int,
    projected_months: float | None,
    months_remaining: int,
    ahead_margin: float,
) -> GoalStatus:
    if progress_percent >= 100.0:
        return GoalStatus.COMPLETED
    if days_remaining < 0:
        return GoalStatus.OVERDUE
    if projected_months is None:
        return GoalStatus.BEHIND
    if projected_months <= months_remaining * (1.0 - ahead_margin):
        return GoalStatus.AHEAD
    if projected_months <= months_remaining + ON_TRACK_TOLERANCE:
        return GoalStatus.ON_TRACK
    return GoalStatus.BEHIND


def evaluate_goal(
    goal: Goal,
    as_of: DateLike,
    projection_cap_months: int = DEFAULT_PROJECTION_CAP_MONTHS,
    inflation_rate: float = DEFAULT_INFLATION_RATE,
    ahead_margin: float = DEFAULT_AHEAD_MARGIN,
) -> GoalProjection:
    """Funding requirement and status of a goal as seen on ``as_of``.

    The required contribution is the ordinary-annuity payment that closes the
    gap left after the current balance compounds to the target date. The
    projected completion uses the goal's actual contribution; projections
    beyond ``projection_cap_months`` (never less than the goal's own horizon)
    are reported as ``beyond_horizon`` instead of as a number.
    """
    today: date = as_datetime(as_of).date()
    days_remaining = (goal.target_date - today).days
    months_remaining = calculate_months_remaining(days_remaining)
    monthly_rate = monthly_rate_from_annual(goal.expected_return_rate)
    effective_target = _effective_target(goal, days_remaining, inflation_rate)
    progress_percent = goal.current_amount / effective_target * 100.0 if effective_target > 0 else 100.0

    future_value_of_current = calculate_future_value(goal.current_amount, 0.0, monthly_rate, months_remaining)
    if future_value_of_current is None:
        # An unrepresentable balance has already outgrown any finite target.
        remaining_amount = 0.0
    else:
        remaining_amount = max(0.0, effective_target - future_value_of_current)
    required = calculate_required_contribution(remaining_amount, monthly_rate, months_remaining)

    projected_months = calculate_months_to_target(
        goal.current_amount,
        effective_target,
        goal.monthly_contribution,
        monthly_rate,
    )
    horizon = max(projection_cap_months, months_remaining)
    beyond_horizon = projected_months is None or projected_months > horizon
    if beyond_horizon:
        projected_months = None
    completion_date = (
        today + timedelta(days=math.ceil(projected_months * DAYS_PER_MONTH)) if projected_months is not None else None
    )

    return GoalProjection(
        status=_classify(progress_percent, days_remaining, projected_months, months_remaining, ahead_margin),
        progress_percent=_finite(progress_percent),
        days_remaining=days_remaining,
        months_remaining=months_remaining,
        monthly_rate=monthly_rate,
        effective_target=effective_target,
        future_value_of_current=future_value_of_current,
        remaining_amount=remaining_amount,
        required_monthly_contribution=required,
        additional_monthly_needed=max(0.0, required - goal.monthly_contribution),
        projected_months=projected_months,
        projected_completion_date=completion_date,
        beyond_horizon=beyond_horizon,
        projected_value_at_target=calculate_future_value(
            goal.current_amount,
            goal.monthly_contribution,
            monthly_rate,
            months_remaining,
        ),
    )
