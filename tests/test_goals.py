import math
from datetime import date

from wealth_mcp.portfolio.goals import (
    calculate_future_value,
    calculate_months_remaining,
    calculate_months_to_target,
    calculate_required_contribution,
    evaluate_goal,
)
from wealth_mcp.portfolio.models import Goal, GoalStatus

AS_OF = date(2026, 1, 1)


def _goal(**overrides: object) -> Goal:
    values: dict[str, object] = {
        "target_amount": 1_200_000.0,
        "current_amount": 0.0,
        "target_date": date(2036, 1, 1),
        "monthly_contribution": 0.0,
        "expected_return_rate": 12.0,
    }
    values.update(overrides)
    return Goal(**values)  # type: ignore[arg-type]


def _required_for_ten_year_goal() -> float:
    return 1_200_000.0 * 0.01 / (1.01**122 - 1.0)


def test_ten_year_goal_required_contribution() -> None:
    projection = evaluate_goal(_goal(), AS_OF)
    assert projection.days_remaining == 3652
    assert projection.months_remaining == 122
    assert math.isclose(projection.required_monthly_contribution, _required_for_ten_year_goal(), rel_tol=1e-9)
    assert projection.remaining_amount == 1_200_000.0


def test_contributing_the_required_amount_is_on_track() -> None:
    projection = evaluate_goal(_goal(monthly_contribution=_required_for_ten_year_goal()), AS_OF)
    assert projection.status is GoalStatus.ON_TRACK
    assert projection.projected_months is not None
    assert abs(projection.projected_months - 122) < 1e-6
    assert projection.additional_monthly_needed < 1e-6
    assert projection.beyond_horizon is False


def test_half_contribution_is_behind() -> None:
    required = _required_for_ten_year_goal()
    projection = evaluate_goal(_goal(monthly_contribution=required / 2), AS_OF)
    assert projection.status is GoalStatus.BEHIND
    assert projection.projected_months is not None and projection.projected_months > 122
    assert math.isclose(projection.additional_monthly_needed, required / 2, rel_tol=1e-9)


def test_double_contribution_is_ahead() -> None:
    projection = evaluate_goal(_goal(monthly_contribution=_required_for_ten_year_goal() * 2), AS_OF)
    assert projection.status is GoalStatus.AHEAD
    assert projection.projected_completion_date is not None
    assert projection.projected_completion_date < date(2036, 1, 1)
    assert projection.additional_monthly_needed == 0.0


def test_reached_target_is_completed() -> None:
    projection = evaluate_goal(_goal(current_amount=1_300_000.0), AS_OF)
    assert projection.status is GoalStatus.COMPLETED
    assert projection.required_monthly_contribution == 0.0
    assert projection.remaining_amount == 0.0
    assert projection.projected_months == 0.0


def test_past_target_date_is_overdue() -> None:
    projection = evaluate_goal(
        _goal(target_amount=1000.0, current_amount=100.0, target_date=date(2025, 6, 1)),
        AS_OF,
    )
    assert projection.status is GoalStatus.OVERDUE
    assert projection.days_remaining < 0
    assert projection.months_remaining == 1


def test_zero_contribution_without_growth_never_finishes() -> None:
    projection = evaluate_goal(_goal(current_amount=1000.0, expected_return_rate=0.0), AS_OF)
    assert projection.status is GoalStatus.BEHIND
    assert projection.beyond_horizon is True
    assert projection.projected_months is None
    assert projection.projected_completion_date is None


def test_projection_past_cap_is_beyond_horizon() -> None:
    projection = evaluate_goal(_goal(target_amount=1_000_000.0, current_amount=1000.0), AS_OF)
    assert projection.beyond_horizon is True
    assert projection.status is GoalStatus.BEHIND
    relaxed = evaluate_goal(_goal(target_amount=1_000_000.0, current_amount=1000.0), AS_OF, projection_cap_months=900)
    assert relaxed.beyond_horizon is False
    assert relaxed.projected_months is not None and 690 < relaxed.projected_months < 700


def test_zero_rate_uses_straight_line_contribution() -> None:
    projection = evaluate_goal(
        _goal(
            target_amount=12000.0,
            target_date=date(2026, 12, 27),
            expected_return_rate=0.0,
            monthly_contribution=1000.0,
        ),
        AS_OF,
    )
    assert projection.months_remaining == 12
    assert projection.required_monthly_contribution == 1000.0
    assert projection.projected_months == 12.0
    assert projection.status is GoalStatus.ON_TRACK
    assert projection.projected_completion_date == date(2026, 12, 27)


def test_inflation_adjusted_target_grows() -> None:
    goal = _goal(target_amount=100_000.0, target_date=date(2027, 1, 1), is_inflation_adjusted=True)
    projection = evaluate_goal(goal, AS_OF)
    assert math.isclose(projection.effective_target, 100_000.0 * 1.06 ** (365 / 365.25), rel_tol=1e-12)
    flat = evaluate_goal(goal, AS_OF, inflation_rate=0.0)
    assert flat.effective_target == 100_000.0


def test_months_remaining_is_at_least_one() -> None:
    assert calculate_months_remaining(0) == 1
    assert calculate_months_remaining(1) == 1
    assert calculate_months_remaining(31) == 2
    assert calculate_months_remaining(-45) == 1


def test_months_to_target_inverts_future_value() -> None:
    target = calculate_future_value(1000.0, 100.0, 0.01, 24)
    assert target is not None
    months = calculate_months_to_target(1000.0, target, 100.0, 0.01)
    assert months is not None
    assert abs(months - 24) < 1e-9
    assert calculate_months_to_target(500.0, 400.0, 0.0, 0.01) == 0.0


def test_required_contribution_edge_cases() -> None:
    assert calculate_required_contribution(0.0, 0.01, 12) == 0.0
    assert calculate_required_contribution(1200.0, 0.0, 12) == 100.0


def test_goal_evaluation_is_repeatable() -> None:
    goal = _goal(monthly_contribution=5000.0)
    assert evaluate_goal(goal, AS_OF) == evaluate_goal(goal, AS_OF)


def test_unrepresentable_balances_are_reported_as_none() -> None:
    goal = _goal(
        target_amount=1_000_000.0,
        current_amount=1000.0,
        target_date=date(2800, 1, 1),
        monthly_contribution=100.0,
        expected_return_rate=100.0,
    )
    projection = evaluate_goal(goal, AS_OF)
    assert projection.future_value_of_current is None
    assert projection.projected_value_at_target is None
    assert projection.remaining_amount == 0.0
    assert projection.required_monthly_contribution == 0.0
    assert projection.status is GoalStatus.AHEAD
    assert calculate_future_value(0.0, 0.0, 0.5, 10_000) == 0.0
