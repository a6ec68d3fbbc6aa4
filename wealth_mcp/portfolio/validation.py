"""Portfolio input validation logic."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

from wealth_mcp.portfolio.models import Asset, AssetCategory, Goal, ValidationIssue

ALLOCATION_SUM_TOLERANCE = 0.5
MAX_ANNUAL_RETURN_RATE = 100.0


def _is_finite_number(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def validate_assets(assets: Sequence[Asset]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for idx, asset in enumerate(assets):
        if not _is_finite_number(asset.current_value) or asset.current_value < 0:
            issues.append(
                ValidationIssue(
                    field="current_value",
                    row=idx,
                    code="invalid_current_value",
                    message="current_value must be a non-negative number.",
                )
            )
        if asset.purchase_value is not None and (
            not _is_finite_number(asset.purchase_value) or asset.purchase_value < 0
        ):
            issues.append(
                ValidationIssue(
                    field="purchase_value",
                    row=idx,
                    code="invalid_purchase_value",
                    message="purchase_value must be a non-negative number.",
                )
            )
        if any(not _is_finite_number(sip.amount) or sip.amount < 0 for sip in asset.sip_contributions):
            issues.append(
                ValidationIssue(
                    field="sip_contributions",
                    row=idx,
                    code="invalid_sip_amount",
                    message="SIP contribution amounts must be non-negative numbers.",
                )
            )
    return issues


def validate_target_allocations(target_allocations: Mapping[AssetCategory, float]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not target_allocations:
        return [
            ValidationIssue(
                field="target_allocations",
                code="missing_targets",
                message="At least one target allocation is required.",
            )
        ]
    for category, percentage in target_allocations.items():
        if not _is_finite_number(percentage) or percentage < 0 or percentage > 100:
            issues.append(
                ValidationIssue(
                    field=f"target_allocations.{AssetCategory(category).value}",
                    code="invalid_target_percentage",
                    message="Target percentages must be between 0 and 100.",
                )
            )
    return issues


def allocation_sum_warning(target_allocations: Mapping[AssetCategory, float]) -> str | None:
    """Advisory note when targets do not add up to 100; plans are still computed."""
    total = float(sum(target_allocations.values()))
    if math.isfinite(total) and abs(total - 100.0) <= ALLOCATION_SUM_TOLERANCE:
        return None
    return f"Target allocations sum to {total:.2f}%, not 100%; each category is compared against its own target."


def validate_goal(goal: Goal) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not _is_finite_number(goal.target_amount) or goal.target_amount <= 0:
        issues.append(
            ValidationIssue(field="target_amount", code="invalid_target_amount", message="target_amount must be positive.")
        )
    if not _is_finite_number(goal.current_amount) or goal.current_amount < 0:
        issues.append(
            ValidationIssue(
                field="current_amount",
                code="invalid_current_amount",
                message="current_amount must be a non-negative number.",
            )
        )
    if not _is_finite_number(goal.monthly_contribution) or goal.monthly_contribution < 0:
        issues.append(
            ValidationIssue(
                field="monthly_contribution",
                code="invalid_contribution",
                message="monthly_contribution must be a non-negative number.",
            )
        )
    rate = goal.expected_return_rate
    if not _is_finite_number(rate) or rate <= -100 or rate > MAX_ANNUAL_RETURN_RATE:
        issues.append(
            ValidationIssue(
                field="expected_return_rate",
                code="invalid_return_rate",
                message=f"expected_return_rate must be an annual percentage above -100 and at most {MAX_ANNUAL_RETURN_RATE:g}.",
            )
        )
    return issues
