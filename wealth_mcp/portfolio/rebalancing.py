"""Target-allocation drift detection and rebalancing suggestions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd

from wealth_mcp.portfolio.models import (
    PRIORITY_RANK,
    Asset,
    AssetCategory,
    CategoryAllocation,
    Priority,
    RebalanceAction,
    RebalancingPlan,
    RebalancingSuggestion,
    RebalancingTarget,
    RiskProfile,
)

DEFAULT_THRESHOLD_PERCENT = 5.0


def calculate_total_value(assets: Sequence[Asset]) -> float:
    return float(sum(asset.current_value for asset in assets))


def calculate_current_allocation(assets: Sequence[Asset]) -> list[CategoryAllocation]:
    """Per-category value and share of the portfolio, in first-seen order."""
    if not assets:
        return []
    frame = pd.DataFrame(
        {
            "category": [AssetCategory(asset.category).value for asset in assets],
            "current_value": [float(asset.current_value) for asset in assets],
        }
    )
    totals = frame.groupby("category", sort=False)["current_value"].sum()
    total_value = float(frame["current_value"].sum())
    allocations: list[CategoryAllocation] = []
    for key, value in totals.items():
        category = AssetCategory(key)
        allocations.append(
            CategoryAllocation(
                category=category,
                current_value=float(value),
                current_percentage=float(value) / total_value * 100.0 if total_value > 0 else 0.0,
                assets=tuple(asset for asset in assets if asset.category == category),
            )
        )
    return allocations


def calculate_asset_return_percent(asset: Asset) -> float:
    if not asset.purchase_value:
        return 0.0
    return (asset.current_value - asset.purchase_value) / asset.purchase_value * 100.0


def find_best_performing_asset(assets: Sequence[Asset]) -> Asset | None:
    best: Asset | None = None
    for asset in assets:
        if best is None or calculate_asset_return_percent(asset) > calculate_asset_return_percent(best):
            best = asset
    return best


def find_worst_performing_asset(assets: Sequence[Asset]) -> Asset | None:
    worst: Asset | None = None
    for asset in assets:
        if worst is None or calculate_asset_return_percent(asset) < calculate_asset_return_percent(worst):
            worst = asset
    return worst


def _classify(deviation: float, difference: float, threshold: float) -> tuple[RebalanceAction, Priority]:
    direction = RebalanceAction.BUY if difference > 0 else RebalanceAction.SELL
    if deviation > threshold * 2:
        return direction, Priority.HIGH
    if deviation > threshold:
        return direction, Priority.MEDIUM
    return RebalanceAction.HOLD, Priority.LOW


def _build_targets(
    allocations: Sequence[CategoryAllocation],
    target_allocations: Mapping[AssetCategory | str, float],
    total_value: float,
    threshold: float,
) -> list[RebalancingTarget]:
    by_category = {allocation.category: allocation for allocation in allocations}
    targets: list[RebalancingTarget] = []
    for raw_category, target_percentage in target_allocations.items():
        category = AssetCategory(raw_category)
        allocation = by_category.get(category)
        current_value = allocation.current_value if allocation else 0.0
        current_percentage = allocation.current_percentage if allocation else 0.0
        target_value = float(target_percentage) / 100.0 * total_value
        difference = target_value - current_value
        if total_value > 0:
            action, priority = _classify(abs(current_percentage - target_percentage), difference, threshold)
        else:
            action, priority = RebalanceAction.HOLD, Priority.LOW
        targets.append(
            RebalancingTarget(
                category=category,
                target_percentage=float(target_percentage),
                current_percentage=current_percentage,
                target_value=target_value,
                current_value=current_value,
                difference=difference,
                action=action,
                priority=priority,
            )
        )
    return targets


def _suggest(target: RebalancingTarget, assets: Sequence[Asset], total_value: float) -> RebalancingSuggestion | None:
    category_assets = [asset for asset in assets if asset.category == target.category]
    impact = abs(target.difference) / total_value * 100.0
    if target.action is RebalanceAction.BUY and target.difference > 0:
        return RebalancingSuggestion(
            category=target.category,
            asset=find_best_performing_asset(category_assets),
            action=RebalanceAction.BUY,
            amount=target.difference,
            reason=(
                f"Increase {target.category.value} allocation from "
                f"{target.current_percentage:.1f}% to {target.target_percentage:g}%"
            ),
            priority=target.priority,
            impact=impact,
        )
    if target.action is RebalanceAction.SELL and target.difference < 0:
        return RebalancingSuggestion(
            category=target.category,
            asset=find_worst_performing_asset(category_assets),
            action=RebalanceAction.SELL,
            amount=abs(target.difference),
            reason=(
                f"Reduce {target.category.value} allocation from "
                f"{target.current_percentage:.1f}% to {target.target_percentage:g}%"
            ),
            priority=target.priority,
            impact=impact,
        )
    return None


def generate_rebalancing_plan(
    assets: Sequence[Asset],
    target_allocations: Mapping[AssetCategory | str, float],
    threshold_percent: float = DEFAULT_THRESHOLD_PERCENT,
) -> RebalancingPlan:
    """Compare the current mix against target percentages.

    Categories drifting more than ``threshold_percent`` get a medium priority
    buy/sell, more than twice the threshold a high priority one. Each such
    category yields one suggestion naming the best performer to add to or the
    worst performer to trim. Suggestions are ordered by priority, then by
    impact on the overall mix.
    """
    total_value = calculate_total_value(assets)
    allocations = calculate_current_allocation(assets)
    targets = _build_targets(allocations, target_allocations, total_value, threshold_percent)

    suggestions: list[RebalancingSuggestion] = []
    for target in targets:
        if target.action is RebalanceAction.HOLD:
            continue
        suggestion = _suggest(target, assets, total_value)
        if suggestion is not None:
            suggestions.append(suggestion)
    suggestions.sort(key=lambda item: (-PRIORITY_RANK[item.priority], -item.impact))

    return RebalancingPlan(
        targets=tuple(targets),
        suggestions=tuple(suggestions),
        is_rebalance_needed=any(target.priority is not Priority.LOW for target in targets),
        total_value=total_value,
    )


def default_target_allocations(age: int, risk_profile: RiskProfile = "moderate") -> dict[AssetCategory, float]:
    """Rule-of-thumb allocation: equity share is ``100 - age``, floored at 30."""
    equity = float(max(100 - age, 30))
    if risk_profile == "conservative":
        return {
            AssetCategory.STOCKS: max(equity - 20, 20.0),
            AssetCategory.MUTUAL_FUNDS: max(equity - 10, 30.0),
            AssetCategory.FIXED_DEPOSIT: 25.0,
            AssetCategory.GOLD: 10.0,
            AssetCategory.CASH: 10.0,
            AssetCategory.OTHER: 5.0,
        }
    if risk_profile == "aggressive":
        return {
            AssetCategory.STOCKS: equity * 0.6,
            AssetCategory.MUTUAL_FUNDS: equity * 0.4,
            AssetCategory.FIXED_DEPOSIT: 10.0,
            AssetCategory.GOLD: 5.0,
            AssetCategory.CASH: 5.0,
            AssetCategory.OTHER: 5.0,
        }
    return {
        AssetCategory.STOCKS: equity * 0.4,
        AssetCategory.MUTUAL_FUNDS: equity * 0.6,
        AssetCategory.FIXED_DEPOSIT: 20.0,
        AssetCategory.GOLD: 10.0,
        AssetCategory.CASH: 5.0,
        AssetCategory.OTHER: 5.0,
    }


def calculate_optimal_sip_allocation(
    monthly_amount: float,
    assets: Sequence[Asset],
    target_allocations: Mapping[AssetCategory | str, float],
) -> dict[AssetCategory, float]:
    """Split a monthly SIP so new money flows to under-allocated categories."""
    current = {allocation.category: allocation.current_percentage for allocation in calculate_current_allocation(assets)}
    shortfalls: dict[AssetCategory, float] = {}
    for raw_category, target_percentage in target_allocations.items():
        category = AssetCategory(raw_category)
        deviation = float(target_percentage) - current.get(category, 0.0)
        if deviation > 0:
            shortfalls[category] = deviation / 100.0 * monthly_amount

    total_allocated = sum(shortfalls.values())
    if total_allocated > 0:
        scale = monthly_amount / total_allocated
        return {category: amount * scale for category, amount in shortfalls.items()}
    return {
        AssetCategory(category): float(target_percentage) / 100.0 * monthly_amount
        for category, target_percentage in target_allocations.items()
    }
