"""Heuristic portfolio diversification scoring."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from wealth_mcp.portfolio.models import EQUITY_CATEGORIES, Asset, DiversificationScore
from wealth_mcp.portfolio.rebalancing import calculate_current_allocation, calculate_total_value

RECOMMEND_MORE_CATEGORIES = "Consider diversifying across more asset categories"
RECOMMEND_LESS_CATEGORY_CONCENTRATION = "Reduce concentration in single asset category"
RECOMMEND_MORE_EQUITY = "Consider increasing equity allocation for better growth"
RECOMMEND_LESS_EQUITY = "Consider reducing equity allocation to manage risk"
RECOMMEND_LESS_ASSET_CONCENTRATION = "Consider reducing concentration in individual assets"


@dataclass(frozen=True)
class DiversificationPolicy:
    """Scoring breakpoints; product heuristics kept as tunable constants."""

    wide_category_count: int = 5
    fair_category_count: int = 3
    category_points: tuple[int, int, int] = (30, 20, 10)
    low_category_share: float = 50.0
    fair_category_share: float = 70.0
    category_share_points: tuple[int, int, int] = (25, 15, 5)
    healthy_equity_band: tuple[float, float] = (40.0, 80.0)
    fair_equity_band: tuple[float, float] = (30.0, 90.0)
    equity_points: tuple[int, int, int] = (25, 15, 5)
    low_asset_share: float = 20.0
    fair_asset_share: float = 30.0
    asset_share_points: tuple[int, int, int] = (20, 10, 0)
    analysis_labels: tuple[tuple[int, str], ...] = (
        (80, "Excellent diversification with well-balanced portfolio"),
        (60, "Good diversification with minor improvements needed"),
        (40, "Moderate diversification with several areas for improvement"),
    )
    fallback_label: str = "Poor diversification with significant concentration risk"


DEFAULT_POLICY = DiversificationPolicy()


def _analysis(score: int, policy: DiversificationPolicy) -> str:
    for floor, label in policy.analysis_labels:
        if score >= floor:
            return label
    return policy.fallback_label


def calculate_diversification_score(
    assets: Sequence[Asset],
    policy: DiversificationPolicy = DEFAULT_POLICY,
) -> DiversificationScore:
    total_value = calculate_total_value(assets)
    if not assets or total_value <= 0:
        return DiversificationScore(
            score=0,
            analysis=policy.fallback_label,
            recommendations=(RECOMMEND_MORE_CATEGORIES,),
        )
    allocations = calculate_current_allocation(assets)
    score = 0
    recommendations: list[str] = []

    category_count = len(allocations)
    if category_count >= policy.wide_category_count:
        score += policy.category_points[0]
    elif category_count >= policy.fair_category_count:
        score += policy.category_points[1]
    else:
        score += policy.category_points[2]
        recommendations.append(RECOMMEND_MORE_CATEGORIES)

    largest_category = max((allocation.current_percentage for allocation in allocations), default=0.0)
    if largest_category < policy.low_category_share:
        score += policy.category_share_points[0]
    elif largest_category < policy.fair_category_share:
        score += policy.category_share_points[1]
    else:
        score += policy.category_share_points[2]
        recommendations.append(RECOMMEND_LESS_CATEGORY_CONCENTRATION)

    equity = sum(
        allocation.current_percentage for allocation in allocations if allocation.category in EQUITY_CATEGORIES
    )
    healthy_low, healthy_high = policy.healthy_equity_band
    fair_low, fair_high = policy.fair_equity_band
    if healthy_low <= equity <= healthy_high:
        score += policy.equity_points[0]
    elif fair_low <= equity <= fair_high:
        score += policy.equity_points[1]
    else:
        score += policy.equity_points[2]
        recommendations.append(RECOMMEND_MORE_EQUITY if equity < fair_low else RECOMMEND_LESS_EQUITY)

    largest_asset = max(asset.current_value / total_value * 100.0 for asset in assets)
    if largest_asset < policy.low_asset_share:
        score += policy.asset_share_points[0]
    elif largest_asset < policy.fair_asset_share:
        score += policy.asset_share_points[1]
    else:
        score += policy.asset_share_points[2]
        recommendations.append(RECOMMEND_LESS_ASSET_CONCENTRATION)

    score = max(0, min(100, score))
    return DiversificationScore(score=score, analysis=_analysis(score, policy), recommendations=tuple(recommendations))
