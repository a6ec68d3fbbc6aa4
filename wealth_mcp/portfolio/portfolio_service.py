"""Portfolio analytics orchestration service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from wealth_mcp.config.settings import Settings
from wealth_mcp.lib.serialization import to_jsonable
from wealth_mcp.portfolio.analytics_returns import (
    calculate_absolute_return,
    calculate_annualized_return,
    calculate_cagr,
    calculate_sharpe_ratio,
    calculate_sip_analytics,
    calculate_volatility,
)
from wealth_mcp.portfolio.cashflows import build_asset_cash_flows, build_portfolio_cash_flows
from wealth_mcp.portfolio.data_loader import (
    load_json_payload,
    parse_asset,
    parse_assets,
    parse_cash_flows,
    parse_date,
    parse_goal,
    parse_number,
    parse_sip_contributions,
    parse_target_allocations,
    parse_transactions,
)
from wealth_mcp.portfolio.diversification import calculate_diversification_score
from wealth_mcp.portfolio.goals import evaluate_goal
from wealth_mcp.portfolio.models import CashFlow, DateLike, ValidationIssue, as_datetime
from wealth_mcp.portfolio.rebalancing import (
    calculate_current_allocation,
    calculate_optimal_sip_allocation,
    default_target_allocations,
    generate_rebalancing_plan,
)
from wealth_mcp.portfolio.validation import (
    allocation_sum_warning,
    validate_assets,
    validate_goal,
    validate_target_allocations,
)
from wealth_mcp.portfolio.xirr import solve_xirr

LOGGER = logging.getLogger(__name__)
VALID_RISK_PROFILES = {"conservative", "moderate", "aggressive"}
NO_RATE_WARNING = "Not enough cash flows with both investments and returns to estimate a rate."


def _json_validation_error(errors: list[dict[str, Any]]) -> dict[str, Any]:
    return {"ok": False, "error": {"type": "validation_error", "errors": errors}}


def _issues_payload(issues: list[ValidationIssue]) -> dict[str, Any]:
    return _json_validation_error(
        [{"field": issue.field, "message": issue.message, "row": issue.row, "code": issue.code} for issue in issues]
    )


class PortfolioService:
    """Adapts raw JSON payloads to the analytics engine.

    Engine functions are pure; this layer resolves defaults from settings,
    pins the evaluation date, and wraps results in ``{"ok": ...}`` envelopes.
    """

    def __init__(self, settings: Settings, today: Callable[[], date] = date.today) -> None:
        self.settings = settings
        self._today = today

    def _run(self, operation: str, build: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        try:
            payload = build()
        except (ValueError, TypeError) as error:
            LOGGER.info("payload rejected: op=%s reason=%s", operation, error)
            return _json_validation_error([{"field": "payload", "message": str(error), "code": "parse_error"}])
        if payload.get("ok", True) is False:
            LOGGER.info("payload rejected: op=%s errors=%s", operation, len(payload["error"]["errors"]))
            return payload
        return {"ok": True, **to_jsonable(payload)}

    def _as_of(self, as_of: Any | None) -> DateLike:
        return self._today() if as_of in (None, "") else parse_date(as_of, "as_of")

    def _solve(self, flows: list[CashFlow], guess: float | None = None) -> dict[str, Any]:
        solution = solve_xirr(
            flows,
            guess=self.settings.xirr_initial_guess if guess is None else guess,
            max_iterations=self.settings.xirr_max_iterations,
            tolerance=self.settings.xirr_tolerance,
        )
        payload: dict[str, Any] = {
            "xirr_percent": solution.rate_percent if solution else None,
            "converged": solution.converged if solution else False,
            "iterations": solution.iterations if solution else 0,
            "cash_flow_count": len(flows),
        }
        if solution is None:
            payload["warning"] = NO_RATE_WARNING
        elif not solution.converged:
            payload["warning"] = "Rate is an approximation; the solver stopped before converging."
        if self.settings.include_cash_flows:
            payload["cash_flows"] = flows
        return payload

    def xirr(self, cash_flows: Any, guess: float | None = None) -> dict[str, Any]:
        return self._run("xirr", lambda: self._solve(parse_cash_flows(cash_flows), guess))

    def asset_returns(self, asset: Any, transactions: Any = None, as_of: Any | None = None) -> dict[str, Any]:
        def build() -> dict[str, Any]:
            parsed = parse_asset(asset)
            issues = validate_assets([parsed])
            if issues:
                return _issues_payload(issues)
            history = parse_transactions(transactions)
            when = self._as_of(as_of)
            flows = build_asset_cash_flows(parsed, history, when)
            invested = -sum(flow.amount for flow in flows if flow.amount < 0)
            payload = self._solve(flows)
            payload["absolute_return"] = calculate_absolute_return(parsed.current_value, invested)
            payload["invested_value"] = invested
            payload["current_value"] = parsed.current_value
            if parsed.purchase_value and parsed.purchase_date is not None:
                payload["annualized_return_percent"] = calculate_annualized_return(
                    parsed.purchase_value, parsed.current_value, parsed.purchase_date, when
                )
            return payload

        return self._run("asset_returns", build)

    def portfolio_returns(self, assets: Any, transactions: Any = None, as_of: Any | None = None) -> dict[str, Any]:
        def build() -> dict[str, Any]:
            parsed = parse_assets(assets)
            issues = validate_assets(parsed)
            if issues:
                return _issues_payload(issues)
            flows = build_portfolio_cash_flows(parsed, parse_transactions(transactions), self._as_of(as_of))
            invested = -sum(flow.amount for flow in flows if flow.amount < 0)
            current = sum(asset.current_value for asset in parsed)
            payload = self._solve(flows)
            payload["absolute_return"] = calculate_absolute_return(current, invested)
            payload["invested_value"] = invested
            payload["current_value"] = current
            return payload

        return self._run("portfolio_returns", build)

    def sip_analytics(self, sip_contributions: Any, current_value: Any, as_of: Any | None = None) -> dict[str, Any]:
        def build() -> dict[str, Any]:
            sips = parse_sip_contributions(load_json_payload(sip_contributions))
            value = parse_number(current_value, "current_value")
            analytics = calculate_sip_analytics(sips, value, self._as_of(as_of))
            payload: dict[str, Any] = {"analytics": analytics}
            if analytics.xirr is None:
                payload["warning"] = NO_RATE_WARNING
            return payload

        return self._run("sip_analytics", build)

    def return_metrics(
        self,
        period_returns: Any = None,
        portfolio_return: float | None = None,
        risk_free_rate: float | None = None,
        initial_value: float | None = None,
        final_value: float | None = None,
        years: float | None = None,
    ) -> dict[str, Any]:
        def build() -> dict[str, Any]:
            series = [
                parse_number(value, f"period_returns[{idx}]")
                for idx, value in enumerate(load_json_payload(period_returns) or [])
            ]
            volatility = calculate_volatility(series)
            rate = self.settings.risk_free_rate_percent if risk_free_rate is None else float(risk_free_rate)
            # Without an explicit annual figure, the mean of the supplied series stands in.
            if portfolio_return is not None:
                annual = float(portfolio_return)
            else:
                annual = sum(series) / len(series) if series else 0.0
            payload: dict[str, Any] = {
                "volatility": volatility,
                "portfolio_return": annual,
                "risk_free_rate": rate,
                "sharpe_ratio": calculate_sharpe_ratio(annual, volatility, rate),
            }
            if initial_value is not None and final_value is not None and years is not None:
                payload["cagr_percent"] = calculate_cagr(float(initial_value), float(final_value), float(years))
            return payload

        return self._run("return_metrics", build)

    def rebalance(self, assets: Any, target_allocations: Any, threshold_percent: float | None = None) -> dict[str, Any]:
        def build() -> dict[str, Any]:
            parsed = parse_assets(assets)
            targets = parse_target_allocations(target_allocations)
            issues = validate_assets(parsed) + validate_target_allocations(targets)
            if issues:
                return _issues_payload(issues)
            threshold = self.settings.rebalance_threshold_percent if threshold_percent is None else float(threshold_percent)
            plan = generate_rebalancing_plan(parsed, targets, threshold)
            payload: dict[str, Any] = {
                "plan": plan,
                "current_allocation": [
                    {
                        "category": allocation.category,
                        "current_value": allocation.current_value,
                        "current_percentage": allocation.current_percentage,
                    }
                    for allocation in calculate_current_allocation(parsed)
                ],
                "threshold_percent": threshold,
            }
            warning = allocation_sum_warning(targets)
            if warning:
                payload["warning"] = warning
            return payload

        return self._run("rebalance", build)

    def default_targets(self, age: int, risk_profile: str = "moderate") -> dict[str, Any]:
        def build() -> dict[str, Any]:
            profile = risk_profile.strip().lower()
            if profile not in VALID_RISK_PROFILES:
                return _json_validation_error(
                    [
                        {
                            "field": "risk_profile",
                            "code": "invalid_risk_profile",
                            "message": f"risk_profile must be one of {sorted(VALID_RISK_PROFILES)}.",
                        }
                    ]
                )
            return {"risk_profile": profile, "target_allocations": default_target_allocations(int(age), profile)}  # type: ignore[arg-type]

        return self._run("default_targets", build)

    def optimal_sip_allocation(self, monthly_amount: float, assets: Any, target_allocations: Any) -> dict[str, Any]:
        def build() -> dict[str, Any]:
            parsed = parse_assets(assets)
            targets = parse_target_allocations(target_allocations)
            issues = validate_assets(parsed) + validate_target_allocations(targets)
            if issues:
                return _issues_payload(issues)
            amount = parse_number(monthly_amount, "monthly_amount")
            payload: dict[str, Any] = {
                "monthly_amount": amount,
                "allocation": calculate_optimal_sip_allocation(amount, parsed, targets),
            }
            warning = allocation_sum_warning(targets)
            if warning:
                payload["warning"] = warning
            return payload

        return self._run("optimal_sip_allocation", build)

    def diversification(self, assets: Any) -> dict[str, Any]:
        def build() -> dict[str, Any]:
            parsed = parse_assets(assets)
            issues = validate_assets(parsed)
            if issues:
                return _issues_payload(issues)
            return {"diversification": calculate_diversification_score(parsed)}

        return self._run("diversification", build)

    def goal(self, goal: Any, as_of: Any | None = None) -> dict[str, Any]:
        def build() -> dict[str, Any]:
            parsed = parse_goal(goal)
            issues = validate_goal(parsed)
            if issues:
                return _issues_payload(issues)
            when = as_datetime(self._as_of(as_of)).date()
            projection = evaluate_goal(
                parsed,
                when,
                projection_cap_months=self.settings.goal_projection_cap_months,
                inflation_rate=self.settings.inflation_rate_percent,
            )
            return {"as_of": when, "projection": projection}

        return self._run("goal", build)
