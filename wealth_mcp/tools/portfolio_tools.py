"""Portfolio-domain MCP tools."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any, Callable

from mcp.server.fastmcp import FastMCP

from wealth_mcp.runtime.monitoring import log_tool_event

if TYPE_CHECKING:
    from wealth_mcp.tools.registry import ToolServices

SLOW_RESPONSE_MS = 2000


def register_portfolio_tools(mcp: FastMCP, services: ToolServices) -> None:
    def respond(tool: str, call: Callable[[], dict[str, Any]]) -> str:
        started = time.perf_counter()
        payload = call()
        latency_ms = (time.perf_counter() - started) * 1000.0
        success = bool(payload.get("ok"))
        warning = "slow_response" if latency_ms > SLOW_RESPONSE_MS else None
        log_tool_event(tool=tool, latency_ms=latency_ms, success=success, warning=warning)
        metrics = getattr(services, "metrics", None)
        if metrics is not None:
            metrics.record(tool, latency_ms=latency_ms, success=success)
        return json.dumps(payload, ensure_ascii=True)

    @mcp.tool(description="Annualized XIRR (percent) for a JSON list of {date, amount} cash flows.")
    def calculate_xirr(cash_flows_json: str, guess: float | None = None) -> str:
        return respond("calculate_xirr", lambda: services.portfolio.xirr(cash_flows_json, guess=guess))

    @mcp.tool(description="XIRR and absolute return for one asset and its transaction history.")
    def asset_returns(asset_json: str, transactions_json: str = "[]", as_of: str | None = None) -> str:
        return respond(
            "asset_returns",
            lambda: services.portfolio.asset_returns(asset_json, transactions_json, as_of=as_of),
        )

    @mcp.tool(description="Portfolio-level XIRR and absolute return across all assets.")
    def portfolio_returns(assets_json: str, transactions_json: str = "[]", as_of: str | None = None) -> str:
        return respond(
            "portfolio_returns",
            lambda: services.portfolio.portfolio_returns(assets_json, transactions_json, as_of=as_of),
        )

    @mcp.tool(description="SIP analytics: invested amount, NAVs, absolute return and XIRR.")
    def sip_analytics(sip_contributions_json: str, current_value: float, as_of: str | None = None) -> str:
        return respond(
            "sip_analytics",
            lambda: services.portfolio.sip_analytics(sip_contributions_json, current_value, as_of=as_of),
        )

    @mcp.tool(description="Volatility, simplified Sharpe ratio and optional CAGR from return figures.")
    def return_metrics(
        period_returns_json: str = "[]",
        portfolio_return: float | None = None,
        risk_free_rate: float | None = None,
        initial_value: float | None = None,
        final_value: float | None = None,
        years: float | None = None,
    ) -> str:
        return respond(
            "return_metrics",
            lambda: services.portfolio.return_metrics(
                period_returns_json,
                portfolio_return=portfolio_return,
                risk_free_rate=risk_free_rate,
                initial_value=initial_value,
                final_value=final_value,
                years=years,
            ),
        )

    @mcp.tool(description="Prioritized buy/sell suggestions to move assets toward target category percentages.")
    def rebalance_portfolio(
        assets_json: str,
        target_allocations_json: str,
        threshold_percent: float | None = None,
    ) -> str:
        return respond(
            "rebalance_portfolio",
            lambda: services.portfolio.rebalance(assets_json, target_allocations_json, threshold_percent=threshold_percent),
        )

    @mcp.tool(description="Rule-of-thumb target allocation for an age and risk profile.")
    def default_target_allocations(age: int, risk_profile: str = "moderate") -> str:
        return respond("default_target_allocations", lambda: services.portfolio.default_targets(age, risk_profile))

    @mcp.tool(description="Split a monthly SIP amount across under-allocated categories.")
    def optimal_sip_allocation(monthly_amount: float, assets_json: str, target_allocations_json: str) -> str:
        return respond(
            "optimal_sip_allocation",
            lambda: services.portfolio.optimal_sip_allocation(monthly_amount, assets_json, target_allocations_json),
        )

    @mcp.tool(description="Diversification score (0-100) with analysis and recommendations.")
    def diversification_score(assets_json: str) -> str:
        return respond("diversification_score", lambda: services.portfolio.diversification(assets_json))

    @mcp.tool(description="Required monthly contribution, projected completion and status for a savings goal.")
    def evaluate_goal(goal_json: str, as_of: str | None = None) -> str:
        return respond("evaluate_goal", lambda: services.portfolio.goal(goal_json, as_of=as_of))
