"""Tool service wiring."""

from __future__ import annotations

from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP

from wealth_mcp.config.settings import Settings
from wealth_mcp.portfolio.portfolio_service import PortfolioService
from wealth_mcp.runtime.monitoring import ServerMetrics
from wealth_mcp.tools.portfolio_tools import register_portfolio_tools


@dataclass
class ToolServices:
    portfolio: PortfolioService
    metrics: ServerMetrics | None = None


def build_tool_services(settings: Settings, metrics: ServerMetrics | None = None) -> ToolServices:
    return ToolServices(portfolio=PortfolioService(settings), metrics=metrics)


def register_all_tools(mcp: FastMCP, services: ToolServices) -> None:
    register_portfolio_tools(mcp, services)
