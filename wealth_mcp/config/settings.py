"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the MCP surface and engine defaults."""

    app_name: str = "wealth-analytics"
    app_version: str = "1.0.0"
    transport_mode: str = "auto"
    http_transport: str = "sse"
    host: str = "0.0.0.0"
    port: int = 8000
    mcp_path: str = "/mcp"
    health_path: str = "/health"
    log_level: str = "INFO"
    risk_free_rate_percent: float = 6.0
    rebalance_threshold_percent: float = 5.0
    xirr_initial_guess: float = 0.10
    xirr_max_iterations: int = 100
    xirr_tolerance: float = 1e-6
    goal_projection_cap_months: int = 600
    inflation_rate_percent: float = 6.0
    include_cash_flows: bool = True


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _as_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    """Load runtime settings from environment variables."""
    load_dotenv()

    return Settings(
        app_name=os.getenv("APP_NAME", "wealth-analytics"),
        transport_mode=os.getenv("TRANSPORT_MODE", "auto").strip().lower(),
        http_transport=os.getenv("HTTP_TRANSPORT", "sse").strip().lower(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_as_int(os.getenv("PORT"), 8000),
        mcp_path=os.getenv("MCP_PATH", "/mcp"),
        health_path=os.getenv("HEALTH_PATH", "/health"),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        risk_free_rate_percent=_as_float(os.getenv("RISK_FREE_RATE_PERCENT"), 6.0),
        rebalance_threshold_percent=_as_float(os.getenv("REBALANCE_THRESHOLD_PERCENT"), 5.0),
        xirr_initial_guess=_as_float(os.getenv("XIRR_INITIAL_GUESS"), 0.10),
        xirr_max_iterations=max(1, _as_int(os.getenv("XIRR_MAX_ITERATIONS"), 100)),
        xirr_tolerance=_as_float(os.getenv("XIRR_TOLERANCE"), 1e-6),
        goal_projection_cap_months=max(1, _as_int(os.getenv("GOAL_PROJECTION_CAP_MONTHS"), 600)),
        inflation_rate_percent=_as_float(os.getenv("INFLATION_RATE_PERCENT"), 6.0),
        include_cash_flows=_as_bool(os.getenv("INCLUDE_CASH_FLOWS"), True),
    )
