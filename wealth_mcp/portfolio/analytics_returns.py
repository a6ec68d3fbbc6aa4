"""Return, growth and risk-adjusted metrics."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from wealth_mcp.portfolio.cashflows import build_asset_cash_flows, build_portfolio_cash_flows, build_sip_cash_flows
from wealth_mcp.portfolio.models import Asset, DateLike, SipContribution, Transaction, as_datetime
from wealth_mcp.portfolio.xirr import DEFAULT_GUESS, DAYS_PER_YEAR, calculate_xirr

DEFAULT_RISK_FREE_RATE = 6.0


@dataclass(frozen=True)
class AbsoluteReturn:
    amount: float
    percent: float


@dataclass(frozen=True)
class SipAnalytics:
    total_invested: float
    total_units: float
    average_nav: float
    current_nav: float
    absolute_return: float
    absolute_return_percent: float
    xirr: float | None
    monthly_return: float
    yearly_projection: float


def _finite(value: float, default: float = 0.0) -> float:
    return value if math.isfinite(value) else default


def calculate_absolute_return(current_value: float, invested_value: float) -> AbsoluteReturn:
    amount = current_value - invested_value
    percent = amount / invested_value * 100.0 if invested_value else 0.0
    return AbsoluteReturn(amount=_finite(amount), percent=_finite(percent))


def calculate_cagr(initial_value: float, final_value: float, years: float) -> float:
    """Compound annual growth rate in percent."""
    if years <= 0 or initial_value <= 0 or final_value < 0:
        return 0.0
    try:
        growth = (final_value / initial_value) ** (1.0 / years)
    except OverflowError:
        return 0.0
    return _finite((growth - 1.0) * 100.0)


def calculate_annualized_return(
    initial_value: float,
    final_value: float,
    start: DateLike,
    end: DateLike,
) -> float:
    days = (as_datetime(end) - as_datetime(start)).total_seconds() / 86400.0
    return calculate_cagr(initial_value, final_value, days / DAYS_PER_YEAR)


def calculate_sharpe_ratio(
    portfolio_return: float,
    volatility: float,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> float:
    # Simplified: annual return and volatility are both in percent.
    if volatility == 0 or not math.isfinite(volatility):
        return 0.0
    return _finite((portfolio_return - risk_free_rate) / volatility)


def calculate_volatility(returns: Sequence[float]) -> float:
    """Sample standard deviation of a return series."""
    series = pd.Series(list(returns), dtype=float)
    if len(series) < 2:
        return 0.0
    return _finite(float(series.std(ddof=1)))


def calculate_asset_xirr(
    asset: Asset,
    transactions: Sequence[Transaction],
    as_of: DateLike,
    guess: float = DEFAULT_GUESS,
) -> float | None:
    return calculate_xirr(build_asset_cash_flows(asset, transactions, as_of), guess=guess)


def calculate_portfolio_xirr(
    assets: Sequence[Asset],
    transactions: Sequence[Transaction],
    as_of: DateLike,
    guess: float = DEFAULT_GUESS,
) -> float | None:
    return calculate_xirr(build_portfolio_cash_flows(assets, transactions, as_of), guess=guess)


def calculate_sip_xirr(
    sip_contributions: Sequence[SipContribution],
    current_value: float,
    as_of: DateLike,
    guess: float = DEFAULT_GUESS,
) -> float | None:
    return calculate_xirr(build_sip_cash_flows(sip_contributions, current_value, as_of), guess=guess)


def calculate_sip_analytics(
    sip_contributions: Sequence[SipContribution],
    current_value: float,
    as_of: DateLike,
) -> SipAnalytics:
    total_invested = float(sum(sip.amount for sip in sip_contributions))
    total_units = float(sum(sip.units for sip in sip_contributions))
    average_nav = total_invested / total_units if total_units > 0 else 0.0
    current_nav = current_value / total_units if total_units > 0 else 0.0
    absolute = calculate_absolute_return(current_value, total_invested)
    xirr = calculate_sip_xirr(sip_contributions, current_value, as_of)
    return SipAnalytics(
        total_invested=total_invested,
        total_units=total_units,
        average_nav=_finite(average_nav),
        current_nav=_finite(current_nav),
        absolute_return=absolute.amount,
        absolute_return_percent=absolute.percent,
        xirr=xirr,
        monthly_return=xirr / 12.0 if xirr else 0.0,
        yearly_projection=_finite(current_value * (1.0 + xirr / 100.0)) if xirr else current_value,
    )
