"""Annualized internal rate of return for irregularly dated cash flows."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from wealth_mcp.portfolio.models import CashFlow, as_datetime

LOGGER = logging.getLogger(__name__)
DAYS_PER_YEAR = 365.25
SECONDS_PER_DAY = 86400.0
DEFAULT_GUESS = 0.10
DEFAULT_MAX_ITERATIONS = 100
DEFAULT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class XirrSolution:
    """Outcome of the Newton-Raphson search.

    ``converged`` is False when the search stopped on the iteration cap or on
    a flat derivative; ``rate_percent`` is then the last estimate, an
    approximation rather than an exact root.
    """

    rate_percent: float
    iterations: int
    converged: bool


def _year_fractions(flows: Sequence[CashFlow]) -> np.ndarray:
    base = as_datetime(flows[0].date)
    days = [(as_datetime(flow.date) - base).total_seconds() / SECONDS_PER_DAY for flow in flows]
    return np.asarray(days, dtype=float) / DAYS_PER_YEAR


def _npv_and_derivative(amounts: np.ndarray, years: np.ndarray, rate: float) -> tuple[float, float]:
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        growth = np.power(1.0 + rate, years)
        npv = float(np.sum(amounts / growth))
        derivative = float(np.sum(-amounts * years / (growth * (1.0 + rate))))
    return npv, derivative


def _solution(rate: float, iterations: int, converged: bool) -> XirrSolution | None:
    if not math.isfinite(rate):
        return None
    return XirrSolution(rate_percent=rate * 100.0, iterations=iterations, converged=converged)


def solve_xirr(
    cash_flows: Sequence[CashFlow],
    guess: float = DEFAULT_GUESS,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> XirrSolution | None:
    """Solve ``sum CF_i / (1+r)^t_i = 0`` for ``r`` by Newton-Raphson.

    ``t_i`` is the distance in years (days / 365.25) from the earliest flow.
    Returns None for fewer than two flows, for flows that never change sign,
    and whenever the estimate stops being a finite number.
    """
    if len(cash_flows) < 2:
        return None
    ordered = sorted(cash_flows, key=lambda flow: as_datetime(flow.date))
    amounts = np.asarray([flow.amount for flow in ordered], dtype=float)
    if not (np.any(amounts < 0) and np.any(amounts > 0)):
        return None
    years = _year_fractions(ordered)

    rate = float(guess)
    for iteration in range(1, max_iterations + 1):
        npv, derivative = _npv_and_derivative(amounts, years, rate)
        if not (math.isfinite(npv) and math.isfinite(derivative)):
            LOGGER.debug("xirr diverged: iteration=%s rate=%s", iteration, rate)
            return None
        if abs(npv) < tolerance:
            return _solution(rate, iteration, True)
        if abs(derivative) < tolerance:
            LOGGER.debug("xirr derivative vanished: iteration=%s rate=%s npv=%s", iteration, rate, npv)
            return _solution(rate, iteration, False)

        new_rate = rate - npv / derivative
        # (1+r)^t is undefined for r <= -1; move halfway toward the boundary instead.
        if new_rate <= -1.0:
            new_rate = (rate - 1.0) / 2.0
        if abs(new_rate - rate) < tolerance:
            return _solution(new_rate, iteration, True)
        rate = new_rate

    LOGGER.debug("xirr hit iteration cap: max_iterations=%s rate=%s", max_iterations, rate)
    return _solution(rate, max_iterations, False)


def calculate_xirr(
    cash_flows: Sequence[CashFlow],
    guess: float = DEFAULT_GUESS,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> float | None:
    """Annualized rate in percent, or None when no rate can be estimated."""
    solution = solve_xirr(cash_flows, guess=guess, max_iterations=max_iterations, tolerance=tolerance)
    return solution.rate_percent if solution else None
