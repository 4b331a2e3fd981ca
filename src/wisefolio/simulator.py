"""Portfolio valuation and growth simulation.

The simulation is a projection, not a forecast: each month compounds the
risk level's expected return scaled by a uniform random factor, adds the
monthly contribution, and optionally applies a small quarterly rebalancing
boost. A benchmark line compounds the medium-risk return without noise.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum

import numpy as np
import pandas as pd

from wisefolio.models.records import PortfolioStock

logger = logging.getLogger(__name__)

EXPECTED_ANNUAL_RETURNS = {"low": 0.05, "medium": 0.08, "high": 0.12}
MONTHLY_VOLATILITY = {"low": 0.02, "medium": 0.04, "high": 0.06}
REBALANCE_BOOST = 1.002
BENCHMARK_RISK = "medium"


class SimulationPeriod(Enum):
    """Simulation horizon; the value is the dashboard's period id."""

    SIX_MONTHS = "6months"
    ONE_YEAR = "1year"
    THREE_YEARS = "3years"
    FIVE_YEARS = "5years"
    TEN_YEARS = "10years"

    @property
    def months(self) -> int:
        return _PERIOD_MONTHS[self]


_PERIOD_MONTHS = {
    SimulationPeriod.SIX_MONTHS: 6,
    SimulationPeriod.ONE_YEAR: 12,
    SimulationPeriod.THREE_YEARS: 36,
    SimulationPeriod.FIVE_YEARS: 60,
    SimulationPeriod.TEN_YEARS: 120,
}


@dataclass(frozen=True)
class PortfolioValuation:
    """Mark-to-market totals for a set of holdings.

    Attributes:
        total_value: Sum of shares * current price.
        total_cost: Sum of shares * buy price.
        total_gain: total_value - total_cost.
        total_gain_percent: Gain relative to cost (0 when cost is 0).
        unpriced: Symbols with no current price; valued at their buy price.
    """

    total_value: float
    total_cost: float
    total_gain: float
    total_gain_percent: float
    unpriced: tuple[str, ...] = ()


@dataclass(frozen=True)
class SimulationPoint:
    month: int
    date: date
    value: int
    benchmark: int

    @property
    def label(self) -> str:
        """Axis label such as ``Jan 2025``."""
        return self.date.strftime("%b %Y")


@dataclass(frozen=True)
class SimulationResult:
    """Monthly path plus summary figures of one simulation run."""

    period: SimulationPeriod
    points: tuple[SimulationPoint, ...]
    start_value: int
    end_value: int
    total_return: float
    annualized_return: float
    total_contributions: float

    def to_frame(self) -> pd.DataFrame:
        """Path as a DataFrame indexed by month (columns: date, value, benchmark)."""
        frame = pd.DataFrame(
            [{"month": p.month, "date": p.date, "value": p.value, "benchmark": p.benchmark}
             for p in self.points],
            columns=["month", "date", "value", "benchmark"],
        )
        return frame.set_index("month")


def value_portfolio(
    stocks: Iterable[PortfolioStock],
    prices: Mapping[str, float],
) -> PortfolioValuation:
    """Value holdings at ``prices`` (symbol -> current price)."""
    total_value = 0.0
    total_cost = 0.0
    unpriced: list[str] = []
    for stock in stocks:
        price = prices.get(stock.symbol.strip().upper())
        if price is None:
            unpriced.append(stock.symbol)
            price = stock.buy_price
        total_value += stock.shares * price
        total_cost += stock.cost_basis
    if unpriced:
        logger.debug("No current price for %s; using buy price", ", ".join(unpriced))
    gain = total_value - total_cost
    return PortfolioValuation(
        total_value=total_value,
        total_cost=total_cost,
        total_gain=gain,
        total_gain_percent=(gain / total_cost * 100) if total_cost else 0.0,
        unpriced=tuple(unpriced),
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _add_months(start: date, months: int) -> date:
    return (pd.Timestamp(start) + pd.DateOffset(months=months)).date()


def simulate_growth(
    stocks: Iterable[PortfolioStock],
    period: SimulationPeriod | str,
    risk_level: str = "medium",
    monthly_contribution: float = 0.0,
    rebalancing: bool = False,
    rng: np.random.Generator | None = None,
    prices: Mapping[str, float] | None = None,
    start: date | None = None,
) -> SimulationResult:
    """Project the portfolio's value month by month.

    Month 0 is the current value; contributions and returns start at
    month 1. Values are rounded to whole currency units. Pass a seeded
    ``rng`` (``np.random.default_rng(seed)``) for a reproducible path.

    Raises:
        ValueError: Unknown risk level, negative contribution, or a
            portfolio with no value to simulate.
    """
    period = SimulationPeriod(period)
    if risk_level not in EXPECTED_ANNUAL_RETURNS:
        raise ValueError(f"Invalid risk level: {risk_level}. Valid: {list(EXPECTED_ANNUAL_RETURNS)}")
    if monthly_contribution < 0:
        raise ValueError("monthly_contribution must be >= 0")

    initial_value = value_portfolio(stocks, prices or {}).total_value
    if _round_half_up(initial_value) <= 0:
        raise ValueError("portfolio has no value to simulate")

    rng = rng if rng is not None else np.random.default_rng()
    start = start or date.today()
    months = period.months
    monthly_return = EXPECTED_ANNUAL_RETURNS[risk_level] / 12
    volatility = MONTHLY_VOLATILITY[risk_level]
    benchmark_return = EXPECTED_ANNUAL_RETURNS[BENCHMARK_RISK] / 12

    points: list[SimulationPoint] = []
    value = initial_value
    for month in range(months + 1):
        if month > 0:
            value += monthly_contribution
            factor = 1 + rng.uniform(-1.0, 1.0) * volatility
            value *= 1 + monthly_return * factor
            if rebalancing and month % 3 == 0:
                value *= REBALANCE_BOOST
        points.append(SimulationPoint(
            month=month,
            date=_add_months(start, month),
            value=_round_half_up(value),
            benchmark=_round_half_up(initial_value * (1 + benchmark_return) ** month),
        ))

    start_value = points[0].value
    end_value = points[-1].value
    total_return = (end_value - start_value) / start_value * 100
    annualized = ((end_value / start_value) ** (12 / months) - 1) * 100
    logger.info(
        "Simulated %s at %s risk: %d -> %d (%.2f%%)",
        period.value, risk_level, start_value, end_value, total_return,
    )
    return SimulationResult(
        period=period,
        points=tuple(points),
        start_value=start_value,
        end_value=end_value,
        total_return=total_return,
        annualized_return=annualized,
        total_contributions=monthly_contribution * months,
    )
