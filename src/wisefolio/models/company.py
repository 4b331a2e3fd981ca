"""Company reference data models (Finnhub profile2, metric, search)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CompanyProfile:
    """Company profile.

    Attributes:
        symbol: Ticker symbol.
        name: Company name.
        exchange: Listing exchange.
        industry: Finnhub industry classification.
        country: Country of domicile.
        currency: Reporting currency.
        ipo: IPO date (ISO string as sent upstream).
        market_cap: Market capitalization in millions.
        shares_outstanding: Shares outstanding in millions.
        logo: Logo URL.
        weburl: Company website.
        phone: Contact phone.
    """

    symbol: str
    name: str
    exchange: str | None = None
    industry: str | None = None
    country: str | None = None
    currency: str | None = None
    ipo: str | None = None
    market_cap: float | None = None
    shares_outstanding: float | None = None
    logo: str | None = None
    weburl: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class CompanyMetrics:
    """Basic financials (``stock/metric?metric=all``).

    ``metric`` keeps every upstream value; the properties expose the ones the
    dashboard shows.
    """

    symbol: str
    metric: dict[str, Any] = field(default_factory=dict)
    metric_type: str | None = None
    series: dict[str, Any] = field(default_factory=dict)

    def _number(self, key: str) -> float | None:
        value = self.metric.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    @property
    def week52_high(self) -> float | None:
        return self._number("52WeekHigh")

    @property
    def week52_low(self) -> float | None:
        return self._number("52WeekLow")

    @property
    def pe_ratio(self) -> float | None:
        return self._number("peBasicExclExtraTTM")

    @property
    def eps(self) -> float | None:
        return self._number("epsBasicExclExtraItemsTTM")

    @property
    def dividend_yield(self) -> float | None:
        return self._number("dividendYieldIndicatedAnnual")

    @property
    def beta(self) -> float | None:
        return self._number("beta")

    @property
    def average_volume_10d(self) -> float | None:
        return self._number("10DayAverageTradingVolume")


@dataclass(frozen=True)
class SymbolMatch:
    """One symbol search hit."""

    symbol: str
    description: str
    display_symbol: str | None = None
    type: str | None = None
