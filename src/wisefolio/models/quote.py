"""Quote data models — Finnhub quote, Alpha Vantage global quote, mini price."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class QuoteSource(Enum):
    """Provider a resolved price came from."""

    FINNHUB = "finnhub"
    ALPHA_VANTAGE = "alphavantage"


@dataclass(frozen=True)
class Quote:
    """Snapshot of a symbol's current price and day range (Finnhub ``quote``).

    Upstream sends nulls for unknown or halted symbols, so every numeric
    field is optional.

    Attributes:
        symbol: Ticker symbol.
        current_price: Last price (``c``).
        change: Dollar change from previous close (``d``).
        percent_change: Percent change from previous close (``dp``).
        high: Day high (``h``).
        low: Day low (``l``).
        open: Day open (``o``).
        previous_close: Previous close (``pc``).
        timestamp: Quote time (``t``).
    """

    symbol: str
    current_price: float | None
    change: float | None = None
    percent_change: float | None = None
    high: float | None = None
    low: float | None = None
    open: float | None = None
    previous_close: float | None = None
    timestamp: datetime | None = None

    @property
    def is_complete(self) -> bool:
        """Both price and percent change are usable."""
        return self.current_price is not None and self.percent_change is not None


@dataclass(frozen=True)
class GlobalQuote:
    """Alpha Vantage ``GLOBAL_QUOTE`` with string numerics already parsed.

    Fields that failed to parse are None.
    """

    symbol: str
    price: float | None
    percent_change: float | None
    change: float | None = None
    open: float | None = None
    high: float | None = None
    low: float | None = None
    volume: float | None = None
    previous_close: float | None = None
    latest_trading_day: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.price is not None and self.percent_change is not None


@dataclass(frozen=True)
class MiniPrice:
    """Price + percent change for lightweight displays.

    Only built from complete data; never holds a missing numeric.
    """

    symbol: str
    price: float
    percent_change: float
    source: QuoteSource
