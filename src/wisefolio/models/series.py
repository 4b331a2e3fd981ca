"""Time-series models and the tagged series kinds they are fetched as."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

INTRADAY_INTERVALS = ("5min", "15min", "30min", "60min")


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One OHLCV sample.

    Attributes:
        date: Start of the sample period.
        open: Opening price.
        high: High price.
        low: Low price.
        close: Closing price.
        volume: Trading volume.
    """

    date: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


class SeriesFrequency(Enum):
    INTRADAY = "intraday"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class SeriesKind:
    """Which Alpha Vantage series to request and where its data lives.

    Intraday kinds carry an interval; the other frequencies must not.
    """

    frequency: SeriesFrequency
    interval: str | None = None

    def __post_init__(self) -> None:
        if self.frequency is SeriesFrequency.INTRADAY:
            if self.interval not in INTRADAY_INTERVALS:
                raise ValueError(
                    f"Invalid intraday interval: {self.interval}. "
                    f"Valid: {list(INTRADAY_INTERVALS)}"
                )
        elif self.interval is not None:
            raise ValueError(f"{self.frequency.value} series take no interval")

    @classmethod
    def daily(cls) -> SeriesKind:
        return cls(SeriesFrequency.DAILY)

    @classmethod
    def weekly(cls) -> SeriesKind:
        return cls(SeriesFrequency.WEEKLY)

    @classmethod
    def monthly(cls) -> SeriesKind:
        return cls(SeriesFrequency.MONTHLY)

    @classmethod
    def intraday(cls, interval: str) -> SeriesKind:
        return cls(SeriesFrequency.INTRADAY, interval)

    @property
    def function(self) -> str:
        """Upstream ``function`` parameter."""
        if self.frequency is SeriesFrequency.INTRADAY:
            return "TIME_SERIES_INTRADAY"
        if self.frequency is SeriesFrequency.DAILY:
            return "TIME_SERIES_DAILY"
        if self.frequency is SeriesFrequency.WEEKLY:
            return "TIME_SERIES_WEEKLY"
        if self.frequency is SeriesFrequency.MONTHLY:
            return "TIME_SERIES_MONTHLY"
        raise AssertionError(f"Unhandled frequency: {self.frequency}")

    @property
    def label(self) -> str:
        """Payload key holding the date-keyed samples."""
        if self.frequency is SeriesFrequency.INTRADAY:
            return f"Time Series ({self.interval})"
        if self.frequency is SeriesFrequency.DAILY:
            return "Time Series (Daily)"
        if self.frequency is SeriesFrequency.WEEKLY:
            return "Weekly Time Series"
        if self.frequency is SeriesFrequency.MONTHLY:
            return "Monthly Time Series"
        raise AssertionError(f"Unhandled frequency: {self.frequency}")


class TimeRange(Enum):
    """Chart ranges offered by the dashboard."""

    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    ONE_YEAR = "1Y"

    @property
    def lookback(self) -> timedelta:
        return _LOOKBACK[self]

    @property
    def resolution(self) -> str:
        """Finnhub candle resolution used for this range."""
        return _RESOLUTION[self]

    @property
    def series_kind(self) -> SeriesKind:
        """Alpha Vantage series used when candles are unavailable."""
        return _FALLBACK_KIND[self]


_LOOKBACK: dict[TimeRange, timedelta] = {
    TimeRange.ONE_DAY: timedelta(days=1),
    TimeRange.ONE_WEEK: timedelta(days=7),
    TimeRange.ONE_MONTH: timedelta(days=30),
    TimeRange.THREE_MONTHS: timedelta(days=90),
    TimeRange.ONE_YEAR: timedelta(days=365),
}

_RESOLUTION: dict[TimeRange, str] = {
    TimeRange.ONE_DAY: "30",
    TimeRange.ONE_WEEK: "60",
    TimeRange.ONE_MONTH: "D",
    TimeRange.THREE_MONTHS: "D",
    TimeRange.ONE_YEAR: "W",
}

_FALLBACK_KIND: dict[TimeRange, SeriesKind] = {
    TimeRange.ONE_DAY: SeriesKind.intraday("30min"),
    TimeRange.ONE_WEEK: SeriesKind.intraday("60min"),
    TimeRange.ONE_MONTH: SeriesKind.daily(),
    TimeRange.THREE_MONTHS: SeriesKind.daily(),
    TimeRange.ONE_YEAR: SeriesKind.weekly(),
}
