"""Shared fixtures for wisefolio tests."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from wisefolio.loading import LoadingState
from wisefolio.models.series import TimeSeriesPoint
from wisefolio.notifications import CollectingNotifier
from wisefolio.service import MarketDataService
from wisefolio.transport import StaticTransport

AAPL_QUOTE = {
    "c": 184.92,
    "d": 1.27,
    "dp": 0.69,
    "h": 185.5,
    "l": 182.1,
    "o": 183.0,
    "pc": 183.65,
    "t": 1705338000,
}


@pytest.fixture
def transport() -> StaticTransport:
    return StaticTransport()


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def loading() -> LoadingState:
    return LoadingState()


@pytest.fixture
def service(transport, notifier, loading) -> MarketDataService:
    return MarketDataService.from_transport(transport, notifier=notifier, loading=loading)


@pytest.fixture
def sample_points() -> tuple[TimeSeriesPoint, ...]:
    """5 contiguous daily points."""
    base = datetime(2024, 1, 15, tzinfo=timezone.utc)
    return tuple(
        TimeSeriesPoint(
            date=base + timedelta(days=i),
            open=150.0 + i,
            high=151.0 + i,
            low=149.0 + i,
            close=150.5 + i,
            volume=10000.0 + i * 500,
        )
        for i in range(5)
    )


def daily_payload(dates: list[str], base: float = 100.0) -> dict:
    """Alpha Vantage TIME_SERIES_DAILY payload, keyed newest-first like upstream."""
    series = {}
    for i, d in enumerate(sorted(dates, reverse=True)):
        price = base + i
        series[d] = {
            "1. open": f"{price:.4f}",
            "2. high": f"{price + 1:.4f}",
            "3. low": f"{price - 1:.4f}",
            "4. close": f"{price + 0.5:.4f}",
            "5. volume": "1000",
        }
    return {"Meta Data": {"2. Symbol": "TEST"}, "Time Series (Daily)": series}
