"""wisefolio — data layer for a stock-research dashboard.

Finnhub first with Alpha Vantage fallback, per-request loading flags,
debounced symbol search, polling, AI proxy clients, journal/portfolio
records, and a portfolio growth simulator.

Quick start::

    import asyncio
    from wisefolio import create_service_from_env, render_mini_price

    service = create_service_from_env()
    price = asyncio.run(service.resolve_price("AAPL"))
    print(render_mini_price(price))
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from wisefolio.ai import (
    FinancialAdvisor,
    JournalFeedbackClient,
    StockAnalyzer,
    identify_potential_biases,
    sanitize_analysis,
    sanitize_recommendation,
)
from wisefolio.cache import MemoryCache, NoCache, ParquetCache, SeriesCache
from wisefolio.config import DashboardConfig, TransportType
from wisefolio.errors import ProviderError, ProviderErrorCode
from wisefolio.formatting import (
    format_currency,
    format_number,
    format_percent_change,
    render_mini_price,
)
from wisefolio.loading import LoadingState
from wisefolio.models import (
    CompanyMetrics,
    CompanyProfile,
    GlobalQuote,
    JournalEntry,
    MiniPrice,
    Portfolio,
    PortfolioStock,
    Quote,
    QuoteSource,
    SeriesKind,
    Sentiment,
    TimeRange,
    TimeSeriesPoint,
)
from wisefolio.notifications import (
    CollectingNotifier,
    LogNotifier,
    Notification,
    NotificationLevel,
    Notifier,
)
from wisefolio.polling import Poller
from wisefolio.providers import AlphaVantageClient, FinnhubClient
from wisefolio.records import JournalRepository, PortfolioRepository, RowBackend
from wisefolio.search import Debouncer, SymbolSearch
from wisefolio.service import MarketDataService, StockOverview, create_transport
from wisefolio.simulator import (
    PortfolioValuation,
    SimulationPeriod,
    SimulationResult,
    simulate_growth,
    value_portfolio,
)
from wisefolio.transport import DirectTransport, ProxyTransport, StaticTransport, Transport

__version__ = "0.1.0"

__all__ = [
    # Service
    "MarketDataService",
    "StockOverview",
    "create_service_from_env",
    "config_from_env",
    "create_transport",
    # Providers
    "FinnhubClient",
    "AlphaVantageClient",
    # Transports
    "Transport",
    "ProxyTransport",
    "DirectTransport",
    "StaticTransport",
    # UI plumbing
    "LoadingState",
    "Debouncer",
    "SymbolSearch",
    "Poller",
    "Notifier",
    "Notification",
    "NotificationLevel",
    "LogNotifier",
    "CollectingNotifier",
    # AI proxies
    "FinancialAdvisor",
    "StockAnalyzer",
    "JournalFeedbackClient",
    "identify_potential_biases",
    "sanitize_analysis",
    "sanitize_recommendation",
    # Records
    "RowBackend",
    "JournalRepository",
    "PortfolioRepository",
    # Simulation
    "PortfolioValuation",
    "SimulationPeriod",
    "SimulationResult",
    "simulate_growth",
    "value_portfolio",
    # Cache
    "SeriesCache",
    "MemoryCache",
    "ParquetCache",
    "NoCache",
    # Config
    "DashboardConfig",
    "TransportType",
    # Errors
    "ProviderError",
    "ProviderErrorCode",
    # Models
    "Quote",
    "GlobalQuote",
    "MiniPrice",
    "QuoteSource",
    "TimeSeriesPoint",
    "SeriesKind",
    "TimeRange",
    "CompanyProfile",
    "CompanyMetrics",
    "JournalEntry",
    "Portfolio",
    "PortfolioStock",
    "Sentiment",
    # Formatting
    "format_currency",
    "format_number",
    "format_percent_change",
    "render_mini_price",
]


def _optional_int(value: str | None) -> int | None:
    return int(value) if value else None


def config_from_env(env_file: str | None = None) -> DashboardConfig:
    """Build a DashboardConfig from environment variables.

    A ``.env`` file is loaded first (``env_file`` or the nearest one found);
    variables already set in the environment win.

    Environment variables:
        WISEFOLIO_TRANSPORT: "proxy" or "direct" (default: "proxy").
        WISEFOLIO_BACKEND_URL: Hosted backend base URL.
        WISEFOLIO_BACKEND_KEY: Hosted backend anon key.
        WISEFOLIO_ACCESS_TOKEN: Optional user session token.
        FINNHUB_API_KEY: Finnhub API key (direct transport).
        ALPHA_VANTAGE_API_KEY: Alpha Vantage API key (direct transport).
        WISEFOLIO_TIMEOUT: HTTP timeout in seconds (default: 15).
        WISEFOLIO_SEARCH_DELAY: Search quiet period, 0.3-0.5 s (default: 0.3).
        WISEFOLIO_SEARCH_MIN_LENGTH: Minimum search query length (default: 1).
        WISEFOLIO_REFRESH_INTERVAL: Quote polling interval (default: 60).
        WISEFOLIO_LOADING_MAX_KEYS: Loading map bound (default: unbounded).
        WISEFOLIO_CACHE: "memory", "parquet", "none" (default: "memory").
        WISEFOLIO_CACHE_DIR: Cache directory (default: "data/cache").
    """
    load_dotenv(env_file)

    return DashboardConfig(
        transport=TransportType(os.getenv("WISEFOLIO_TRANSPORT", "proxy").strip().lower()),
        backend_url=os.getenv("WISEFOLIO_BACKEND_URL"),
        backend_key=os.getenv("WISEFOLIO_BACKEND_KEY"),
        access_token=os.getenv("WISEFOLIO_ACCESS_TOKEN"),
        finnhub_api_key=os.getenv("FINNHUB_API_KEY"),
        alpha_vantage_api_key=os.getenv("ALPHA_VANTAGE_API_KEY"),
        timeout_seconds=float(os.getenv("WISEFOLIO_TIMEOUT", "15")),
        search_delay_seconds=float(os.getenv("WISEFOLIO_SEARCH_DELAY", "0.3")),
        search_min_length=int(os.getenv("WISEFOLIO_SEARCH_MIN_LENGTH", "1")),
        refresh_interval_seconds=float(os.getenv("WISEFOLIO_REFRESH_INTERVAL", "60")),
        loading_max_keys=_optional_int(os.getenv("WISEFOLIO_LOADING_MAX_KEYS")),
        cache_backend=os.getenv("WISEFOLIO_CACHE", "memory"),
        cache_dir=os.getenv("WISEFOLIO_CACHE_DIR", "data/cache"),
    )


def create_service_from_env(
    env_file: str | None = None,
    notifier: Notifier | None = None,
) -> MarketDataService:
    """Zero-config factory — reads transport settings and keys from env vars."""
    return MarketDataService.from_config(config_from_env(env_file), notifier=notifier)
