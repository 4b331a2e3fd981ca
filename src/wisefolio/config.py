"""Dashboard data-layer configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Quiet period bounds for search-as-you-type, in seconds.
SEARCH_DELAY_RANGE = (0.3, 0.5)


class TransportType(Enum):
    """How provider calls reach the upstream APIs."""

    PROXY = "proxy"
    DIRECT = "direct"


@dataclass
class DashboardConfig:
    """Configuration for MarketDataService and the proxy clients.

    Attributes:
        transport: ``proxy`` (hosted edge functions) or ``direct`` (provider
            APIs with local keys).
        backend_url: Base URL of the hosted backend (edge functions + rows).
        backend_key: Anonymous/public key sent with every backend request.
        access_token: Optional user session token (falls back to backend_key).
        finnhub_api_key: Finnhub API key (direct transport only).
        alpha_vantage_api_key: Alpha Vantage API key (direct transport only).
        timeout_seconds: HTTP timeout per request.
        search_delay_seconds: Quiet period for the debounced symbol search
            (0.3-0.5 s).
        search_min_length: Minimum stripped query length before searching.
        refresh_interval_seconds: Default quote polling interval.
        loading_max_keys: Bound for the loading map (None = unbounded).
        cache_backend: Series cache type — "memory", "parquet", or "none".
        cache_dir: Directory for parquet cache files.
        cache_ttl_seconds: TTL for in-memory series entries.
        validate: Whether to run quality checks on fetched series.
    """

    transport: TransportType = TransportType.PROXY
    backend_url: str | None = None
    backend_key: str | None = None
    access_token: str | None = None
    finnhub_api_key: str | None = None
    alpha_vantage_api_key: str | None = None
    timeout_seconds: float = 15.0

    search_delay_seconds: float = 0.3
    search_min_length: int = 1
    refresh_interval_seconds: float = 60.0
    loading_max_keys: int | None = None

    cache_backend: str = "memory"
    cache_dir: str = "data/cache"
    cache_ttl_seconds: int = 300
    validate: bool = True

    def __post_init__(self) -> None:
        if not SEARCH_DELAY_RANGE[0] <= self.search_delay_seconds <= SEARCH_DELAY_RANGE[1]:
            raise ValueError(
                f"search_delay_seconds must be within {SEARCH_DELAY_RANGE}, "
                f"got {self.search_delay_seconds}"
            )
        if self.search_min_length < 1:
            raise ValueError("search_min_length must be >= 1")
        if self.refresh_interval_seconds <= 0:
            raise ValueError("refresh_interval_seconds must be positive")
