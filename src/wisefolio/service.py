"""MarketDataService — orchestrates both providers with fallback and caching."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from wisefolio.cache import NoCache, SeriesCache, create_cache
from wisefolio.config import DashboardConfig, TransportType
from wisefolio.loading import LoadingState
from wisefolio.models.company import CompanyMetrics, CompanyProfile
from wisefolio.models.quote import MiniPrice, Quote, QuoteSource
from wisefolio.models.records import PortfolioStock
from wisefolio.models.series import TimeRange, TimeSeriesPoint
from wisefolio.notifications import LogNotifier, Notifier
from wisefolio.polling import Poller
from wisefolio.providers.alpha_vantage import AlphaVantageClient
from wisefolio.providers.base import require_symbol
from wisefolio.providers.finnhub import FinnhubClient
from wisefolio.quality import validate_quote, validate_series
from wisefolio.search import ResultListener, SymbolSearch
from wisefolio.simulator import PortfolioValuation, value_portfolio
from wisefolio.transport import DirectTransport, ProxyTransport, Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockOverview:
    """Quote plus reference data for a symbol's detail card."""

    symbol: str
    quote: Quote | None
    profile: CompanyProfile | None
    metrics: CompanyMetrics | None


def create_transport(config: DashboardConfig) -> Transport:
    """Build the transport selected by ``config.transport``."""
    if config.transport is TransportType.PROXY:
        return ProxyTransport(
            base_url=config.backend_url or "",
            api_key=config.backend_key or "",
            access_token=config.access_token,
            timeout=config.timeout_seconds,
        )
    if config.transport is TransportType.DIRECT:
        return DirectTransport(
            finnhub_api_key=config.finnhub_api_key,
            alpha_vantage_api_key=config.alpha_vantage_api_key,
            timeout=config.timeout_seconds,
        )
    raise AssertionError(f"Unhandled transport: {config.transport}")


class MarketDataService:
    """Central orchestrator: Finnhub first, Alpha Vantage on incompleteness.

    Usage::

        from wisefolio import create_service_from_env
        service = create_service_from_env()
        price = await service.resolve_price("AAPL")
    """

    def __init__(
        self,
        finnhub: FinnhubClient,
        alpha_vantage: AlphaVantageClient,
        cache: SeriesCache | None = None,
        validate: bool = True,
        search_delay: float = 0.3,
        search_min_length: int = 1,
        refresh_interval: float = 60.0,
    ) -> None:
        self.finnhub = finnhub
        self.alpha_vantage = alpha_vantage
        self.cache = cache or NoCache()
        self.validate = validate
        self.search_delay = search_delay
        self.search_min_length = search_min_length
        self.refresh_interval = refresh_interval

    @classmethod
    def from_transport(
        cls,
        transport: Transport,
        notifier: Notifier | None = None,
        loading: LoadingState | None = None,
        cache: SeriesCache | None = None,
        validate: bool = True,
    ) -> MarketDataService:
        """Both clients share one transport, notifier and loading map."""
        notifier = notifier or LogNotifier()
        loading = loading if loading is not None else LoadingState()
        return cls(
            finnhub=FinnhubClient(transport, notifier, loading),
            alpha_vantage=AlphaVantageClient(transport, notifier, loading),
            cache=cache,
            validate=validate,
        )

    @classmethod
    def from_config(
        cls,
        config: DashboardConfig,
        notifier: Notifier | None = None,
        transport: Transport | None = None,
    ) -> MarketDataService:
        service = cls.from_transport(
            transport or create_transport(config),
            notifier=notifier,
            loading=LoadingState(max_keys=config.loading_max_keys),
            cache=create_cache(config.cache_backend, config.cache_dir, config.cache_ttl_seconds),
            validate=config.validate,
        )
        service.search_delay = config.search_delay_seconds
        service.search_min_length = config.search_min_length
        service.refresh_interval = config.refresh_interval_seconds
        return service

    @property
    def loading(self) -> LoadingState:
        return self.finnhub.loading

    # ---------------------------------------------------------- mini price

    async def resolve_price(self, symbol: str) -> MiniPrice | None:
        """Price + percent change, Finnhub first, Alpha Vantage as fallback.

        Returns None when neither provider yields both numbers.
        """
        symbol = require_symbol(symbol)

        quote = await self.finnhub.get_quote(symbol)
        if quote is not None and quote.is_complete:
            return MiniPrice(
                symbol=symbol,
                price=quote.current_price,  # type: ignore[arg-type]
                percent_change=quote.percent_change,  # type: ignore[arg-type]
                source=QuoteSource.FINNHUB,
            )

        logger.info("Finnhub data unavailable, trying Alpha Vantage for: %s", symbol)
        global_quote = await self.alpha_vantage.get_global_quote(symbol)
        if global_quote is not None and global_quote.is_complete:
            return MiniPrice(
                symbol=symbol,
                price=global_quote.price,  # type: ignore[arg-type]
                percent_change=global_quote.percent_change,  # type: ignore[arg-type]
                source=QuoteSource.ALPHA_VANTAGE,
            )

        logger.warning("No valid quote data for %s from either Finnhub or Alpha Vantage", symbol)
        return None

    # -------------------------------------------------------------- quotes

    async def get_quotes(self, symbols: list[str]) -> dict[str, Quote | None]:
        """Fetch several quotes concurrently (all dispatched before any await)."""
        normalized = [require_symbol(s) for s in symbols]
        quotes = await asyncio.gather(*(self.finnhub.get_quote(s) for s in normalized))
        if self.validate:
            for quote in quotes:
                if quote is not None and not validate_quote(quote):
                    logger.warning("Quote for %s failed sanity checks: %s", quote.symbol, quote)
        return dict(zip(normalized, quotes))

    async def get_stock_overview(self, symbol: str) -> StockOverview:
        symbol = require_symbol(symbol)
        quote, profile, metrics = await asyncio.gather(
            self.finnhub.get_quote(symbol),
            self.finnhub.get_company_profile(symbol),
            self.finnhub.get_company_metrics(symbol),
        )
        return StockOverview(symbol=symbol, quote=quote, profile=profile, metrics=metrics)

    # -------------------------------------------------------------- series

    async def get_series(
        self,
        symbol: str,
        time_range: TimeRange,
        now: datetime | None = None,
    ) -> tuple[TimeSeriesPoint, ...] | None:
        """Chart series for a range: Finnhub candles, else Alpha Vantage.

        A successful fetch replaces the cached series for (symbol, range)
        wholesale. None means both providers failed; the cache is left as is.
        """
        symbol = require_symbol(symbol)
        now = now or datetime.now(timezone.utc)
        start = now - time_range.lookback

        points = await self.finnhub.get_stock_candles(
            symbol,
            time_range.resolution,
            int(start.timestamp()),
            int(now.timestamp()),
        )
        if not points:
            logger.info(
                "No candles for %s (%s), trying Alpha Vantage %s",
                symbol, time_range.value, time_range.series_kind.label,
            )
            fallback = await self.alpha_vantage.get_time_series(symbol, time_range.series_kind)
            if fallback is not None:
                points = self._trim(fallback, time_range)
            elif points is None:
                return None

        if self.validate and points:
            result = validate_series(points)
            if not result.passed:
                msgs = "; ".join(c.message for c in result.failed_checks)
                logger.warning("Series %s (%s) failed validation: %s", symbol, time_range.value, msgs)

        self.cache.store_series(symbol, time_range, points)
        return points

    def cached_series(self, symbol: str, time_range: TimeRange) -> tuple[TimeSeriesPoint, ...] | None:
        """Last stored series for (symbol, range), if any."""
        points = self.cache.get_series(symbol, time_range)
        if points is not None:
            logger.debug("Cache hit for %s (%s): %d points", symbol, time_range.value, len(points))
        return points

    @staticmethod
    def _trim(
        points: tuple[TimeSeriesPoint, ...], time_range: TimeRange,
    ) -> tuple[TimeSeriesPoint, ...]:
        # Window ends at the newest sample, not at now.
        if not points:
            return points
        cutoff = points[-1].date - time_range.lookback
        return tuple(p for p in points if p.date >= cutoff)

    # ----------------------------------------------------------- portfolio

    async def value_portfolio(self, stocks: list[PortfolioStock]) -> PortfolioValuation:
        """Value holdings at their current quotes (buy price when unpriced)."""
        symbols = sorted({require_symbol(s.symbol) for s in stocks})
        resolved = await asyncio.gather(*(self.resolve_price(s) for s in symbols))
        prices = {p.symbol: p.price for p in resolved if p is not None}
        return value_portfolio(stocks, prices)

    # ------------------------------------------------------- live updates

    def symbol_search(
        self,
        on_results: ResultListener | None = None,
        delay: float | None = None,
        min_length: int | None = None,
    ) -> SymbolSearch:
        """Debounced search bound to this service's Finnhub client."""
        return SymbolSearch(
            self.finnhub,
            on_results,
            delay=self.search_delay if delay is None else delay,
            min_length=self.search_min_length if min_length is None else min_length,
        )

    def poll_quotes(
        self,
        symbols: list[str],
        apply: Callable[[dict[str, Quote | None]], None],
        interval: float | None = None,
    ) -> Poller[dict[str, Quote | None]]:
        """Poller that refreshes ``symbols`` every ``interval`` seconds.

        The poller is returned unstarted; call ``start()`` from the loop.
        """
        normalized = [require_symbol(s) for s in symbols]
        return Poller(
            lambda: self.get_quotes(normalized),
            apply,
            interval=self.refresh_interval if interval is None else interval,
        )

    # --------------------------------------------------------------- cache

    def clear_cache(self, symbol: str) -> None:
        self.cache.clear(symbol)

    def clear_all_cache(self) -> None:
        self.cache.clear_all()

    def close(self) -> None:
        self.finnhub.transport.close()
        if self.alpha_vantage.transport is not self.finnhub.transport:
            self.alpha_vantage.transport.close()
