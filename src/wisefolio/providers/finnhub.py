"""Finnhub client — quotes, candles, company data, news, symbol search.

Calls go through the ``finnhub-api`` function as ``{endpoint, params}``.
"""

from __future__ import annotations

from datetime import date, timedelta
from collections.abc import Callable
from typing import Any

from wisefolio.models.company import CompanyMetrics, CompanyProfile, SymbolMatch
from wisefolio.models.news import NewsItem, NewsSentiment
from wisefolio.models.quote import Quote
from wisefolio.models.series import TimeSeriesPoint
from wisefolio.normalize import (
    matches_from_search,
    metrics_from_finnhub,
    news_from_finnhub,
    profile_from_finnhub,
    quote_from_finnhub,
    sentiment_from_finnhub,
    series_from_candles,
)
from wisefolio.providers.base import BaseProviderClient, require_symbol
from wisefolio.transport import FINNHUB_FUNCTION

RESOLUTIONS = ("1", "5", "15", "30", "60", "D", "W", "M")


class FinnhubClient(BaseProviderClient):
    """Quote/candle/news provider.

    Each operation tracks its own loading key (``quote-AAPL``,
    ``candles-AAPL-D``...) so concurrent requests never share a flag.
    """

    function = FINNHUB_FUNCTION
    name = "Finnhub"

    def _unwrap(self, envelope: Any) -> Any:
        return self._envelope_data(envelope, self.name)

    async def _endpoint(
        self,
        key: str,
        endpoint: str,
        params: dict[str, str | int],
        expect: type | tuple[type, ...] = dict,
        parse: Callable[[Any], Any] | None = None,
    ) -> Any | None:
        return await self._call(key, {"endpoint": endpoint, "params": params}, expect, parse)

    # --------------------------------------------------------------- quotes

    async def get_quote(self, symbol: str) -> Quote | None:
        symbol = require_symbol(symbol)
        return await self._endpoint(
            f"quote-{symbol}", "quote", {"symbol": symbol},
            parse=lambda data: quote_from_finnhub(symbol, data),
        )

    # -------------------------------------------------------------- candles

    async def get_stock_candles(
        self,
        symbol: str,
        resolution: str,
        start_ts: int,
        end_ts: int,
    ) -> tuple[TimeSeriesPoint, ...] | None:
        """Candles between two UNIX timestamps, ascending.

        Returns an empty tuple when Finnhub reports ``no_data``.
        """
        symbol = require_symbol(symbol)
        if resolution not in RESOLUTIONS:
            raise ValueError(f"Invalid resolution: {resolution}. Valid: {list(RESOLUTIONS)}")
        return await self._endpoint(
            f"candles-{symbol}-{resolution}",
            "stock/candle",
            {"symbol": symbol, "resolution": resolution, "from": int(start_ts), "to": int(end_ts)},
            parse=series_from_candles,
        )

    # ---------------------------------------------------------- company data

    async def get_company_profile(self, symbol: str) -> CompanyProfile | None:
        symbol = require_symbol(symbol)
        return await self._endpoint(
            f"profile-{symbol}", "stock/profile2", {"symbol": symbol},
            parse=lambda data: profile_from_finnhub(symbol, data),
        )

    async def get_company_metrics(self, symbol: str) -> CompanyMetrics | None:
        symbol = require_symbol(symbol)
        return await self._endpoint(
            f"metrics-{symbol}", "stock/metric", {"symbol": symbol, "metric": "all"},
            parse=lambda data: metrics_from_finnhub(symbol, data),
        )

    # ----------------------------------------------------------------- news

    async def get_stock_news(
        self,
        symbol: str | None = None,
        start: date | None = None,
        end: date | None = None,
        category: str | None = None,
        min_id: int | None = None,
    ) -> list[NewsItem] | None:
        """Company news when ``symbol`` is given, market news otherwise.

        Company news defaults to the last seven days; market news to the
        ``general`` category.
        """
        params: dict[str, str | int] = {}
        if symbol is not None:
            symbol = require_symbol(symbol)
            end = end or date.today()
            start = start or end - timedelta(days=7)
            params.update(symbol=symbol, **{"from": start.isoformat(), "to": end.isoformat()})
            endpoint, key = "company-news", f"news-{symbol}"
        else:
            category = category or "general"
            params["category"] = category
            if min_id:
                params["minId"] = min_id
            endpoint, key = "news", f"news-{category}"

        return await self._endpoint(key, endpoint, params, expect=list, parse=news_from_finnhub)

    async def get_news_sentiment(self, symbol: str) -> NewsSentiment | None:
        symbol = require_symbol(symbol)
        return await self._endpoint(
            f"sentiment-{symbol}", "news-sentiment", {"symbol": symbol},
            parse=lambda data: sentiment_from_finnhub(symbol, data),
        )

    # --------------------------------------------------------------- search

    async def search_symbols(self, query: str) -> list[SymbolMatch] | None:
        if not isinstance(query, str) or not query.strip():
            raise ValueError("query must be a non-empty string")
        query = query.strip()
        return await self._endpoint(f"search-{query}", "search", {"q": query}, parse=matches_from_search)
