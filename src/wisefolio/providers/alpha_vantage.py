"""Alpha Vantage client — time series and global quote.

Calls go through the ``alpha-vantage-api`` function as
``{function, symbol, interval?, outputsize?}``. Series come back keyed by
date under a label that depends on the requested series.
"""

from __future__ import annotations

import logging
from typing import Any

from wisefolio.errors import ProviderError, ProviderErrorCode
from wisefolio.models.quote import GlobalQuote
from wisefolio.models.series import SeriesFrequency, SeriesKind, TimeSeriesPoint
from wisefolio.normalize import global_quote_from_payload, series_from_keyed_map
from wisefolio.providers.base import BaseProviderClient, require_symbol
from wisefolio.transport import ALPHA_VANTAGE_FUNCTION

logger = logging.getLogger(__name__)

OUTPUT_SIZES = ("compact", "full")

# Advisory fields Alpha Vantage adds when throttling a key.
_RATE_LIMIT_FIELDS = ("Note", "Information")


class AlphaVantageClient(BaseProviderClient):
    """Time-series provider.

    A rate-limit advisory in the payload is surfaced as a warning but never
    discards the data that came with it.
    """

    function = ALPHA_VANTAGE_FUNCTION
    name = "Alpha Vantage"

    def _unwrap(self, envelope: Any) -> Any:
        data = self._envelope_data(envelope, self.name)
        if isinstance(data, dict):
            if data.get("Error Message"):
                raise ProviderError(
                    f"API Error: {data['Error Message']}",
                    code=ProviderErrorCode.UPSTREAM_ERROR,
                )
            for field in _RATE_LIMIT_FIELDS:
                if data.get(field):
                    logger.warning("Alpha Vantage rate limit advisory: %s", data[field])
                    self.notifier.warning(f"Alpha Vantage API: {data[field]}")
                    break
        return data

    # --------------------------------------------------------------- series

    async def get_time_series(
        self,
        symbol: str,
        kind: SeriesKind,
        output_size: str = "compact",
    ) -> tuple[TimeSeriesPoint, ...] | None:
        """Fetch and normalize one series; None on failure, () when empty."""
        symbol = require_symbol(symbol)
        if output_size not in OUTPUT_SIZES:
            raise ValueError(f"Invalid output size: {output_size}. Valid: {list(OUTPUT_SIZES)}")

        body: dict[str, Any] = {"function": kind.function, "symbol": symbol}
        if kind.frequency is SeriesFrequency.INTRADAY:
            body["interval"] = kind.interval
            body["outputsize"] = output_size
            key = f"intraday-{symbol}-{kind.interval}"
        elif kind.frequency is SeriesFrequency.DAILY:
            body["outputsize"] = output_size
            key = f"daily-{symbol}-{output_size}"
        elif kind.frequency is SeriesFrequency.WEEKLY:
            key = f"weekly-{symbol}"
        elif kind.frequency is SeriesFrequency.MONTHLY:
            key = f"monthly-{symbol}"
        else:
            raise AssertionError(f"Unhandled frequency: {kind.frequency}")

        return await self._call(key, body, parse=lambda data: series_from_keyed_map(data, kind))

    async def get_time_series_daily(
        self, symbol: str, output_size: str = "compact",
    ) -> tuple[TimeSeriesPoint, ...] | None:
        return await self.get_time_series(symbol, SeriesKind.daily(), output_size)

    async def get_time_series_intraday(
        self, symbol: str, interval: str, output_size: str = "compact",
    ) -> tuple[TimeSeriesPoint, ...] | None:
        return await self.get_time_series(symbol, SeriesKind.intraday(interval), output_size)

    async def get_time_series_weekly(self, symbol: str) -> tuple[TimeSeriesPoint, ...] | None:
        return await self.get_time_series(symbol, SeriesKind.weekly())

    async def get_time_series_monthly(self, symbol: str) -> tuple[TimeSeriesPoint, ...] | None:
        return await self.get_time_series(symbol, SeriesKind.monthly())

    # --------------------------------------------------------------- quotes

    async def get_global_quote(self, symbol: str) -> GlobalQuote | None:
        symbol = require_symbol(symbol)
        return await self._call(
            f"global-quote-{symbol}",
            {"function": "GLOBAL_QUOTE", "symbol": symbol},
            parse=lambda data: global_quote_from_payload(symbol, data),
        )
