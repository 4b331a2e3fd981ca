"""Market-data provider clients."""

from __future__ import annotations

from wisefolio.providers.alpha_vantage import AlphaVantageClient
from wisefolio.providers.base import BaseProviderClient, require_symbol
from wisefolio.providers.finnhub import FinnhubClient

__all__ = ["BaseProviderClient", "FinnhubClient", "AlphaVantageClient", "require_symbol"]
