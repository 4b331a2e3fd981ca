"""Debounced symbol search."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from wisefolio.models.company import SymbolMatch
from wisefolio.providers.finnhub import FinnhubClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResultListener = Callable[[str, list[SymbolMatch]], None]


class Debouncer(Generic[T]):
    """Coalesce rapid submissions; only the last one within ``delay`` runs.

    Each ``submit`` cancels the pending call (even one whose callback has
    already started) and schedules a new one. ``cancel`` drops whatever is
    pending, e.g. on teardown.
    """

    def __init__(self, callback: Callable[[T], Awaitable[None]], delay: float = 0.3) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.callback = callback
        self.delay = delay
        self._pending: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def submit(self, value: T) -> None:
        """Schedule ``callback(value)``. Must be called from a running loop."""
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._fire(value))

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def flush(self) -> None:
        """Wait for the pending call, if any, to finish."""
        if self._pending is not None:
            try:
                await self._pending
            except asyncio.CancelledError:
                pass

    async def _fire(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        await self.callback(value)


class SymbolSearch:
    """Search-as-you-type over Finnhub's symbol lookup.

    Queries shorter than ``min_length`` (after stripping) never reach the
    network; they clear the results instead. After ``close()`` no results
    are delivered.
    """

    def __init__(
        self,
        client: FinnhubClient,
        on_results: ResultListener | None = None,
        delay: float = 0.3,
        min_length: int = 1,
    ) -> None:
        self.client = client
        self.on_results = on_results
        self.min_length = max(1, min_length)
        self.query = ""
        self.results: list[SymbolMatch] = []
        self._closed = False
        self._debouncer: Debouncer[str] = Debouncer(self._search, delay)

    def update(self, text: str) -> None:
        """Feed the current input text (one call per keystroke)."""
        if self._closed:
            return
        query = text.strip()
        self.query = query
        if len(query) < self.min_length:
            self._debouncer.cancel()
            self._deliver(query, [])
            return
        self._debouncer.submit(query)

    async def flush(self) -> None:
        await self._debouncer.flush()

    def close(self) -> None:
        self._closed = True
        self._debouncer.cancel()

    async def _search(self, query: str) -> None:
        matches = await self.client.search_symbols(query)
        if self._closed:
            return
        if matches is None:
            logger.debug("Search for '%s' failed; clearing results", query)
        self._deliver(query, matches or [])

    def _deliver(self, query: str, matches: list[SymbolMatch]) -> None:
        self.results = matches
        if self.on_results is not None:
            self.on_results(query, matches)
