"""Periodic re-fetch with an explicit "still wanted" guard."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Poller(Generic[T]):
    """Run ``fetch`` now and every ``interval`` seconds, feeding ``apply``.

    Ticks are not serialized: a slow fetch may resolve after a newer one, and
    whichever resolves last is applied last. ``None`` results (failed
    fetches) leave the last applied state alone. After ``stop()`` nothing is
    applied, including fetches that were already in flight.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T | None]],
        apply: Callable[[T], None],
        interval: float = 60.0,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.fetch = fetch
        self.apply = apply
        self.interval = interval
        self._active = False
        self._timer: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        """Start polling. Must be called from a running event loop."""
        if self._active:
            return
        self._active = True
        self._timer = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        self._active = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def refresh(self) -> None:
        """Fetch once right away, outside the interval.

        Only an active poller refreshes; before ``start()`` or after
        ``stop()`` this does nothing.
        """
        if not self._active:
            logger.debug("Ignoring refresh on an inactive poller")
            return
        await self._tick()

    async def wait_idle(self) -> None:
        """Wait for fetches already in flight to settle."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def _run(self) -> None:
        while self._active:
            task = asyncio.create_task(self._tick())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            await asyncio.sleep(self.interval)

    async def _tick(self) -> None:
        try:
            result = await self.fetch()
        except Exception:
            logger.exception("Polling fetch failed")
            return
        if not self._active:
            logger.debug("Discarding result that resolved after stop")
            return
        if result is None:
            return
        try:
            self.apply(result)
        except Exception:
            logger.exception("Applying polled result failed")
