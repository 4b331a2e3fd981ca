"""Series caches — one canonical series per (symbol, range).

Storing a series always replaces whatever was held for the same key; there
is no incremental merge.
"""

from __future__ import annotations

import logging
import shutil
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path

import pandas as pd

from wisefolio.models.series import TimeRange, TimeSeriesPoint
from wisefolio.normalize import frame_to_series, series_to_frame

logger = logging.getLogger(__name__)

Series = tuple[TimeSeriesPoint, ...]


class SeriesCache(ABC):
    """Abstract cache interface."""

    @abstractmethod
    def get_series(self, symbol: str, time_range: TimeRange) -> Series | None:
        """Return the cached series, or None on miss."""
        ...

    @abstractmethod
    def store_series(self, symbol: str, time_range: TimeRange, points: Series) -> None:
        """Replace the cached series for (symbol, range)."""
        ...

    @abstractmethod
    def has_data(self, symbol: str, time_range: TimeRange) -> bool:
        ...

    @abstractmethod
    def clear(self, symbol: str) -> None:
        ...

    @abstractmethod
    def clear_all(self) -> None:
        ...


class NoCache(SeriesCache):
    """No-op cache — always misses."""

    def get_series(self, symbol, time_range):  # type: ignore[override]
        return None

    def store_series(self, symbol, time_range, points):  # type: ignore[override]
        pass

    def has_data(self, symbol, time_range):  # type: ignore[override]
        return False

    def clear(self, symbol):  # type: ignore[override]
        pass

    def clear_all(self):
        pass


class MemoryCache(SeriesCache):
    """In-memory TTL cache with LRU eviction past ``max_entries``."""

    def __init__(self, ttl_seconds: int = 300, max_entries: int = 500) -> None:
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._store: OrderedDict[str, tuple[float, Series]] = OrderedDict()

    def _key(self, symbol: str, time_range: TimeRange) -> str:
        return f"{symbol.upper()}|{time_range.value}"

    def _evict_expired(self) -> None:
        now = time.monotonic()
        expired = [k for k, (ts, _) in self._store.items() if now - ts > self.ttl]
        for k in expired:
            del self._store[k]

    def _evict_lru(self) -> None:
        while len(self._store) > self.max_entries:
            self._store.popitem(last=False)

    def get_series(self, symbol: str, time_range: TimeRange) -> Series | None:
        self._evict_expired()
        key = self._key(symbol, time_range)
        entry = self._store.get(key)
        if entry is None:
            return None
        self._store.move_to_end(key)
        return entry[1]

    def store_series(self, symbol: str, time_range: TimeRange, points: Series) -> None:
        key = self._key(symbol, time_range)
        self._store[key] = (time.monotonic(), tuple(points))
        self._store.move_to_end(key)
        self._evict_lru()

    def has_data(self, symbol: str, time_range: TimeRange) -> bool:
        self._evict_expired()
        return self._key(symbol, time_range) in self._store

    def clear(self, symbol: str) -> None:
        prefix = f"{symbol.upper()}|"
        for k in [k for k in self._store if k.startswith(prefix)]:
            del self._store[k]

    def clear_all(self) -> None:
        self._store.clear()


class ParquetCache(SeriesCache):
    """Disk cache using Parquet files with Snappy compression.

    Storage layout: ``{base_path}/{SYMBOL}/{range}.parquet``. Storing an
    empty series removes the file so a stale series is never served.
    """

    def __init__(self, base_path: Path | str) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _file_path(self, symbol: str, time_range: TimeRange) -> Path:
        return self.base_path / symbol.upper() / f"{time_range.value}.parquet"

    def get_series(self, symbol: str, time_range: TimeRange) -> Series | None:
        fp = self._file_path(symbol, time_range)
        if not fp.exists():
            return None
        try:
            return frame_to_series(pd.read_parquet(fp))
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable cache file %s: %s", fp, exc)
            return None

    def store_series(self, symbol: str, time_range: TimeRange, points: Series) -> None:
        fp = self._file_path(symbol, time_range)
        if not points:
            fp.unlink(missing_ok=True)
            return
        fp.parent.mkdir(parents=True, exist_ok=True)
        series_to_frame(points).to_parquet(fp, compression="snappy")

    def has_data(self, symbol: str, time_range: TimeRange) -> bool:
        return self._file_path(symbol, time_range).exists()

    def clear(self, symbol: str) -> None:
        symbol_dir = self.base_path / symbol.upper()
        if symbol_dir.exists():
            shutil.rmtree(symbol_dir)

    def clear_all(self) -> None:
        for d in self.base_path.iterdir():
            if d.is_dir():
                shutil.rmtree(d)


def create_cache(backend: str, cache_dir: str = "data/cache", ttl_seconds: int = 300) -> SeriesCache:
    if backend == "parquet":
        return ParquetCache(cache_dir)
    if backend == "memory":
        return MemoryCache(ttl_seconds=ttl_seconds)
    if backend == "none":
        return NoCache()
    raise ValueError(f"Unknown cache backend: {backend}")
