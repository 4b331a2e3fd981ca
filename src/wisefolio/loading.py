"""Per-request loading map shared by the provider clients."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType

Listener = Callable[[Mapping[str, bool]], None]


class LoadingState:
    """Request key -> in-flight flag.

    Every change produces a new mapping; readers holding an older snapshot
    never observe a half-applied update. Keys are created lazily and kept
    after the request finishes, ordered by last use. With ``max_keys`` set,
    the oldest idle keys are evicted once the map grows past the bound;
    in-flight keys are never evicted.
    """

    def __init__(self, max_keys: int | None = None) -> None:
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be >= 1")
        self.max_keys = max_keys
        self._flags: Mapping[str, bool] = MappingProxyType({})
        self._listeners: list[Listener] = []

    # --- Reads ---

    @property
    def flags(self) -> Mapping[str, bool]:
        """Current read-only snapshot."""
        return self._flags

    def is_loading(self, key: str) -> bool:
        return self._flags.get(key, False)

    @property
    def any_loading(self) -> bool:
        return any(self._flags.values())

    def __contains__(self, key: object) -> bool:
        return key in self._flags

    def __len__(self) -> int:
        return len(self._flags)

    # --- Writes ---

    def set(self, key: str, loading: bool) -> None:
        updated = {k: v for k, v in self._flags.items() if k != key}
        updated[key] = loading
        if self.max_keys is not None:
            self._evict_idle(updated)
        self._flags = MappingProxyType(updated)
        for listener in list(self._listeners):
            listener(self._flags)

    @contextmanager
    def track(self, key: str) -> Iterator[None]:
        """Mark ``key`` in flight for the duration of the block."""
        self.set(key, True)
        try:
            yield
        finally:
            self.set(key, False)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with each new snapshot. Returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _evict_idle(self, flags: dict[str, bool]) -> None:
        excess = len(flags) - self.max_keys  # type: ignore[operator]
        if excess <= 0:
            return
        idle = [k for k, v in flags.items() if not v]
        for k in idle[:excess]:
            del flags[k]
