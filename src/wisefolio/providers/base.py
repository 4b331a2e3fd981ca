"""Base class for provider clients.

A provider client turns one operation into one proxy call, tracks the call
in the shared loading map under its own key, and reports failures as
notifications. Market-data operations never raise for provider or network
failures: they notify and return None.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeVar

from wisefolio.errors import ProviderError, ProviderErrorCode
from wisefolio.loading import LoadingState
from wisefolio.notifications import LogNotifier, Notifier
from wisefolio.transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


def require_symbol(symbol: str) -> str:
    """Normalize a ticker; blank input is a caller bug, not a provider failure."""
    if not isinstance(symbol, str) or not symbol.strip():
        raise ValueError("symbol must be a non-empty string")
    return symbol.strip().upper()


class BaseProviderClient(ABC):
    """Shared call lifecycle: flag on -> invoke -> unwrap -> flag off.

    Subclasses set ``function`` (proxy function name) and ``name`` (used in
    logs) and implement ``_unwrap`` for their envelope shape.
    """

    function: str
    name: str

    def __init__(
        self,
        transport: Transport,
        notifier: Notifier | None = None,
        loading: LoadingState | None = None,
    ) -> None:
        self.transport = transport
        self.notifier = notifier or LogNotifier()
        self.loading = loading if loading is not None else LoadingState()

    @property
    def is_loading(self) -> bool:
        return self.loading.any_loading

    async def _call(
        self,
        key: str,
        body: dict[str, Any],
        expect: type | tuple[type, ...] = dict,
        parse: Callable[[Any], T] | None = None,
    ) -> Any | None:
        """Invoke the proxy under loading ``key``; None on any provider failure.

        ``parse`` turns the unwrapped payload into models. A payload it
        cannot handle counts as a provider failure too.
        """
        with self.loading.track(key):
            try:
                envelope = await self.transport.invoke(self.function, body)
                data = self._unwrap(envelope)
                if not isinstance(data, expect):
                    raise ProviderError(
                        f"Unexpected response shape from {self.name}",
                        code=ProviderErrorCode.UPSTREAM_ERROR,
                    )
                if parse is None:
                    return data
                try:
                    return parse(data)
                except (KeyError, TypeError, ValueError, AttributeError) as exc:
                    logger.exception("Could not parse %s response (%s)", self.name, key)
                    raise ProviderError(
                        f"Malformed response from {self.name}",
                        code=ProviderErrorCode.UPSTREAM_ERROR,
                    ) from exc
            except ProviderError as exc:
                logger.error("Error calling %s (%s): %s", self.name, key, exc.message)
                self.notifier.error(f"Failed to fetch data: {exc.message}")
                return None

    @abstractmethod
    def _unwrap(self, envelope: Any) -> Any:
        """Return the payload inside ``envelope`` or raise ``ProviderError``."""
        ...

    @staticmethod
    def _envelope_data(envelope: Any, source: str) -> Any:
        if not isinstance(envelope, dict):
            raise ProviderError(
                f"Received empty or invalid response from {source}",
                code=ProviderErrorCode.NO_DATA,
            )
        if envelope.get("error"):
            raise ProviderError(str(envelope["error"]), code=ProviderErrorCode.UPSTREAM_ERROR)
        data = envelope.get("data")
        if data is None:
            raise ProviderError(
                f"Received empty response from {source}",
                code=ProviderErrorCode.NO_DATA,
            )
        return data
