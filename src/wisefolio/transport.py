"""Transports — how a named server-side function gets invoked.

Every transport takes ``(function, body)`` and returns the decoded JSON
envelope the hosted proxy would return (``{"data": ...}`` or, for the AI
functions, their own response object). Failures raise ``ProviderError``.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import certifi
import requests

from wisefolio.errors import ProviderError, ProviderErrorCode

logger = logging.getLogger(__name__)

FINNHUB_FUNCTION = "finnhub-api"
ALPHA_VANTAGE_FUNCTION = "alpha-vantage-api"


class Transport(ABC):
    """Invoke a server-side function by name."""

    @abstractmethod
    async def invoke(self, function: str, body: dict[str, Any]) -> Any:
        ...

    def close(self) -> None:
        """Release network resources (default: nothing to release)."""


def new_session() -> requests.Session:
    session = requests.Session()
    session.verify = certifi.where()
    return session


async def run_request(source: str, timeout: float, send: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking ``requests`` call off the event loop.

    Network failures become retryable ``ProviderError``s.
    """
    try:
        return await asyncio.to_thread(send, *args)
    except ProviderError:
        raise
    except requests.Timeout as exc:
        raise ProviderError(
            f"{source} timed out after {timeout}s",
            code=ProviderErrorCode.TIMEOUT,
            retryable=True,
        ) from exc
    except requests.RequestException as exc:
        raise ProviderError(
            f"{source} request failed: {exc}",
            code=ProviderErrorCode.TRANSPORT,
            retryable=True,
        ) from exc


def decode_response(resp: requests.Response, source: str, allow_empty: bool = False) -> Any:
    """Decode a JSON body, raising on HTTP errors.

    Error bodies of the form ``{"error": "..."}`` supply the message.
    """
    if allow_empty and resp.status_code < 400 and not resp.content:
        return None
    try:
        data = resp.json()
    except ValueError:
        data = None

    if resp.status_code >= 400:
        message = None
        if isinstance(data, dict):
            message = data.get("error") or data.get("message")
        if isinstance(message, dict):
            message = message.get("message")
        message = message or f"{source} returned HTTP {resp.status_code}"
        if resp.status_code in (401, 403):
            code = ProviderErrorCode.AUTH_FAILED
        elif resp.status_code == 404:
            code = ProviderErrorCode.NOT_FOUND
        elif resp.status_code == 429:
            code = ProviderErrorCode.RATE_LIMITED
        else:
            code = ProviderErrorCode.UPSTREAM_ERROR
        raise ProviderError(
            str(message),
            code=code,
            retryable=resp.status_code == 429 or resp.status_code >= 500,
        )

    if data is None:
        raise ProviderError(
            f"{source} returned a non-JSON response",
            code=ProviderErrorCode.UPSTREAM_ERROR,
        )
    return data


class _RequestsTransport(Transport):
    """Shared ``requests.Session`` plumbing; blocking I/O runs off the loop."""

    def __init__(self, timeout: float = 15.0, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.session = session or new_session()

    async def invoke(self, function: str, body: dict[str, Any]) -> Any:
        return await run_request(function, self.timeout, self._send, function, body)

    @abstractmethod
    def _send(self, function: str, body: dict[str, Any]) -> Any:
        ...

    def close(self) -> None:
        self.session.close()


class ProxyTransport(_RequestsTransport):
    """Invoke hosted edge functions at ``{base_url}/functions/v1/{function}``."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: str | None = None,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise ProviderError(
                "Backend URL required. Set WISEFOLIO_BACKEND_URL or pass base_url.",
                code=ProviderErrorCode.AUTH_FAILED,
            )
        if not api_key:
            raise ProviderError(
                "Backend key required. Set WISEFOLIO_BACKEND_KEY or pass api_key.",
                code=ProviderErrorCode.AUTH_FAILED,
            )
        super().__init__(timeout=timeout, session=session)
        self.base_url = base_url.rstrip("/")
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
        })

    def _send(self, function: str, body: dict[str, Any]) -> Any:
        resp = self.session.post(
            f"{self.base_url}/functions/v1/{function}",
            json=body,
            timeout=self.timeout,
        )
        return decode_response(resp, function)


class DirectTransport(_RequestsTransport):
    """Call Finnhub and Alpha Vantage directly, emulating the proxy envelopes.

    Only the two market-data functions are available; the AI functions need
    the hosted proxy.
    """

    FINNHUB_BASE = "https://finnhub.io/api/v1"
    ALPHA_VANTAGE_BASE = "https://www.alphavantage.co/query"

    def __init__(
        self,
        finnhub_api_key: str | None = None,
        alpha_vantage_api_key: str | None = None,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(timeout=timeout, session=session)
        self.finnhub_api_key = finnhub_api_key
        self.alpha_vantage_api_key = alpha_vantage_api_key

    def _send(self, function: str, body: dict[str, Any]) -> Any:
        if function == FINNHUB_FUNCTION:
            return self._finnhub(body)
        if function == ALPHA_VANTAGE_FUNCTION:
            return self._alpha_vantage(body)
        raise ProviderError(
            f"'{function}' is only available through the hosted proxy",
            code=ProviderErrorCode.NOT_FOUND,
        )

    def _finnhub(self, body: dict[str, Any]) -> dict[str, Any]:
        if not self.finnhub_api_key:
            raise ProviderError(
                "Finnhub API key required. Set FINNHUB_API_KEY.",
                code=ProviderErrorCode.AUTH_FAILED,
            )
        endpoint = body.get("endpoint")
        if not endpoint:
            raise ProviderError("Endpoint is required", code=ProviderErrorCode.VALIDATION_FAILED)

        params = {**(body.get("params") or {}), "token": self.finnhub_api_key}
        resp = self.session.get(
            f"{self.FINNHUB_BASE}/{endpoint}", params=params, timeout=self.timeout,
        )
        return {"data": decode_response(resp, "Finnhub")}

    def _alpha_vantage(self, body: dict[str, Any]) -> dict[str, Any]:
        if not self.alpha_vantage_api_key:
            raise ProviderError(
                "Alpha Vantage API key required. Set ALPHA_VANTAGE_API_KEY.",
                code=ProviderErrorCode.AUTH_FAILED,
            )
        if not body.get("function"):
            raise ProviderError("Function is required", code=ProviderErrorCode.VALIDATION_FAILED)

        params = {k: v for k, v in body.items() if v is not None}
        params.setdefault("datatype", "json")
        params["apikey"] = self.alpha_vantage_api_key
        resp = self.session.get(self.ALPHA_VANTAGE_BASE, params=params, timeout=self.timeout)
        data = decode_response(resp, "Alpha Vantage")

        if isinstance(data, dict) and data.get("Error Message"):
            raise ProviderError(
                f"Alpha Vantage API error: {data['Error Message']}",
                code=ProviderErrorCode.UPSTREAM_ERROR,
            )
        if isinstance(data, dict) and data.get("Note"):
            logger.warning("Alpha Vantage API limit note: %s", data["Note"])
        return {"data": data}


class StaticTransport(Transport):
    """In-memory transport returning pre-loaded responses — no network.

    Routes are keyed by function name plus the Finnhub ``endpoint`` or Alpha
    Vantage ``function`` inside the body. A response may be a JSON value
    (returned as a deep copy), an exception instance (raised), or a callable
    taking the request body. Every call is recorded in ``calls``.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str | None], tuple[Any, float]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    # --- Pre-load helpers ---

    def route(self, function: str, key: str | None, response: Any, delay: float = 0.0) -> None:
        self._routes[(function, key)] = (response, delay)

    def set_finnhub(self, endpoint: str, data: Any, delay: float = 0.0) -> None:
        self.route(FINNHUB_FUNCTION, endpoint, {"data": data}, delay)

    def set_alpha_vantage(self, av_function: str, data: Any, delay: float = 0.0) -> None:
        self.route(ALPHA_VANTAGE_FUNCTION, av_function, {"data": data}, delay)

    def set_function(self, function: str, response: Any, delay: float = 0.0) -> None:
        self.route(function, None, response, delay)

    def calls_to(self, function: str, key: str | None = None) -> list[dict[str, Any]]:
        return [
            body for name, body in self.calls
            if name == function and (key is None or self._route_key(body) == key)
        ]

    # --- Transport implementation ---

    async def invoke(self, function: str, body: dict[str, Any]) -> Any:
        self.calls.append((function, copy.deepcopy(body)))
        key = self._route_key(body)
        entry = self._routes.get((function, key)) or self._routes.get((function, None))
        if entry is None:
            raise ProviderError(
                f"No response configured for {function} ({key})",
                code=ProviderErrorCode.NOT_FOUND,
            )

        response, delay = entry
        if delay:
            await asyncio.sleep(delay)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(body)
        return copy.deepcopy(response)

    @staticmethod
    def _route_key(body: dict[str, Any]) -> str | None:
        return body.get("endpoint") or body.get("function")
