"""Provider error types."""

from __future__ import annotations

from enum import Enum


class ProviderErrorCode(Enum):
    """Error classification codes."""

    RATE_LIMITED = "rate_limited"
    AUTH_FAILED = "auth_failed"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    UPSTREAM_ERROR = "upstream_error"
    VALIDATION_FAILED = "validation_failed"
    NO_DATA = "no_data"


class ProviderError(Exception):
    """Provider/proxy exception with error code and retryable flag.

    Attributes:
        message: Human-readable error description (shown in notifications).
        code: Structured error code for programmatic handling.
        retryable: Whether the caller may retry with another provider.
    """

    def __init__(
        self,
        message: str,
        code: ProviderErrorCode = ProviderErrorCode.UPSTREAM_ERROR,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable
