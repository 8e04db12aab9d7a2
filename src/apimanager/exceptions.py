"""Custom exception hierarchy for the API manager."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from .http import HttpResponse


class ApiManagerError(RuntimeError):
    """Base error for API manager failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class MalformedTemplate(ApiManagerError):
    """Raised when a route template is empty or missing."""


class ConfigurationError(ApiManagerError):
    """Raised when a client configuration cannot be resolved."""


class RequestError(ApiManagerError):
    """Raised when an HTTP request cannot be delivered."""


class ResponseError(ApiManagerError):
    """Raised when a response fails the status check.

    ``error`` holds the parsed error body (or the parse exception) and
    ``resp`` the raw response, when one is attached.
    """

    def __init__(
        self,
        message: str,
        *,
        error: Any,
        resp: HttpResponse | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=resp.status_code if resp is not None else None,
            details=error,
        )
        self.error = error
        self.resp = resp


class TransportFailure(ResponseError):
    """Raised for non-success HTTP statuses."""


class BodyParseFailure(ResponseError):
    """Raised when a response body is not valid JSON."""
