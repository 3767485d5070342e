"""
Custom Exceptions.

Client-specific exception classes for consistent error handling.

Non-2xx responses are not raised by the request layer; they come back as
an APIResponse with `error` set. APIStatusError exists for callers (and the
policy services) that want to turn such an envelope into an exception
without losing the body.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pceclient.api.response import APIResponse


class ApplicationError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(ApplicationError):
    """Raised when input is rejected before any network I/O."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class TransportError(ApplicationError):
    """Raised when the HTTP exchange itself fails (DNS, connect, TLS, timeout)."""

    def __init__(self, message: str = "Transport error") -> None:
        super().__init__(message, code="NET_TRANSPORT_ERROR")


class ProtocolError(ApplicationError):
    """Raised when the server answers in a way the client cannot accept."""

    def __init__(self, message: str = "Protocol error", code: str = "PROTO_ERROR") -> None:
        super().__init__(message, code=code)


class APIStatusError(ProtocolError):
    """Raised for a non-2xx response. The full envelope is kept on `response`."""

    def __init__(self, response: "APIResponse", message: str | None = None) -> None:
        self.response = response
        super().__init__(
            message or f"http status code of {response.status_code}",
            code="HTTP_STATUS",
        )


class AsyncProtocolError(ProtocolError):
    """Raised when an async job cannot be followed (bad headers or payloads)."""

    def __init__(self, message: str = "Async protocol error") -> None:
        super().__init__(message, code="ASYNC_PROTOCOL_ERROR")


class AsyncJobFailedError(ProtocolError):
    """Raised when the server reports the async job as failed."""

    def __init__(self, message: str = "Async job failed", job_href: str | None = None) -> None:
        self.job_href = job_href
        super().__init__(message, code="ASYNC_JOB_FAILED")


class RateLimitExhaustedError(ApplicationError):
    """Raised when the server keeps answering 429 after every retry."""

    def __init__(
        self,
        message: str = "Rate limit retries exhausted",
        response: "APIResponse | None" = None,
    ) -> None:
        self.response = response
        super().__init__(message, code="RATE_LIMIT_EXHAUSTED")
