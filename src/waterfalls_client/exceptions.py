r"""Exceptions raised by the Waterfalls clients.

Every failed call raises a subclass of ``WaterfallsError``, so callers can
tell transport, server and decode failures apart and decide whether to
retry at a higher level. Each error records how many attempts were made
before it was raised.
"""

from __future__ import annotations

__all__ = [
    "DecodeError",
    "ExhaustedRetriesError",
    "ServerError",
    "TransactionNotFoundError",
    "TransportError",
    "WaterfallsError",
]

import httpx


class WaterfallsError(Exception):
    """Base class of all the errors raised by a Waterfalls client.

    Args:
        message: Human-readable description of the failure.
        attempts: Number of attempts made before the error was raised.
            ``0`` means the error was not raised by a retry loop.
    """

    def __init__(self, message: str, *, attempts: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.attempts = attempts


class TransportError(WaterfallsError):
    """The request never produced a usable HTTP response.

    Connection refused, DNS failure, TLS handshake failure, proxy tunnel
    failure and timeouts all end up here, as do redirect loops.

    Args:
        message: Human-readable description of the failure.
        cause: The underlying ``httpx`` exception.
        attempts: Number of attempts made before the error was raised.
    """

    def __init__(
        self, message: str, *, cause: httpx.RequestError, attempts: int = 0
    ) -> None:
        super().__init__(message, attempts=attempts)
        self.cause = cause

    @property
    def timeout(self) -> bool:
        """``True`` if the attempt exceeded the configured timeout."""
        return isinstance(self.cause, httpx.TimeoutException)


class ServerError(WaterfallsError):
    """The server answered with a non-2xx status code.

    Args:
        status_code: The HTTP status code returned by the server.
        message: The response body if the server sent one, otherwise a
            generic description.
        attempts: Number of attempts made before the error was raised.
    """

    def __init__(self, status_code: int, message: str = "", *, attempts: int = 0) -> None:
        super().__init__(
            message or f"server responded with status {status_code}", attempts=attempts
        )
        self.status_code = status_code
        self.server_message = message or None


class TransactionNotFoundError(ServerError):
    """The server does not know the requested transaction."""

    def __init__(self, txid: str, *, attempts: int = 0) -> None:
        super().__init__(404, f"transaction {txid} not found", attempts=attempts)
        self.txid = txid


class DecodeError(WaterfallsError):
    """A 2xx response body does not match the expected shape.

    Decode errors indicate a protocol mismatch and are never retried.

    Args:
        shape: Name of the expected response shape.
        reason: What did not match.
        attempts: Number of attempts made before the error was raised.
    """

    def __init__(self, shape: str, reason: str, *, attempts: int = 0) -> None:
        super().__init__(f"cannot decode {shape} response: {reason}", attempts=attempts)
        self.shape = shape
        self.reason = reason


class ExhaustedRetriesError(WaterfallsError):
    """A retryable failure persisted through every allowed attempt.

    Args:
        attempts: Total number of attempts made.
        last_error: The error observed on the final attempt.
    """

    def __init__(self, attempts: int, last_error: TransportError | ServerError) -> None:
        super().__init__(
            f"request failed after {attempts} attempts: {last_error.message}",
            attempts=attempts,
        )
        self.last_error = last_error
