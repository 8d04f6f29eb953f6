r"""Retry decision logic.

This module provides the ``RetryDecider`` class that tells transient
failures, worth another attempt, from terminal ones.
"""

from __future__ import annotations

__all__ = ["RetryDecider"]

import logging

import httpx

from waterfalls_client.executor import AttemptOutcome, OutcomeKind

logger: logging.Logger = logging.getLogger(__name__)

# Transport failures that may succeed on another attempt. Unsupported
# protocols and local protocol errors are configuration bugs.
RETRYABLE_TRANSPORT_ERRORS: tuple[type[httpx.TransportError], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    httpx.ProxyError,
)


class RetryDecider:
    """Decides whether an attempt outcome is retryable.

    Args:
        status_forcelist: HTTP status codes treated as transient.
    """

    def __init__(self, status_forcelist: tuple[int, ...]) -> None:
        self.status_forcelist = status_forcelist

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.status_forcelist

    def is_retryable_error(self, error: BaseException) -> bool:
        return isinstance(error, RETRYABLE_TRANSPORT_ERRORS)

    def should_retry(self, outcome: AttemptOutcome) -> tuple[bool, str]:
        """Determine if an outcome should trigger a retry.

        The attempt budget is not considered here.

        Args:
            outcome: The outcome of one attempt.

        Returns:
            Tuple of (should_retry, reason).
        """
        if outcome.kind is OutcomeKind.SUCCESS:
            return (False, "success")
        if outcome.kind is OutcomeKind.TRANSPORT_ERROR:
            name = type(outcome.error).__name__
            if self.is_retryable_error(outcome.error):
                return (True, name)
            logger.debug(f"{name} is not retryable")
            return (False, name)
        if self.is_retryable_status(outcome.status_code):
            return (True, f"status {outcome.status_code}")
        return (False, f"non-retryable status {outcome.status_code}")
