r"""Retry policy shared by the blocking and the asynchronous executors.

``RetryPolicy.evaluate`` holds every decision of the retry loop: decode
a success, give up on a terminal failure, or schedule another attempt
after a delay. It performs no I/O, so the two executors only differ in
how they send a request and how they sleep.
"""

from __future__ import annotations

__all__ = ["RetryPolicy", "RetryStep"]

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from waterfalls_client.decoder import server_error
from waterfalls_client.exceptions import (
    DecodeError,
    ExhaustedRetriesError,
    ServerError,
    TransportError,
    WaterfallsError,
)
from waterfalls_client.executor import OutcomeKind
from waterfalls_client.retry.decider import RetryDecider
from waterfalls_client.retry.strategy import RetryStrategy

if TYPE_CHECKING:
    from waterfalls_client.endpoints import Call
    from waterfalls_client.executor import AttemptOutcome
    from waterfalls_client.retry.config import RetryConfig

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryStep:
    """What the retry loop does next.

    Exactly one of the following holds: ``error`` is set (raise it),
    ``delay`` is set (sleep then attempt again), or neither is set
    (return ``value``).
    """

    value: Any = None
    error: WaterfallsError | None = None
    delay: float | None = None
    reason: str = ""

    @property
    def should_retry(self) -> bool:
        return self.delay is not None


def _decode_error(call: Call, cause: httpx.DecodingError) -> DecodeError:
    error = DecodeError(call.endpoint.shape.value, f"cannot read body: {cause}")
    error.__cause__ = cause
    return error


def _transport_error(call: Call, cause: httpx.RequestError) -> TransportError:
    request = call.request
    if isinstance(cause, httpx.TimeoutException):
        message = f"{request.method} request to {request.path} timed out"
    else:
        message = f"{request.method} request to {request.path} failed: {cause}"
    error = TransportError(message, cause=cause)
    error.__cause__ = cause
    return error


class RetryPolicy:
    """Classify attempt outcomes and schedule retries.

    Args:
        config: The retry configuration.

    Attributes:
        config: The retry configuration.
        decider: Logic for deciding whether an outcome is retryable.
        strategy: Strategy for calculating retry delays.
    """

    def __init__(self, config: RetryConfig) -> None:
        self.config = config
        self.decider: RetryDecider = RetryDecider(config.status_forcelist)
        self.strategy: RetryStrategy = RetryStrategy(
            config.backoff_strategy, config.max_wait_time
        )

    @property
    def max_attempts(self) -> int:
        return self.config.max_retries + 1

    def evaluate(self, call: Call, outcome: AttemptOutcome, attempt: int) -> RetryStep:
        """Decide what follows the given attempt.

        Args:
            call: The logical operation being executed.
            outcome: The outcome of the attempt.
            attempt: The 0-indexed attempt number.

        Returns:
            The next step of the retry loop. Terminal errors carry the
            number of attempts made.
        """
        attempts = attempt + 1
        should_retry, reason = self.decider.should_retry(outcome)

        if outcome.kind is OutcomeKind.TRANSPORT_ERROR:
            if isinstance(outcome.error, httpx.DecodingError):
                error = _decode_error(call, outcome.error)
                error.attempts = attempts
                return RetryStep(error=error, reason=reason)
            error = _transport_error(call, outcome.error)
            if not should_retry:
                error.attempts = attempts
                return RetryStep(error=error, reason=reason)
            return self._retry_or_exhaust(error, attempt, reason)

        if should_retry:
            return self._retry_or_exhaust(
                server_error(outcome.status_code, outcome.content), attempt, reason
            )

        # success or a terminal status, both owned by the decoder
        try:
            value = call.decode(outcome.status_code, outcome.content)
        except WaterfallsError as exc:
            exc.attempts = attempts
            return RetryStep(error=exc, reason=type(exc).__name__)
        return RetryStep(value=value, reason=reason)

    def _retry_or_exhaust(
        self, error: TransportError | ServerError, attempt: int, reason: str
    ) -> RetryStep:
        if attempt < self.config.max_retries:
            return RetryStep(delay=self.strategy.calculate_delay(attempt), reason=reason)
        exhausted = ExhaustedRetriesError(attempt + 1, error)
        exhausted.__cause__ = error
        error.attempts = attempt + 1
        logger.debug(f"Giving up after {attempt + 1} attempts ({reason})")
        return RetryStep(error=exhausted, reason=reason)
