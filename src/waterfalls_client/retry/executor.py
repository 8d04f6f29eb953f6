r"""Blocking retry executor.

This module provides the ``RetryExecutor`` class that runs the retry
loop on the calling thread, backoff sleeps included.
"""

from __future__ import annotations

__all__ = ["RetryExecutor"]

import itertools
import logging
import time
from typing import TYPE_CHECKING, Any

from waterfalls_client.retry.policy import RetryPolicy
from waterfalls_client.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Callable

    from waterfalls_client.endpoints import Call
    from waterfalls_client.executor import RequestExecutor
    from waterfalls_client.retry.config import RetryConfig

logger: logging.Logger = logging.getLogger(__name__)


class RetryExecutor:
    """Execute calls with automatic retry logic, blocking.

    Args:
        request_executor: Performs one attempt.
        retry_config: Retry configuration.
        sleep: Optional replacement for ``time.sleep``.

    Attributes:
        request_executor: Performs one attempt.
        policy: The retry decisions shared with ``AsyncRetryExecutor``.
    """

    def __init__(
        self,
        request_executor: RequestExecutor,
        retry_config: RetryConfig,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.request_executor = request_executor
        self.policy: RetryPolicy = RetryPolicy(retry_config)
        self._sleep = sleep

    def execute(self, call: Call) -> Any:
        """Execute a call, retrying transient failures.

        Attempts the request up to ``max_retries + 1`` times. No delay
        follows the final attempt.

        Args:
            call: The operation to execute.

        Returns:
            The decoded value.

        Raises:
            WaterfallsError: The terminal error, tagged with the number of
                attempts made.
        """
        request = call.request
        url = f"{self.request_executor.base_url}{request.path}"
        for attempt in itertools.count():
            outcome = self.request_executor.execute(request)
            step = self.policy.evaluate(call, outcome, attempt)
            if step.error is not None:
                log_structured(
                    logger,
                    logging.DEBUG,
                    f"{request.method} {url} failed: {step.error.message}",
                    url=url,
                    method=request.method,
                    attempt=attempt + 1,
                    status_code=outcome.status_code,
                )
                raise step.error
            if not step.should_retry:
                return step.value
            log_structured(
                logger,
                logging.DEBUG,
                f"{request.method} {url}: will retry in {step.delay:.3f}s ({step.reason})",
                url=url,
                method=request.method,
                attempt=attempt + 1,
                status_code=outcome.status_code,
                delay=step.delay,
            )
            (self._sleep or time.sleep)(step.delay)
        return None  # pragma: no cover
