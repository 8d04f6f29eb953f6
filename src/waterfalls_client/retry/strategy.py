r"""Retry strategy for calculating backoff delays."""

from __future__ import annotations

__all__ = ["RetryStrategy"]

import logging
from typing import TYPE_CHECKING

from waterfalls_client.backoff import ExponentialBackoff

if TYPE_CHECKING:
    from waterfalls_client.backoff import BaseBackoffStrategy

logger: logging.Logger = logging.getLogger(__name__)


class RetryStrategy:
    """Calculate the delay before each retry.

    The delay is the backoff strategy value, capped at ``max_wait_time``.
    Capping with ``min`` keeps a non-decreasing schedule non-decreasing.

    Args:
        backoff_strategy: Backoff strategy instance. Defaults to
            ``ExponentialBackoff()``.
        max_wait_time: Optional maximum delay in seconds.

    Example:
        ```pycon
        >>> from waterfalls_client.backoff import ExponentialBackoff
        >>> from waterfalls_client.retry import RetryStrategy
        >>> strategy = RetryStrategy(ExponentialBackoff(base_delay=1.0), max_wait_time=3.0)
        >>> [strategy.calculate_delay(i) for i in range(4)]
        [1.0, 2.0, 3.0, 3.0]

        ```
    """

    def __init__(
        self,
        backoff_strategy: BaseBackoffStrategy | None = None,
        max_wait_time: float | None = None,
    ) -> None:
        self.backoff_strategy: BaseBackoffStrategy = (
            backoff_strategy if backoff_strategy is not None else ExponentialBackoff()
        )
        self.max_wait_time = max_wait_time

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the delay before the next attempt.

        Args:
            attempt: The 0-indexed number of the attempt that just failed.

        Returns:
            Sleep time in seconds.
        """
        delay = self.backoff_strategy.calculate(attempt)
        if self.max_wait_time is not None and delay > self.max_wait_time:
            logger.debug(f"Capping sleep time from {delay:.3f}s to {self.max_wait_time:.3f}s")
            delay = self.max_wait_time
        return delay
