r"""Configuration dataclass for retry behavior."""

from __future__ import annotations

__all__ = ["RETRY_STATUS_CODES", "RetryConfig"]

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from waterfalls_client.backoff import ExponentialBackoff

if TYPE_CHECKING:
    from waterfalls_client.backoff import BaseBackoffStrategy

# HTTP status codes that trigger an automatic retry
# 408: Request Timeout
# 429: Too Many Requests
# 500: Internal Server Error
# 502: Bad Gateway
# 503: Service Unavailable
# 504: Gateway Timeout
RETRY_STATUS_CODES = (408, 429, 500, 502, 503, 504)


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_retries: Maximum number of retries. The total number of
            attempts is ``max_retries + 1``.
        backoff_strategy: Delay policy between attempts.
        status_forcelist: HTTP status codes that trigger a retry.
        max_wait_time: Optional cap on a single backoff delay.
    """

    max_retries: int
    backoff_strategy: BaseBackoffStrategy = field(default_factory=ExponentialBackoff)
    status_forcelist: tuple[int, ...] = RETRY_STATUS_CODES
    max_wait_time: float | None = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            msg = f"max_retries must be >= 0, got {self.max_retries}"
            raise ValueError(msg)
