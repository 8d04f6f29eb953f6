r"""Retry package.

Public API:
    - RetryConfig: Configuration for retry behavior
    - RetryDecider: Logic for deciding whether an outcome is retryable
    - RetryStrategy: Strategy for calculating retry delays
    - RetryPolicy: Shared, I/O-free decisions of the retry loop
    - RetryExecutor: Blocking retry loop
    - AsyncRetryExecutor: Asynchronous retry loop
"""

from __future__ import annotations

__all__ = [
    "RETRY_STATUS_CODES",
    "AsyncRetryExecutor",
    "RetryConfig",
    "RetryDecider",
    "RetryExecutor",
    "RetryPolicy",
    "RetryStep",
    "RetryStrategy",
]

from waterfalls_client.retry.config import RETRY_STATUS_CODES, RetryConfig
from waterfalls_client.retry.decider import RetryDecider
from waterfalls_client.retry.executor import RetryExecutor
from waterfalls_client.retry.executor_async import AsyncRetryExecutor
from waterfalls_client.retry.policy import RetryPolicy, RetryStep
from waterfalls_client.retry.strategy import RetryStrategy
