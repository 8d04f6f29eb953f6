r"""Asynchronous retry executor.

This module provides the ``AsyncRetryExecutor`` class, the cooperative
twin of ``RetryExecutor``. It suspends while the request is in flight
and during backoff sleeps, letting other tasks sharing the client run.
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor"]

import asyncio
import itertools
import logging
from typing import TYPE_CHECKING, Any

from waterfalls_client.retry.policy import RetryPolicy
from waterfalls_client.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from waterfalls_client.endpoints import Call
    from waterfalls_client.executor import AsyncRequestExecutor
    from waterfalls_client.retry.config import RetryConfig

logger: logging.Logger = logging.getLogger(__name__)


class AsyncRetryExecutor:
    """Execute calls with automatic retry logic, asynchronously.

    Cancelling the awaiting task stops the loop immediately, whether it is
    waiting for the server or sleeping between attempts.

    Args:
        request_executor: Performs one attempt.
        retry_config: Retry configuration.
        sleep: Optional replacement for ``asyncio.sleep``, e.g. the sleep
            of another event loop library.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from waterfalls_client import endpoints
        >>> from waterfalls_client.executor import AsyncRequestExecutor
        >>> from waterfalls_client.retry import AsyncRetryExecutor, RetryConfig
        >>> async def main():
        ...     async with httpx.AsyncClient() as client:
        ...         executor = AsyncRetryExecutor(
        ...             AsyncRequestExecutor(client, "https://waterfalls.example.com/api"),
        ...             RetryConfig(max_retries=2),
        ...         )
        ...         return await executor.execute(endpoints.get_tip_hash())
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        request_executor: AsyncRequestExecutor,
        retry_config: RetryConfig,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self.request_executor = request_executor
        self.policy: RetryPolicy = RetryPolicy(retry_config)
        self._sleep = sleep

    async def execute(self, call: Call) -> Any:
        """Execute a call, retrying transient failures.

        See ``RetryExecutor.execute``; the decisions are identical.
        """
        request = call.request
        url = f"{self.request_executor.base_url}{request.path}"
        for attempt in itertools.count():
            outcome = await self.request_executor.execute(request)
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
            await (self._sleep or asyncio.sleep)(step.delay)
        return None  # pragma: no cover
