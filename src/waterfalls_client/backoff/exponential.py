r"""Exponential backoff strategy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

from waterfalls_client.backoff.base import BaseBackoffStrategy


class ExponentialBackoff(BaseBackoffStrategy):
    """Double the delay after every retry.

    The delay is ``base_delay * 2 ** attempt``, optionally capped at
    ``max_delay``. The client default starts at 256 milliseconds, so a
    client configured with six retries waits 0.256, 0.512, 1.024, 2.048,
    4.096 and 8.192 seconds.

    Args:
        base_delay: The delay before the first retry, in seconds.
        max_delay: Optional upper bound for a single delay, in seconds.

    Example:
        ```pycon
        >>> from waterfalls_client.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(base_delay=0.25)
        >>> [backoff.calculate(i) for i in range(4)]
        [0.25, 0.5, 1.0, 2.0]
        >>> ExponentialBackoff(base_delay=1.0, max_delay=5.0).calculate(10)
        5.0

        ```
    """

    def __init__(self, base_delay: float = 0.256, max_delay: float | None = None) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        if max_delay is not None and max_delay <= 0:
            msg = f"max_delay must be positive if specified, got {max_delay}"
            raise ValueError(msg)
        self.base_delay = base_delay
        self.max_delay = max_delay

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(base_delay={self.base_delay}, "
            f"max_delay={self.max_delay})"
        )

    def calculate(self, attempt: int) -> float:
        delay = self.base_delay * (2**attempt)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay
