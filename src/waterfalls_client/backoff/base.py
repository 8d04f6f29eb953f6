r"""Abstract base class for backoff strategies."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy"]

from abc import ABC, abstractmethod


class BaseBackoffStrategy(ABC):
    """Abstract base class for backoff strategies.

    Implementations must return a delay that never decreases when the
    attempt number grows.
    """

    @abstractmethod
    def calculate(self, attempt: int) -> float:
        """Return the delay in seconds to wait before the next attempt.

        Args:
            attempt: The 0-indexed retry number. ``attempt=0`` is the
                delay between the first and the second request.

        Returns:
            The delay in seconds.
        """
