r"""Backoff strategies used between retry attempts.

A strategy maps the 0-indexed retry number to a delay in seconds. Both
shipped strategies are non-decreasing in the attempt number, which the
retry loop relies on.
"""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ConstantBackoff", "ExponentialBackoff"]

from waterfalls_client.backoff.base import BaseBackoffStrategy
from waterfalls_client.backoff.constant import ConstantBackoff
from waterfalls_client.backoff.exponential import ExponentialBackoff
