r"""Utility helpers shared by the Waterfalls clients."""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

from waterfalls_client.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    correlation_id,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)
