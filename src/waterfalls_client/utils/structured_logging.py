r"""Structured logging for the Waterfalls clients.

Every retry decision is logged on the ``waterfalls_client`` logger at
``DEBUG`` level, with the request URL, the method, the attempt number,
the status code and the backoff delay attached as record attributes.
``StructuredFormatter`` renders those records as one JSON object per line.

Example:
    Enable JSON logs for the clients:

    ```python
    import logging
    from waterfalls_client.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logger = logging.getLogger("waterfalls_client")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```

    Tag every log line of a wallet sync with the same correlation id:

    ```python
    from waterfalls_client.utils.structured_logging import correlation_id

    with correlation_id("sync-42"):
        client.waterfalls(descriptor)
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextlib
import contextvars
import json
import logging
import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

# contextvars keep the id per thread and per asyncio task
_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "waterfalls_correlation_id", default=None
)

# Attributes every LogRecord has; anything else came through ``extra``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def get_correlation_id() -> str | None:
    """Return the correlation id of the current context, if any.

    Example:
        ```pycon
        >>> from waterfalls_client.utils.structured_logging import (
        ...     clear_correlation_id,
        ...     get_correlation_id,
        ...     set_correlation_id,
        ... )
        >>> set_correlation_id("sync-1")
        >>> get_correlation_id()
        'sync-1'
        >>> clear_correlation_id()
        >>> get_correlation_id()

        ```
    """
    return _correlation_id.get()


def set_correlation_id(value: str) -> None:
    _correlation_id.set(value)


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextlib.contextmanager
def correlation_id(value: str) -> Iterator[None]:
    """Set the correlation id for the duration of a ``with`` block.

    The previous value is restored on exit, so blocks can be nested.
    """
    token = _correlation_id.set(value)
    try:
        yield
    finally:
        _correlation_id.reset(token)


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON objects.

    The object holds ``timestamp``, ``level``, ``logger`` and ``message``,
    the source location, the correlation id when one is set, the formatted
    exception when there is one, and every field passed through ``extra``.
    Values that are not JSON serializable are rendered with ``str``.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from waterfalls_client.utils.structured_logging import StructuredFormatter
        >>> record = logging.LogRecord(
        ...     "waterfalls_client", logging.DEBUG, "x.py", 1, "retrying", None, None
        ... )
        >>> record.attempt = 2
        >>> data = json.loads(StructuredFormatter().format(record))
        >>> data["message"], data["attempt"]
        ('retrying', 2)

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        current = get_correlation_id()
        if current is not None:
            data["correlation_id"] = current
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                data[key] = value
        return json.dumps(data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: ARG002
        """Format the record time as ISO 8601 UTC with milliseconds."""
        stamp = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
        return f"{stamp}.{int(record.msecs):03d}Z"


def log_structured(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """Log ``message`` with ``extra`` attached as record attributes.

    Fields whose value is ``None`` are dropped. The check on
    ``isEnabledFor`` keeps the hot path free when debug logging is off.

    Args:
        logger: Logger to use.
        level: Log level, e.g. ``logging.DEBUG``.
        message: Log message.
        **extra: Structured fields, e.g. ``url`` or ``attempt``.
    """
    if not logger.isEnabledFor(level):
        return
    logger.log(level, message, extra={k: v for k, v in extra.items() if v is not None})
