r"""Validation helpers for client configuration.

All helpers raise ``ValueError`` so that an invalid configuration is
rejected when the client is built, never in the middle of a request.
"""

from __future__ import annotations

__all__ = [
    "validate_base_url",
    "validate_header",
    "validate_hex_hash",
    "validate_proxy",
    "validate_retry_params",
    "validate_timeout",
]

import re
from urllib.parse import urlsplit

SUPPORTED_PROXY_SCHEMES = ("http", "https", "socks5", "socks5h")

# RFC 9110 token characters
_HEADER_NAME = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_HEX_HASH = re.compile(r"^[0-9a-fA-F]{64}$")


def validate_timeout(timeout: float) -> None:
    """Validate the request timeout.

    Args:
        timeout: Maximum seconds to wait for the server. Must be > 0.

    Raises:
        ValueError: If ``timeout`` is not positive.

    Example:
        ```pycon
        >>> from waterfalls_client.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(0)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(max_retries: int, max_wait_time: float | None = None) -> None:
    """Validate the retry parameters.

    Args:
        max_retries: Maximum number of retries. Must be >= 0. A value of
            0 means a single attempt.
        max_wait_time: Optional cap on a single backoff delay. Must be > 0
            if provided.

    Raises:
        ValueError: If a parameter is out of range.
    """
    if max_retries < 0:
        msg = f"max_retries must be >= 0, got {max_retries}"
        raise ValueError(msg)
    if max_wait_time is not None and max_wait_time <= 0:
        msg = f"max_wait_time must be > 0, got {max_wait_time}"
        raise ValueError(msg)


def validate_base_url(base_url: str) -> None:
    """Validate the server base URL.

    Raises:
        ValueError: If the URL is not an absolute http(s) URL.
    """
    parts = urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        msg = f"base_url must be an absolute http(s) URL, got {base_url!r}"
        raise ValueError(msg)
    if parts.query or parts.fragment:
        msg = f"base_url must not contain a query or a fragment, got {base_url!r}"
        raise ValueError(msg)


def validate_proxy(proxy: str) -> None:
    """Validate a proxy URL such as ``socks5h://127.0.0.1:9050``.

    Raises:
        ValueError: If the scheme is not supported or the host is missing.
    """
    parts = urlsplit(proxy)
    if parts.scheme not in SUPPORTED_PROXY_SCHEMES:
        msg = (
            f"proxy scheme must be one of {', '.join(SUPPORTED_PROXY_SCHEMES)}, "
            f"got {proxy!r}"
        )
        raise ValueError(msg)
    if not parts.hostname:
        msg = f"proxy must include a host, got {proxy!r}"
        raise ValueError(msg)


def validate_header(name: str, value: str) -> None:
    """Validate a default header set on every request.

    Raises:
        ValueError: If the name is not an HTTP token or the value contains
            a line break.
    """
    if not _HEADER_NAME.match(name):
        msg = f"invalid HTTP header name: {name!r}"
        raise ValueError(msg)
    if "\r" in value or "\n" in value:
        msg = f"invalid HTTP header value for {name!r}: {value!r}"
        raise ValueError(msg)


def validate_hex_hash(value: str, what: str = "hash") -> str:
    """Validate a txid or a block hash and return it lowercased.

    Example:
        ```pycon
        >>> from waterfalls_client.validation import validate_hex_hash
        >>> validate_hex_hash("AB" * 32)[:4]
        'abab'

        ```
    """
    if not _HEX_HASH.match(value):
        msg = f"{what} must be 64 hexadecimal characters, got {value!r}"
        raise ValueError(msg)
    return value.lower()
