r"""Configuration defaults and the immutable client configuration.

A ``ClientConfig`` is built once, usually through
``waterfalls_client.Builder``, and then shared read-only by every request
issued from the client built with it.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_BASE_BACKOFF",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "RETRY_STATUS_CODES",
    "ClientConfig",
    "TlsBackend",
]

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from waterfalls_client.backoff import ExponentialBackoff
from waterfalls_client.retry.config import RETRY_STATUS_CODES, RetryConfig
from waterfalls_client.validation import (
    validate_base_url,
    validate_header,
    validate_proxy,
    validate_retry_params,
    validate_timeout,
)

if TYPE_CHECKING:
    from waterfalls_client.backoff import BaseBackoffStrategy

# Default timeout in seconds for each phase of an attempt
DEFAULT_TIMEOUT = 10.0

# Default maximum number of retries
# Total attempts = max_retries + 1 (initial attempt)
DEFAULT_MAX_RETRIES = 6

# Delay before the first retry, doubled after every retry
DEFAULT_BASE_BACKOFF = 0.256


class TlsBackend(enum.Enum):
    """Trust store used to verify the server certificate.

    ``DEFAULT`` uses the CA bundle shipped with httpx (certifi), ``SYSTEM``
    uses the certificates of the operating system.
    """

    DEFAULT = "default"
    SYSTEM = "system"


def _default_backoff() -> BaseBackoffStrategy:
    return ExponentialBackoff(base_delay=DEFAULT_BASE_BACKOFF)


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration of a Waterfalls client.

    Args:
        base_url: URL of the Waterfalls server, e.g.
            ``https://waterfalls.example.com/api``. A trailing slash is removed.
        proxy: Optional proxy URL, e.g. ``socks5h://127.0.0.1:9050``.
        timeout: Timeout in seconds applied by ``httpx`` to each phase
            of an attempt: connecting, writing the request, reading each
            chunk of the response and waiting for a pooled connection.
            It bounds each phase separately, not the attempt as a whole.
        headers: HTTP headers set on every request, as ``(name, value)`` pairs.
        tls_backend: Trust store used to verify certificates.
        ca_bundle: Optional path to a PEM file with the trusted CA
            certificates. Takes precedence over ``tls_backend``.
        accept_invalid_certs: Disable certificate verification. Never
            enabled by default.
        max_retries: Maximum number of retries after the first attempt.
        backoff_strategy: Delay policy between attempts.
        max_wait_time: Optional cap on a single backoff delay, in seconds.
        status_forcelist: HTTP status codes that are retried.

    Example:
        ```pycon
        >>> from waterfalls_client.config import ClientConfig
        >>> config = ClientConfig(base_url="https://waterfalls.example.com/api/")
        >>> config.base_url
        'https://waterfalls.example.com/api'
        >>> config.max_retries
        6

        ```
    """

    base_url: str
    proxy: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    headers: tuple[tuple[str, str], ...] = ()
    tls_backend: TlsBackend = TlsBackend.DEFAULT
    ca_bundle: str | None = None
    accept_invalid_certs: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_strategy: BaseBackoffStrategy = field(default_factory=_default_backoff)
    max_wait_time: float | None = None
    status_forcelist: tuple[int, ...] = RETRY_STATUS_CODES

    def __post_init__(self) -> None:
        validate_base_url(self.base_url)
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "status_forcelist", tuple(self.status_forcelist))
        if self.proxy is not None:
            validate_proxy(self.proxy)
        elif self.is_onion:
            msg = f"onion address {self.base_url!r} requires a SOCKS proxy"
            raise ValueError(msg)
        validate_timeout(self.timeout)
        validate_retry_params(max_retries=self.max_retries, max_wait_time=self.max_wait_time)
        for name, value in self.headers:
            validate_header(name, value)

    @property
    def is_onion(self) -> bool:
        """``True`` if the server is a Tor onion service."""
        return (urlsplit(self.base_url).hostname or "").endswith(".onion")

    def header_dict(self) -> dict[str, str]:
        """Return the default headers as a new dictionary."""
        return dict(self.headers)

    def retry_config(self) -> RetryConfig:
        """Return the retry parameters of this configuration."""
        return RetryConfig(
            max_retries=self.max_retries,
            backoff_strategy=self.backoff_strategy,
            status_forcelist=self.status_forcelist,
            max_wait_time=self.max_wait_time,
        )
