r"""Fluent builder of Waterfalls clients.

``Builder`` collects the options of a client and validates them all at
once, when a configuration or a client is built.
"""

from __future__ import annotations

__all__ = ["Builder"]

from typing import TYPE_CHECKING

from waterfalls_client.client import BlockingClient
from waterfalls_client.client_async import AsyncClient
from waterfalls_client.config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    RETRY_STATUS_CODES,
    ClientConfig,
    TlsBackend,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
    from typing import Self

    from waterfalls_client.backoff import BaseBackoffStrategy


class Builder:
    r"""Build a ``BlockingClient`` or an ``AsyncClient``.

    Every option method returns the builder, so calls can be chained.
    Setting the same header twice keeps the last value.

    Args:
        base_url: URL of the Waterfalls server.

    Example:
        ```pycon
        >>> from waterfalls_client import Builder
        >>> config = (
        ...     Builder("http://abcdefghijklmnop.onion/api")
        ...     .proxy("socks5h://127.0.0.1:9050")
        ...     .timeout(30)
        ...     .header("User-Agent", "my-wallet/1.0")
        ...     .max_retries(3)
        ...     .build_config()
        ... )
        >>> config.max_retries
        3
        >>> config.headers
        (('User-Agent', 'my-wallet/1.0'),)

        ```
    """

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url
        self._proxy: str | None = None
        self._timeout: float = DEFAULT_TIMEOUT
        self._headers: dict[str, str] = {}
        self._tls_backend = TlsBackend.DEFAULT
        self._ca_bundle: str | None = None
        self._accept_invalid_certs = False
        self._max_retries = DEFAULT_MAX_RETRIES
        self._backoff: BaseBackoffStrategy | None = None
        self._max_wait_time: float | None = None
        self._status_forcelist: tuple[int, ...] = RETRY_STATUS_CODES

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(base_url={self._base_url!r})"

    def proxy(self, proxy: str) -> Self:
        """Route requests through a proxy, e.g. ``socks5h://127.0.0.1:9050``."""
        self._proxy = proxy
        return self

    def timeout(self, timeout: float) -> Self:
        """Set the timeout of a single attempt, in seconds."""
        self._timeout = timeout
        return self

    def header(self, name: str, value: str) -> Self:
        self._headers[name] = value
        return self

    def max_retries(self, max_retries: int) -> Self:
        """Set the number of retries after the first attempt."""
        self._max_retries = max_retries
        return self

    def backoff(self, strategy: BaseBackoffStrategy) -> Self:
        self._backoff = strategy
        return self

    def max_wait_time(self, max_wait_time: float) -> Self:
        """Cap every backoff delay, in seconds."""
        self._max_wait_time = max_wait_time
        return self

    def status_forcelist(self, status_codes: Iterable[int]) -> Self:
        """Replace the HTTP status codes that are retried."""
        self._status_forcelist = tuple(status_codes)
        return self

    def tls_backend(self, backend: TlsBackend) -> Self:
        self._tls_backend = backend
        return self

    def ca_bundle(self, path: str) -> Self:
        """Trust the CA certificates of a PEM file instead of the TLS backend."""
        self._ca_bundle = path
        return self

    def accept_invalid_certs(self, accept: bool = True) -> Self:
        """Disable certificate verification. Only use it for testing."""
        self._accept_invalid_certs = accept
        return self

    def build_config(self) -> ClientConfig:
        """Validate the options and return the immutable configuration.

        Raises:
            ValueError: If an option is invalid.
        """
        kwargs = {}
        if self._backoff is not None:
            kwargs["backoff_strategy"] = self._backoff
        return ClientConfig(
            base_url=self._base_url,
            proxy=self._proxy,
            timeout=self._timeout,
            headers=tuple(self._headers.items()),
            tls_backend=self._tls_backend,
            ca_bundle=self._ca_bundle,
            accept_invalid_certs=self._accept_invalid_certs,
            max_retries=self._max_retries,
            max_wait_time=self._max_wait_time,
            status_forcelist=self._status_forcelist,
            **kwargs,
        )

    def build_blocking(self, sleep: Callable[[float], None] | None = None) -> BlockingClient:
        return BlockingClient(self.build_config(), sleep=sleep)

    def build_async(
        self, sleep: Callable[[float], Awaitable[None]] | None = None
    ) -> AsyncClient:
        """Build an asynchronous client.

        Args:
            sleep: Optional replacement for ``asyncio.sleep``.
        """
        return AsyncClient(self.build_config(), sleep=sleep)
