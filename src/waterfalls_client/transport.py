r"""Transport selection and ``httpx`` client construction.

This module turns a ``ClientConfig`` into a configured ``httpx.Client`` or
``httpx.AsyncClient``: direct or through a proxy, with the requested TLS
trust store. Transport-level retries of ``httpx`` are disabled because the
retry policy owns every retry decision.
"""

from __future__ import annotations

__all__ = [
    "TransportMode",
    "build_verify",
    "create_async_client",
    "create_client",
    "resolve_transport",
]

import enum
import logging
import ssl
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

import httpx

from waterfalls_client.config import TlsBackend

if TYPE_CHECKING:
    from waterfalls_client.config import ClientConfig

logger: logging.Logger = logging.getLogger(__name__)


class TransportMode(enum.Enum):
    """How requests reach the server."""

    DIRECT_PLAINTEXT = "direct_plaintext"
    DIRECT_TLS = "direct_tls"
    PROXIED = "proxied"


def resolve_transport(config: ClientConfig) -> TransportMode:
    """Return the transport mode implied by a configuration.

    Example:
        ```pycon
        >>> from waterfalls_client.config import ClientConfig
        >>> from waterfalls_client.transport import resolve_transport
        >>> resolve_transport(ClientConfig(base_url="https://waterfalls.example.com"))
        <TransportMode.DIRECT_TLS: 'direct_tls'>
        >>> resolve_transport(
        ...     ClientConfig(base_url="http://abc.onion", proxy="socks5h://127.0.0.1:9050")
        ... )
        <TransportMode.PROXIED: 'proxied'>

        ```
    """
    if config.proxy is not None:
        return TransportMode.PROXIED
    if urlsplit(config.base_url).scheme == "https":
        return TransportMode.DIRECT_TLS
    return TransportMode.DIRECT_PLAINTEXT


def build_verify(config: ClientConfig) -> ssl.SSLContext | bool:
    """Build the ``verify`` argument of the ``httpx`` transport.

    A CA bundle takes precedence over the TLS backend. Certificate
    verification is only disabled when ``accept_invalid_certs`` is set.

    Args:
        config: The client configuration.

    Returns:
        ``False``, ``True`` for the certifi store bundled with httpx, or an
        SSL context.

    Raises:
        ValueError: If the CA bundle cannot be loaded.
    """
    if config.accept_invalid_certs:
        logger.debug("TLS certificate verification is disabled")
        return False
    if config.ca_bundle is not None:
        try:
            return ssl.create_default_context(cafile=config.ca_bundle)
        except (OSError, ssl.SSLError) as exc:
            msg = f"cannot load CA bundle {config.ca_bundle!r}: {exc}"
            raise ValueError(msg) from exc
    if config.tls_backend is TlsBackend.SYSTEM:
        return ssl.create_default_context()
    return True


def _log_mode(config: ClientConfig) -> None:
    mode = resolve_transport(config)
    logger.debug(f"Using {mode.value} transport to {config.base_url}")


def create_client(config: ClientConfig) -> httpx.Client:
    """Create the blocking ``httpx`` client described by ``config``.

    Example:
        ```pycon
        >>> from waterfalls_client.config import ClientConfig
        >>> from waterfalls_client.transport import create_client
        >>> with create_client(ClientConfig(base_url="https://waterfalls.example.com")) as client:
        ...     client.timeout.read
        ...
        10.0

        ```
    """
    _log_mode(config)
    transport = httpx.HTTPTransport(verify=build_verify(config), proxy=config.proxy, retries=0)
    return httpx.Client(
        timeout=config.timeout, headers=config.header_dict(), transport=transport
    )


def create_async_client(config: ClientConfig) -> httpx.AsyncClient:
    """Create the asynchronous ``httpx`` client described by ``config``."""
    _log_mode(config)
    transport = httpx.AsyncHTTPTransport(
        verify=build_verify(config), proxy=config.proxy, retries=0
    )
    return httpx.AsyncClient(
        timeout=config.timeout, headers=config.header_dict(), transport=transport
    )
