r"""waterfalls_client - Client for the Waterfalls blockchain-indexing API.

This package provides a blocking and an asynchronous client for Waterfalls
servers: descriptor and address queries, raw transactions, block headers
and hashes, broadcast, and server metadata. Both clients share one retry
policy built on top of httpx.

Key Features:
    - Automatic retry of timeouts, connection errors and transient HTTP
      statuses (408, 429, 500, 502, 503, 504)
    - Exponential (default) or constant backoff with a bounded number of
      attempts
    - Direct, TLS or proxied (SOCKS5, HTTP) transport, onion services included
    - Strict response decoding into typed results
    - Structured errors that report how many attempts were made

Example:
    ```pycon
    >>> from waterfalls_client import Builder
    >>> client = Builder("https://waterfalls.example.com/api").max_retries(3).build_blocking()
    >>> client.get_tip_hash()  # doctest: +SKIP
    >>> client.close()

    ```
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_BASE_BACKOFF",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "RETRY_STATUS_CODES",
    "AsyncClient",
    "BaseBackoffStrategy",
    "BlockHeader",
    "BlockMeta",
    "BlockingClient",
    "Builder",
    "ClientConfig",
    "ConstantBackoff",
    "DecodeError",
    "ExhaustedRetriesError",
    "ExponentialBackoff",
    "ServerError",
    "TlsBackend",
    "TransactionNotFoundError",
    "TransportError",
    "Tx",
    "TxSeen",
    "V",
    "WaterfallsError",
    "WaterfallsResponse",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from waterfalls_client.backoff import (
    BaseBackoffStrategy,
    ConstantBackoff,
    ExponentialBackoff,
)
from waterfalls_client.builder import Builder
from waterfalls_client.client import BlockingClient
from waterfalls_client.client_async import AsyncClient
from waterfalls_client.config import (
    DEFAULT_BASE_BACKOFF,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    RETRY_STATUS_CODES,
    ClientConfig,
    TlsBackend,
)
from waterfalls_client.exceptions import (
    DecodeError,
    ExhaustedRetriesError,
    ServerError,
    TransactionNotFoundError,
    TransportError,
    WaterfallsError,
)
from waterfalls_client.models import (
    BlockHeader,
    BlockMeta,
    Tx,
    TxSeen,
    V,
    WaterfallsResponse,
)

try:
    __version__ = version("waterfalls-client")
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
