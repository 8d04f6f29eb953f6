r"""Blocking Waterfalls client.

This module provides ``BlockingClient``, which performs every request and
every backoff sleep on the calling thread. ``AsyncClient`` in
``waterfalls_client.client_async`` is its cooperative twin: both build the
same calls and share the same retry policy.
"""

from __future__ import annotations

__all__ = ["BlockingClient"]

import logging
from typing import TYPE_CHECKING

from waterfalls_client import endpoints
from waterfalls_client.executor import RequestExecutor
from waterfalls_client.retry import RetryExecutor
from waterfalls_client.transport import create_client

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType
    from typing import Any, Self

    import httpx

    from waterfalls_client.config import ClientConfig
    from waterfalls_client.endpoints import Call
    from waterfalls_client.models import BlockHeader, Tx, WaterfallsResponse

logger: logging.Logger = logging.getLogger(__name__)


class BlockingClient:
    r"""Blocking client for a Waterfalls server.

    Every method retries transient failures (timeouts, connection errors
    and the configured status codes) with the backoff of ``config``, and
    raises a ``WaterfallsError`` subclass when it gives up.

    Two lifecycles are supported. Without ``client``, an ``httpx.Client``
    is created from ``config`` and closed by ``close()`` or by the
    ``with`` block. With ``client``, the caller keeps ownership and the
    client is never closed here; its own timeout, proxy and TLS settings
    apply instead of those of ``config``.

    Args:
        config: The client configuration.
        client: Optional ``httpx.Client`` to send requests with.
        sleep: Optional replacement for ``time.sleep``.

    Example:
        ```pycon
        >>> from waterfalls_client import Builder
        >>> with Builder("https://waterfalls.example.com/api").build_blocking() as client:  # doctest: +SKIP
        ...     tip = client.get_tip_hash()
        ...     response = client.waterfalls("wpkh(xpub.../<0;1>/*)")
        ...

        ```
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client: httpx.Client = client if client is not None else create_client(config)
        self._executor = RetryExecutor(
            RequestExecutor(self._client, config.base_url), config.retry_config(), sleep=sleep
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(url={self.url!r})"

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def url(self) -> str:
        """The base URL of the server, without trailing slash."""
        return self._config.base_url

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def client(self) -> httpx.Client:
        """The underlying ``httpx.Client``."""
        return self._client

    def close(self) -> None:
        """Close the connection pool if this instance created it."""
        if self._owns_client and not self._client.is_closed:
            logger.debug(f"Closing connection pool of {self.url}")
            self._client.close()

    def _execute(self, call: Call) -> Any:
        return self._executor.execute(call)

    def waterfalls(self, descriptor: str) -> WaterfallsResponse:
        """Query the transactions of every script derived from a descriptor.

        Args:
            descriptor: The output descriptor, passed to the server as is.

        Returns:
            The transactions seen, grouped by descriptor, chain and script.

        Raises:
            WaterfallsError: If the request fails.
        """
        return self._execute(endpoints.waterfalls(descriptor))

    def waterfalls_addresses(self, addresses: Sequence[str]) -> WaterfallsResponse:
        """Query the transactions of a list of addresses.

        Raises:
            ValueError: If ``addresses`` is empty.
            TypeError: If ``addresses`` is a single string.
        """
        return self._execute(endpoints.waterfalls_addresses(addresses))

    def waterfalls_version(
        self,
        descriptor: str,
        version: int,
        page: int | None = None,
        to_index: int | None = None,
        utxo_only: bool = False,
    ) -> WaterfallsResponse:
        """Query a specific version of the waterfalls endpoint.

        Args:
            descriptor: The output descriptor.
            version: The endpoint version, e.g. ``1`` or ``2``.
            page: Optional page number.
            to_index: Optional derivation index to scan up to.
            utxo_only: Only report unspent outputs.
        """
        return self._execute(
            endpoints.waterfalls_version(descriptor, version, page, to_index, utxo_only)
        )

    def get_tx(self, txid: str) -> bytes | None:
        """Return the raw transaction, or ``None`` if the server does not know it."""
        return self._execute(endpoints.get_tx(txid))

    def get_tx_no_opt(self, txid: str) -> bytes:
        """Return the raw transaction.

        Raises:
            TransactionNotFoundError: If the server does not know it.
        """
        return self._execute(endpoints.get_tx(txid, required=True))

    def get_header_by_hash(self, block_hash: str) -> BlockHeader:
        return self._execute(endpoints.get_header_by_hash(block_hash))

    def get_tip_hash(self) -> str:
        return self._execute(endpoints.get_tip_hash())

    def get_block_hash(self, height: int) -> str:
        return self._execute(endpoints.get_block_hash(height))

    def broadcast(self, transaction: bytes | str) -> None:
        """Broadcast a serialized transaction.

        Args:
            transaction: The raw transaction bytes or their hex encoding.
        """
        self._execute(endpoints.broadcast(transaction))

    def server_recipient(self) -> str:
        return self._execute(endpoints.server_recipient())

    def server_address(self) -> str:
        return self._execute(endpoints.server_address())

    def time_since_last_block(self) -> str:
        return self._execute(endpoints.time_since_last_block())

    def get_address_txs(self, address: str) -> list[Tx]:
        return self._execute(endpoints.get_address_txs(address))
