r"""Asynchronous Waterfalls client.

This module provides ``AsyncClient``, the twin of ``BlockingClient`` for
``asyncio``. Requests and backoff sleeps suspend the calling task; one
client can serve many concurrent tasks through its connection pool.
"""

from __future__ import annotations

__all__ = ["AsyncClient"]

import logging
from typing import TYPE_CHECKING

from waterfalls_client import endpoints
from waterfalls_client.executor import AsyncRequestExecutor
from waterfalls_client.retry import AsyncRetryExecutor
from waterfalls_client.transport import create_async_client

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence
    from types import TracebackType
    from typing import Any, Self

    import httpx

    from waterfalls_client.config import ClientConfig
    from waterfalls_client.endpoints import Call
    from waterfalls_client.models import BlockHeader, Tx, WaterfallsResponse

logger: logging.Logger = logging.getLogger(__name__)


class AsyncClient:
    r"""Asynchronous client for a Waterfalls server.

    The methods mirror ``BlockingClient`` one for one and make the same
    decisions. Cancelling a task stops its retry loop at once and
    propagates ``asyncio.CancelledError``.

    Args:
        config: The client configuration.
        client: Optional ``httpx.AsyncClient`` owned by the caller.
        sleep: Optional replacement for ``asyncio.sleep``.

    Example:
        ```pycon
        >>> import asyncio
        >>> from waterfalls_client import Builder
        >>> async def main():
        ...     async with Builder("https://waterfalls.example.com/api").build_async() as client:
        ...         return await client.get_tip_hash()
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client: httpx.AsyncClient = (
            client if client is not None else create_async_client(config)
        )
        self._executor = AsyncRetryExecutor(
            AsyncRequestExecutor(self._client, config.base_url),
            config.retry_config(),
            sleep=sleep,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(url={self.url!r})"

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def url(self) -> str:
        """The base URL of the server, without trailing slash."""
        return self._config.base_url

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def aclose(self) -> None:
        """Close the connection pool if this instance created it."""
        if self._owns_client and not self._client.is_closed:
            logger.debug(f"Closing connection pool of {self.url}")
            await self._client.aclose()

    async def _execute(self, call: Call) -> Any:
        return await self._executor.execute(call)

    async def waterfalls(self, descriptor: str) -> WaterfallsResponse:
        """Query the transactions of every script derived from a descriptor."""
        return await self._execute(endpoints.waterfalls(descriptor))

    async def waterfalls_addresses(self, addresses: Sequence[str]) -> WaterfallsResponse:
        return await self._execute(endpoints.waterfalls_addresses(addresses))

    async def waterfalls_version(
        self,
        descriptor: str,
        version: int,
        page: int | None = None,
        to_index: int | None = None,
        utxo_only: bool = False,
    ) -> WaterfallsResponse:
        return await self._execute(
            endpoints.waterfalls_version(descriptor, version, page, to_index, utxo_only)
        )

    async def get_tx(self, txid: str) -> bytes | None:
        """Return the raw transaction, or ``None`` if the server does not know it."""
        return await self._execute(endpoints.get_tx(txid))

    async def get_tx_no_opt(self, txid: str) -> bytes:
        """Return the raw transaction.

        Raises:
            TransactionNotFoundError: If the server does not know it.
        """
        return await self._execute(endpoints.get_tx(txid, required=True))

    async def get_header_by_hash(self, block_hash: str) -> BlockHeader:
        return await self._execute(endpoints.get_header_by_hash(block_hash))

    async def get_tip_hash(self) -> str:
        return await self._execute(endpoints.get_tip_hash())

    async def get_block_hash(self, height: int) -> str:
        return await self._execute(endpoints.get_block_hash(height))

    async def broadcast(self, transaction: bytes | str) -> None:
        await self._execute(endpoints.broadcast(transaction))

    async def server_recipient(self) -> str:
        return await self._execute(endpoints.server_recipient())

    async def server_address(self) -> str:
        return await self._execute(endpoints.server_address())

    async def time_since_last_block(self) -> str:
        return await self._execute(endpoints.time_since_last_block())

    async def get_address_txs(self, address: str) -> list[Tx]:
        return await self._execute(endpoints.get_address_txs(address))
