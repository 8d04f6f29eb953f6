r"""Shared test helpers: sample payloads and a scripted mock server.

``MockServer`` plugs into ``httpx.MockTransport`` so the real clients can
be exercised end to end without any network access.
"""

from __future__ import annotations

__all__ = [
    "BASE_URL",
    "DESCRIPTOR",
    "GENESIS_HASH",
    "GENESIS_HEADER_HEX",
    "PREV_TXID",
    "TXID",
    "TX_PAYLOAD",
    "WATERFALLS_PAYLOAD",
    "MockServer",
    "make_async_client",
    "make_blocking_client",
]

import json
from typing import TYPE_CHECKING, Any

import httpx

from waterfalls_client import AsyncClient, BlockingClient, ClientConfig

if TYPE_CHECKING:
    from collections.abc import Iterable

BASE_URL = "https://waterfalls.example.com/api"

DESCRIPTOR = "wpkh(tpubD6NzVbkrYhZ4XgiXtGrdW5XDAPFCL9h7we1vwNCpn8tGbBcgfVYjXyhWo4E1xkh56hjod1RhGjxbaTLV3X4FyWuejifB9jusQ46QzG87VKp/<0;1>/*)"

TXID = "f4184fc596403b9d638783cf57adfe4c75c605f6356fbc91338530e9831e9e16"
PREV_TXID = "0437cd7f8525ceed2324359c2d0ba26006d92d856a9c20fa0241106ee5a597c9"

# Bitcoin genesis block
GENESIS_HASH = "000000000019d6689c085ae165831e934ff763ae46a2a6c172b3f1b60a8ce26f"
GENESIS_HEADER_HEX = (
    "01000000"
    "0000000000000000000000000000000000000000000000000000000000000000"
    "3ba3edfd7a7b12b27ac72c3e67768f617fc81bc3888a51323a9fb8aa4b1e5e4a"
    "29ab5f49"
    "ffff001d"
    "1dac2b7c"
)

WATERFALLS_PAYLOAD: dict[str, Any] = {
    "txs_seen": {
        DESCRIPTOR: [
            [
                {
                    "txid": TXID,
                    "height": 170,
                    "block_hash": GENESIS_HASH,
                    "block_timestamp": 1231731025,
                    "v": 1,
                },
                {"txid": PREV_TXID, "height": 0},
            ],
            [],
        ]
    },
    "page": 0,
    "tip": GENESIS_HASH,
    "tip_meta": {"b": GENESIS_HASH, "t": 1231006505, "h": 0},
}

TX_PAYLOAD: dict[str, Any] = {
    "txid": TXID,
    "version": 1,
    "locktime": 0,
    "vin": [
        {
            "txid": PREV_TXID,
            "vout": 0,
            "prevout": {
                "value": 5000000000,
                "scriptpubkey": "4104" + "11" * 64 + "ac",
                "scriptpubkey_type": "p2pk",
            },
            "scriptsig": "4730440220",
            "witness": [],
            "sequence": 4294967295,
            "is_coinbase": False,
        }
    ],
    "vout": [
        {"value": 1000000000, "scriptpubkey": "4104" + "22" * 64 + "ac"},
        {"value": 4000000000, "scriptpubkey": "4104" + "33" * 64 + "ac"},
    ],
    "size": 275,
    "weight": 1100,
    "status": {
        "confirmed": True,
        "block_height": 170,
        "block_hash": GENESIS_HASH,
        "block_time": 1231731025,
    },
    "fee": 0,
}


class MockServer:
    r"""Scripted server for ``httpx.MockTransport``.

    Every request consumes the next scripted reply. Once the script is
    exhausted, the last reply is repeated. A reply is either an
    ``httpx.Response``, an exception instance to raise, or a
    ``(status_code, body)`` tuple where ``body`` is bytes, text or JSON.

    Clients created with ``http_client`` or ``async_http_client`` are
    tracked and closed by ``close`` or ``aclose``.

    Args:
        replies: The scripted replies. Defaults to one empty 200 response.
    """

    def __init__(self, replies: Iterable[Any] = ()) -> None:
        self.replies: list[Any] = list(replies) or [(200, b"")]
        self.requests: list[httpx.Request] = []
        self._clients: list[httpx.Client] = []
        self._async_clients: list[httpx.AsyncClient] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def script(self, *replies: Any) -> MockServer:
        self.replies = list(replies)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.replies)) - 1
        reply = self.replies[index]
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        status_code, body = reply
        if isinstance(body, (dict, list)):
            return httpx.Response(status_code, content=json.dumps(body).encode())
        if isinstance(body, str):
            return httpx.Response(status_code, content=body.encode())
        return httpx.Response(status_code, content=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def http_client(self) -> httpx.Client:
        client = httpx.Client(transport=self.transport())
        self._clients.append(client)
        return client

    def async_http_client(self) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=self.transport())
        self._async_clients.append(client)
        return client

    def close(self) -> None:
        for client in self._clients:
            client.close()
        self._clients.clear()

    async def aclose(self) -> None:
        self.close()
        for client in self._async_clients:
            await client.aclose()
        self._async_clients.clear()


def make_blocking_client(server: MockServer, **kwargs: Any) -> BlockingClient:
    """Create a ``BlockingClient`` sending its requests to ``server``."""
    config = ClientConfig(base_url=BASE_URL, **kwargs)
    return BlockingClient(config, client=server.http_client())


def make_async_client(server: MockServer, **kwargs: Any) -> AsyncClient:
    """Create an ``AsyncClient`` sending its requests to ``server``."""
    config = ClientConfig(base_url=BASE_URL, **kwargs)
    return AsyncClient(config, client=server.async_http_client())
