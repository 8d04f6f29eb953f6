r"""Endpoint descriptors and the calls built from them.

An ``Endpoint`` is defined once per operation kind. A ``Call`` binds an
endpoint to concrete arguments and to the decoding contract of the
operation. Both client facades build their calls here, so the blocking
and the asynchronous clients can only differ in how they do I/O.
"""

from __future__ import annotations

__all__ = [
    "ADDRESS_TXS",
    "BLOCK_HASH_BY_HEIGHT",
    "BROADCAST",
    "HEADER_BY_HASH",
    "SERVER_ADDRESS",
    "SERVER_RECIPIENT",
    "TIME_SINCE_LAST_BLOCK",
    "TIP_HASH",
    "TX_RAW",
    "WATERFALLS",
    "Call",
    "Endpoint",
    "PreparedRequest",
]

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from waterfalls_client.decoder import NotFound, ResponseShape, decode
from waterfalls_client.validation import validate_hex_hash

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True)
class Endpoint:
    """A path template and the shape of its successful response.

    Example:
        ```pycon
        >>> from waterfalls_client.endpoints import TX_RAW
        >>> TX_RAW.format_path(txid="ab" * 32)[:8]
        '/tx/abab'

        ```
    """

    name: str
    method: str
    path: str
    shape: ResponseShape

    def format_path(self, **params: Any) -> str:
        return self.path.format(**{key: quote(str(value), safe="") for key, value in params.items()})


WATERFALLS = Endpoint("waterfalls", "GET", "/v{version}/waterfalls", ResponseShape.WATERFALLS)
TX_RAW = Endpoint("tx_raw", "GET", "/tx/{txid}/raw", ResponseShape.RAW_TRANSACTION)
HEADER_BY_HASH = Endpoint("header", "GET", "/block/{block_hash}/header", ResponseShape.HEX_HEADER)
TIP_HASH = Endpoint("tip_hash", "GET", "/blocks/tip/hash", ResponseShape.BLOCK_HASH)
BLOCK_HASH_BY_HEIGHT = Endpoint(
    "block_hash", "GET", "/block-height/{height}", ResponseShape.BLOCK_HASH
)
BROADCAST = Endpoint("broadcast", "POST", "/tx", ResponseShape.EMPTY)
SERVER_RECIPIENT = Endpoint("server_recipient", "GET", "/v1/server_recipient", ResponseShape.TEXT)
SERVER_ADDRESS = Endpoint("server_address", "GET", "/v1/server_address", ResponseShape.TEXT)
TIME_SINCE_LAST_BLOCK = Endpoint(
    "time_since_last_block", "GET", "/v1/time_since_last_block", ResponseShape.TEXT
)
ADDRESS_TXS = Endpoint("address_txs", "GET", "/address/{address}/txs", ResponseShape.TRANSACTIONS)


@dataclass(frozen=True)
class PreparedRequest:
    """Everything needed to send one attempt, relative to the base URL."""

    method: str
    path: str
    params: tuple[tuple[str, str], ...] = ()
    content: bytes | None = None


@dataclass(frozen=True)
class Call:
    """One logical operation: the request to send and how to decode it."""

    endpoint: Endpoint
    request: PreparedRequest
    not_found: NotFound = NotFound.ERROR
    subject: str = ""

    def decode(self, status_code: int, content: bytes) -> Any:
        return decode(
            status_code,
            content,
            self.endpoint.shape,
            not_found=self.not_found,
            subject=self.subject,
        )

    @classmethod
    def build(
        cls,
        endpoint: Endpoint,
        *,
        path_params: dict[str, Any] | None = None,
        params: Sequence[tuple[str, str]] = (),
        content: bytes | None = None,
        **kwargs: Any,
    ) -> Call:
        request = PreparedRequest(
            method=endpoint.method,
            path=endpoint.format_path(**(path_params or {})),
            params=tuple(params),
            content=content,
        )
        return cls(endpoint=endpoint, request=request, **kwargs)


def waterfalls(descriptor: str) -> Call:
    return Call.build(WATERFALLS, path_params={"version": 2}, params=[("descriptor", descriptor)])


def waterfalls_addresses(addresses: Sequence[str]) -> Call:
    if isinstance(addresses, str):
        msg = "addresses must be a sequence of addresses, not a single string"
        raise TypeError(msg)
    if not addresses:
        msg = "addresses must not be empty"
        raise ValueError(msg)
    return Call.build(
        WATERFALLS, path_params={"version": 2}, params=[("addresses", ",".join(addresses))]
    )


def waterfalls_version(
    descriptor: str,
    version: int,
    page: int | None = None,
    to_index: int | None = None,
    utxo_only: bool = False,
) -> Call:
    if version < 1:
        msg = f"version must be >= 1, got {version}"
        raise ValueError(msg)
    params = [("descriptor", descriptor), ("utxo_only", "true" if utxo_only else "false")]
    if page is not None:
        params.append(("page", str(page)))
    if to_index is not None:
        params.append(("to_index", str(to_index)))
    return Call.build(WATERFALLS, path_params={"version": version}, params=params)


def get_tx(txid: str, *, required: bool = False) -> Call:
    txid = validate_hex_hash(txid, "txid")
    return Call.build(
        TX_RAW,
        path_params={"txid": txid},
        not_found=NotFound.TRANSACTION if required else NotFound.NONE,
        subject=txid,
    )


def get_header_by_hash(block_hash: str) -> Call:
    block_hash = validate_hex_hash(block_hash, "block_hash")
    return Call.build(HEADER_BY_HASH, path_params={"block_hash": block_hash})


def get_tip_hash() -> Call:
    return Call.build(TIP_HASH)


def get_block_hash(height: int) -> Call:
    if height < 0:
        msg = f"height must be >= 0, got {height}"
        raise ValueError(msg)
    return Call.build(BLOCK_HASH_BY_HEIGHT, path_params={"height": height})


def broadcast(transaction: bytes | str) -> Call:
    """Build a broadcast call from raw transaction bytes or their hex encoding."""
    if isinstance(transaction, str):
        transaction = bytes.fromhex(transaction)
    if not transaction:
        msg = "transaction must not be empty"
        raise ValueError(msg)
    return Call.build(BROADCAST, content=transaction.hex().encode("ascii"))


def server_recipient() -> Call:
    return Call.build(SERVER_RECIPIENT)


def server_address() -> Call:
    return Call.build(SERVER_ADDRESS)


def time_since_last_block() -> Call:
    return Call.build(TIME_SINCE_LAST_BLOCK)


def get_address_txs(address: str) -> Call:
    return Call.build(ADDRESS_TXS, path_params={"address": address})
