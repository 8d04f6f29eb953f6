r"""Response decoding.

The decoder turns a status code and a body into either a domain value or
a structured error. It never substitutes defaults for a partial or
malformed payload: anything that does not match the expected shape is a
``DecodeError``.
"""

from __future__ import annotations

__all__ = ["NotFound", "ResponseShape", "decode", "server_error"]

import enum
import json
import logging
from typing import Any

from waterfalls_client.exceptions import DecodeError, ServerError, TransactionNotFoundError
from waterfalls_client.models import BlockHeader, Tx, WaterfallsResponse
from waterfalls_client.validation import validate_hex_hash

logger: logging.Logger = logging.getLogger(__name__)


class ResponseShape(enum.Enum):
    """Expected structure of a successful response body."""

    WATERFALLS = "waterfalls"
    RAW_TRANSACTION = "raw transaction"
    HEX_HEADER = "hex header"
    BLOCK_HASH = "block hash"
    TEXT = "text"
    TRANSACTIONS = "transactions"
    EMPTY = "empty"


class NotFound(enum.Enum):
    """What a 404 response means for a given call."""

    ERROR = "error"
    NONE = "none"
    TRANSACTION = "transaction"


def _text(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"body is not valid UTF-8 ({exc.reason})"
        raise ValueError(msg) from None


def _json(content: bytes) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        msg = f"body is not valid JSON ({exc.msg})"
        raise ValueError(msg) from None


def _decode_transactions(content: bytes) -> list[Tx]:
    data = _json(content)
    if not isinstance(data, list):
        msg = f"expected a JSON array, got {type(data).__name__}"
        raise ValueError(msg)
    return [Tx.from_json(item) for item in data]


def _decode_header(content: bytes) -> BlockHeader:
    try:
        raw = bytes.fromhex(_text(content).strip())
    except ValueError:
        msg = "body is not valid hex"
        raise ValueError(msg) from None
    return BlockHeader.from_bytes(raw)


def _decode_raw_transaction(content: bytes) -> bytes:
    if not content:
        msg = "empty body"
        raise ValueError(msg)
    return content


def _decode_empty(content: bytes) -> None:  # noqa: ARG001
    return None


_DECODERS = {
    ResponseShape.WATERFALLS: lambda content: WaterfallsResponse.from_json(_json(content)),
    ResponseShape.RAW_TRANSACTION: _decode_raw_transaction,
    ResponseShape.HEX_HEADER: _decode_header,
    ResponseShape.BLOCK_HASH: lambda content: validate_hex_hash(_text(content).strip(), "body"),
    ResponseShape.TEXT: _text,
    ResponseShape.TRANSACTIONS: _decode_transactions,
    ResponseShape.EMPTY: _decode_empty,
}


def server_error(status_code: int, content: bytes) -> ServerError:
    """Build the error for a non-2xx response, keeping the server message."""
    message = content.decode("utf-8", errors="replace").strip()
    return ServerError(status_code, message)


def decode(
    status_code: int,
    content: bytes,
    shape: ResponseShape,
    *,
    not_found: NotFound = NotFound.ERROR,
    subject: str = "",
) -> Any:
    """Decode one response.

    Args:
        status_code: The HTTP status code.
        content: The raw response body.
        shape: The expected shape of a successful body.
        not_found: How to treat a 404 response.
        subject: Identifier of the looked-up object (e.g. the txid), used
            for ``NotFound.TRANSACTION``.

    Returns:
        The decoded value, or ``None`` for a 404 with ``NotFound.NONE``.

    Raises:
        ServerError: For a non-2xx status code.
        DecodeError: If a 2xx body does not match ``shape``.

    Example:
        ```pycon
        >>> from waterfalls_client.decoder import ResponseShape, decode
        >>> decode(200, b"v1.2 ok", ResponseShape.TEXT)
        'v1.2 ok'

        ```
    """
    if status_code == 404 and not_found is NotFound.NONE:
        return None
    if status_code == 404 and not_found is NotFound.TRANSACTION:
        raise TransactionNotFoundError(subject)
    if not 200 <= status_code < 300:
        raise server_error(status_code, content)
    try:
        return _DECODERS[shape](content)
    except ValueError as exc:
        logger.debug(f"Failed to decode {shape.value} response: {exc}")
        raise DecodeError(shape.value, str(exc)) from exc
