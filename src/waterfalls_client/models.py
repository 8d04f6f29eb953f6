r"""Typed results returned by the Waterfalls clients.

The ``from_json`` constructors are strict: a missing required field or a
field of the wrong type raises ``ValueError``, which the response decoder
turns into a ``DecodeError``. Nothing is filled in with a default unless
the server is allowed to omit it.
"""

from __future__ import annotations

__all__ = [
    "BlockHeader",
    "BlockMeta",
    "BlockTime",
    "PrevOut",
    "Tx",
    "TxSeen",
    "TxStatus",
    "V",
    "VKind",
    "Vin",
    "Vout",
    "WaterfallsResponse",
]

import enum
import hashlib
import struct
from dataclasses import dataclass, field
from typing import Any

from waterfalls_client.validation import validate_hex_hash

HEADER_SIZE = 80
_HEADER_FORMAT = "<i32s32sIII"


def _field(data: Any, key: str, kind: type | tuple[type, ...], *, optional: bool = False) -> Any:
    if not isinstance(data, dict):
        msg = f"expected a JSON object, got {type(data).__name__}"
        raise ValueError(msg)
    if key not in data:
        if optional:
            return None
        msg = f"missing field {key!r}"
        raise ValueError(msg)
    value = data[key]
    if value is None and optional:
        return None
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) and bool not in (kind if isinstance(kind, tuple) else (kind,)):
        msg = f"field {key!r} must be {_kind_name(kind)}, got bool"
        raise ValueError(msg)
    if not isinstance(value, kind):
        msg = f"field {key!r} must be {_kind_name(kind)}, got {type(value).__name__}"
        raise ValueError(msg)
    return value


def _kind_name(kind: type | tuple[type, ...]) -> str:
    if isinstance(kind, tuple):
        return " or ".join(k.__name__ for k in kind)
    return kind.__name__


def _hash(data: Any, key: str, *, optional: bool = False) -> str | None:
    value = _field(data, key, str, optional=optional)
    if value is None:
        return None
    return validate_hex_hash(value, key)


def _hex_bytes(value: str, key: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        msg = f"field {key!r} is not valid hex"
        raise ValueError(msg) from None


def _list(data: Any, key: str) -> list[Any]:
    return _field(data, key, list)


class VKind(enum.Enum):
    UNDEFINED = "undefined"
    VIN = "vin"
    VOUT = "vout"


@dataclass(frozen=True)
class V:
    """Where a transaction touched a script: an input, an output, or unknown.

    On the wire this is a single integer: ``0`` is undefined, ``n > 0`` is
    output ``n`` and ``n < 0`` is input ``-n - 1``.

    Example:
        ```pycon
        >>> from waterfalls_client.models import V
        >>> V.vin(3).raw
        -4
        >>> V.from_raw(5)
        V(kind=<VKind.VOUT: 'vout'>, index=5)

        ```
    """

    kind: VKind = VKind.UNDEFINED
    index: int = 0

    @classmethod
    def vin(cls, index: int) -> V:
        return cls(VKind.VIN, index)

    @classmethod
    def vout(cls, index: int) -> V:
        return cls(VKind.VOUT, index)

    @classmethod
    def from_raw(cls, raw: int) -> V:
        if raw == 0:
            return cls()
        if raw > 0:
            return cls.vout(raw)
        return cls.vin(-raw - 1)

    @property
    def raw(self) -> int:
        if self.kind is VKind.VOUT:
            return self.index
        if self.kind is VKind.VIN:
            return -self.index - 1
        return 0

    @property
    def is_undefined(self) -> bool:
        return self.kind is VKind.UNDEFINED


@dataclass(frozen=True)
class BlockMeta:
    """Compact metadata of a block: hash ``b``, timestamp ``t`` and height ``h``."""

    b: str
    t: int
    h: int

    @classmethod
    def from_json(cls, data: Any) -> BlockMeta:
        return cls(b=_hash(data, "b"), t=_field(data, "t", int), h=_field(data, "h", int))


@dataclass(frozen=True)
class TxSeen:
    """A transaction seen for a script, as reported by the waterfalls endpoint."""

    txid: str
    height: int
    block_hash: str | None = None
    block_timestamp: int | None = None
    v: V = field(default_factory=V)

    @classmethod
    def from_json(cls, data: Any) -> TxSeen:
        raw_v = _field(data, "v", int, optional=True)
        return cls(
            txid=_hash(data, "txid"),
            height=_field(data, "height", int),
            block_hash=_hash(data, "block_hash", optional=True),
            block_timestamp=_field(data, "block_timestamp", int, optional=True),
            # the server omits v when it is undefined
            v=V() if raw_v is None else V.from_raw(raw_v),
        )


@dataclass(frozen=True)
class WaterfallsResponse:
    """Result of a descriptor or address query.

    ``txs_seen`` maps every descriptor (or the ``addresses`` key) to one
    list per derivation chain, each holding one list of ``TxSeen`` per
    script.
    """

    txs_seen: dict[str, list[list[TxSeen]]]
    page: int
    tip: str | None = None
    tip_meta: BlockMeta | None = None

    @classmethod
    def from_json(cls, data: Any) -> WaterfallsResponse:
        raw_seen = _field(data, "txs_seen", dict)
        txs_seen: dict[str, list[list[TxSeen]]] = {}
        for key, chains in raw_seen.items():
            if not isinstance(chains, list) or not all(isinstance(c, list) for c in chains):
                msg = f"txs_seen[{key!r}] must be a list of lists"
                raise ValueError(msg)
            txs_seen[key] = [[TxSeen.from_json(item) for item in chain] for chain in chains]
        tip_meta = _field(data, "tip_meta", dict, optional=True)
        return cls(
            txs_seen=txs_seen,
            page=_field(data, "page", int),
            tip=_hash(data, "tip", optional=True),
            tip_meta=None if tip_meta is None else BlockMeta.from_json(tip_meta),
        )

    def is_empty(self) -> bool:
        """``True`` if no script has any transaction."""
        return all(not chain for chains in self.txs_seen.values() for chain in chains)


@dataclass(frozen=True)
class BlockHeader:
    """A decoded 80-byte block header.

    Hashes are shown in the usual reversed-hex notation.
    """

    version: int
    prev_blockhash: str
    merkle_root: str
    time: int
    bits: int
    nonce: int

    @classmethod
    def from_bytes(cls, raw: bytes) -> BlockHeader:
        if len(raw) != HEADER_SIZE:
            msg = f"block header must be {HEADER_SIZE} bytes, got {len(raw)}"
            raise ValueError(msg)
        version, prev, merkle, time, bits, nonce = struct.unpack(_HEADER_FORMAT, raw)
        return cls(
            version=version,
            prev_blockhash=prev[::-1].hex(),
            merkle_root=merkle[::-1].hex(),
            time=time,
            bits=bits,
            nonce=nonce,
        )

    def to_bytes(self) -> bytes:
        return struct.pack(
            _HEADER_FORMAT,
            self.version,
            bytes.fromhex(self.prev_blockhash)[::-1],
            bytes.fromhex(self.merkle_root)[::-1],
            self.time,
            self.bits,
            self.nonce,
        )

    def block_hash(self) -> str:
        digest = hashlib.sha256(hashlib.sha256(self.to_bytes()).digest()).digest()
        return digest[::-1].hex()


@dataclass(frozen=True)
class PrevOut:
    value: int
    scriptpubkey: bytes

    @classmethod
    def from_json(cls, data: Any) -> PrevOut:
        return cls(
            value=_field(data, "value", int),
            scriptpubkey=_hex_bytes(_field(data, "scriptpubkey", str), "scriptpubkey"),
        )


@dataclass(frozen=True)
class Vout:
    value: int
    scriptpubkey: bytes

    @classmethod
    def from_json(cls, data: Any) -> Vout:
        return cls(
            value=_field(data, "value", int),
            scriptpubkey=_hex_bytes(_field(data, "scriptpubkey", str), "scriptpubkey"),
        )


@dataclass(frozen=True)
class Vin:
    txid: str
    vout: int
    # None for coinbase inputs
    prevout: PrevOut | None
    scriptsig: bytes
    witness: list[bytes]
    sequence: int
    is_coinbase: bool

    @classmethod
    def from_json(cls, data: Any) -> Vin:
        prevout = _field(data, "prevout", dict, optional=True)
        witness = _field(data, "witness", list, optional=True) or []
        if not all(isinstance(item, str) for item in witness):
            msg = "field 'witness' must be a list of hex strings"
            raise ValueError(msg)
        return cls(
            txid=_hash(data, "txid"),
            vout=_field(data, "vout", int),
            prevout=None if prevout is None else PrevOut.from_json(prevout),
            scriptsig=_hex_bytes(_field(data, "scriptsig", str), "scriptsig"),
            witness=[_hex_bytes(item, "witness") for item in witness],
            sequence=_field(data, "sequence", int),
            is_coinbase=_field(data, "is_coinbase", bool),
        )


@dataclass(frozen=True)
class TxStatus:
    confirmed: bool
    block_height: int | None = None
    block_hash: str | None = None
    block_time: int | None = None

    @classmethod
    def from_json(cls, data: Any) -> TxStatus:
        return cls(
            confirmed=_field(data, "confirmed", bool),
            block_height=_field(data, "block_height", int, optional=True),
            block_hash=_hash(data, "block_hash", optional=True),
            block_time=_field(data, "block_time", int, optional=True),
        )


@dataclass(frozen=True)
class BlockTime:
    timestamp: int
    height: int


@dataclass(frozen=True)
class Tx:
    """An Esplora-formatted transaction record."""

    txid: str
    version: int
    locktime: int
    vin: list[Vin]
    vout: list[Vout]
    # size in raw bytes, not virtual bytes
    size: int
    weight: int
    status: TxStatus
    fee: int

    @classmethod
    def from_json(cls, data: Any) -> Tx:
        return cls(
            txid=_hash(data, "txid"),
            version=_field(data, "version", int),
            locktime=_field(data, "locktime", int),
            vin=[Vin.from_json(item) for item in _list(data, "vin")],
            vout=[Vout.from_json(item) for item in _list(data, "vout")],
            size=_field(data, "size", int),
            weight=_field(data, "weight", int),
            status=TxStatus.from_json(_field(data, "status", dict)),
            fee=_field(data, "fee", int),
        )

    def confirmation_time(self) -> BlockTime | None:
        """Return the block time and height if the transaction is confirmed."""
        status = self.status
        if status.confirmed and status.block_height is not None and status.block_time is not None:
            return BlockTime(timestamp=status.block_time, height=status.block_height)
        return None

    def previous_outputs(self) -> list[Vout | None]:
        """Return the output spent by every input, ``None`` for coinbase inputs."""
        return [
            None if vin.prevout is None else Vout(vin.prevout.value, vin.prevout.scriptpubkey)
            for vin in self.vin
        ]
