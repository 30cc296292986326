from __future__ import annotations

import logging
import re
from typing import Any, Callable, Iterable, Mapping, Sequence

from .addresses import strip_address_padding
from .errors import DecodeError
from .models import (
    DecodedEvent, HTXAssigned, HTXResponded, OperatorDeactivated,
    OperatorRegistered, StakedTo,
)
from .timestamps import normalize_timestamp
from .value_types import Address, EventKind

logger = logging.getLogger(__name__)

_INT_RE   = re.compile(r"^(u?)int(\d*)$")
_BYTES_RE = re.compile(r"^bytes(\d+)$")
_ARRAY_RE = re.compile(r"^(.+)\[([1-9]\d*)?\]$")  # T[] or T[k], k >= 1
_HEX_RE   = re.compile(r"^[0-9a-fA-F]*$")

# ---------- hex helpers -------------------------------------------------------

def _strip_0x(s: str) -> str:
    return s[2:] if s[:2].lower() == "0x" else s

def _hexstr_to_bytes(v: str | bytes | None) -> bytes:
    if v is None:
        return b""
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v)
    h = _strip_0x(v.strip())
    if not _HEX_RE.match(h):
        raise DecodeError(f"Not a hex string: {v!r}", value=v)
    if len(h) % 2: h = "0" + h
    return bytes.fromhex(h)

def _topic_hex(word: str) -> str:
    """Topic word as 64 lowercase hex chars, NO '0x'."""
    if not isinstance(word, str):
        raise DecodeError(f"Topic must be a hex string, got {type(word).__name__}", value=word)
    h = _strip_0x(word.strip()).lower()
    if len(h) != 64 or not _HEX_RE.match(h):
        raise DecodeError(f"Topic is not a 32-byte hex word: {word!r}", value=word)
    return h

# --------- 32B word slicing (no eth_abi) --------------------------------------

def _word(b: bytes, i: int) -> bytes:
    w = b[i*32:(i+1)*32]
    if len(w) != 32:
        raise DecodeError(f"Data too short: word {i} needs {(i+1)*32} bytes, have {len(b)}")
    return w

def _u256(w: bytes) -> int:
    return int.from_bytes(w, "big")

def _bits(typ: str, m: re.Match) -> int:
    bits = int(m.group(2) or 256)
    if bits % 8 or not 8 <= bits <= 256:
        raise DecodeError(f"Unsupported integer type: {typ}")
    return bits

def _bool_from_hex(h: str) -> bool:
    # Parity of the trailing hex digit: ...01 is true, ...00 is false.
    # Not a full integer decode; a word like ...03 also reads as true.
    return bool(h) and int(h[-1], 16) % 2 == 1

def _is_dynamic(typ: str) -> bool:
    if typ in ("string", "bytes"):
        return True
    m = _ARRAY_RE.match(typ)
    return bool(m) and (m.group(2) is None or _is_dynamic(m.group(1)))

def _decode_static_word(w: bytes, typ: str) -> Any:
    if typ == "address":
        return strip_address_padding(w.hex())
    if typ == "bool":
        return _bool_from_hex(w.hex())
    m = _INT_RE.match(typ)
    if m:
        nbytes = _bits(typ, m) // 8
        return int.from_bytes(w[-nbytes:], "big", signed=(m.group(1) == ""))
    m = _BYTES_RE.match(typ)
    if m and 1 <= int(m.group(1)) <= 32:
        return "0x" + w[:int(m.group(1))].hex()
    raise DecodeError(f"Unsupported static type: {typ}")

def _decode_at(b: bytes, head_index: int, typ: str, base: int = 0) -> tuple[Any, int]:
    """Decode one value whose head starts at word `head_index` of b[base:]; returns (value, words used)."""
    body = b[base:]
    if _is_dynamic(typ):
        offset = _u256(_word(body, head_index))
        return _decode_tail(body, offset, typ), 1
    m = _ARRAY_RE.match(typ)
    if m:
        inner, n = m.group(1), int(m.group(2))
        out, used = [], 0
        for _ in range(n):
            v, u = _decode_at(body, head_index + used, inner)
            out.append(v); used += u
        return tuple(out), used
    return _decode_static_word(_word(body, head_index), typ), 1

def _decode_tail(b: bytes, offset: int, typ: str) -> Any:
    if offset % 32 or offset + 32 > len(b):
        raise DecodeError(f"Bad offset {offset} for dynamic {typ} (data is {len(b)} bytes)")
    length = _u256(b[offset:offset+32])
    start = offset + 32
    if typ in ("string", "bytes"):
        if start + length > len(b):
            raise DecodeError(f"Dynamic {typ} overruns data ({start + length} > {len(b)})")
        raw = b[start:start+length]
        return raw.decode("utf-8", errors="replace") if typ == "string" else "0x" + raw.hex()
    m = _ARRAY_RE.match(typ)
    inner = m.group(1) if m else typ
    if m and m.group(2):
        # fixed-size array of dynamic elements: no length prefix
        length, start = int(m.group(2)), offset
    # every element takes at least one head word
    if length > (len(b) - start) // 32:
        raise DecodeError(f"Array length {length} overruns data for {typ} ({len(b)} bytes)")
    out, used = [], 0
    for _ in range(length):
        v, u = _decode_at(b, used, inner, base=start)
        out.append(v); used += u
    return tuple(out)

# ---------------------------- public API --------------------------------------

def decode_topic(word: str, typ: str) -> Any:
    """Decode one indexed parameter from its 32-byte topic word."""
    h = _topic_hex(word)
    if typ == "address":
        return strip_address_padding(h)
    if typ == "bool":
        return _bool_from_hex(h)
    if _is_dynamic(typ) or _ARRAY_RE.match(typ):
        # indexed reference types are stored as their keccak hash
        return "0x" + h
    return _decode_static_word(bytes.fromhex(h), typ)

def decode_data(blob: str | bytes | None, types: Sequence[str]) -> tuple[Any, ...]:
    """Decode non-indexed fields from the data payload in declaration order."""
    b = _hexstr_to_bytes(blob)
    out: list[Any] = []
    head = 0
    for typ in types:
        v, used = _decode_at(b, head, typ)
        out.append(v)
        head += used
    return tuple(out)

# ---------- row decoders (one per event kind) ---------------------------------

Row = Mapping[str, Any]
Defaults = Mapping[str, str]

def _col(row: Row, name: str) -> Any:
    # the indexer may fold aliases to lowercase (htxId -> htxid)
    if name in row:
        return row[name]
    return row.get(name.lower())

def _required_topic(row: Row, name: str, typ: str) -> Any:
    v = _col(row, name)
    if v is None or v == "":
        raise DecodeError(f"Missing column {name!r}", column=name)
    try:
        return decode_topic(v, typ)
    except DecodeError as e:
        raise DecodeError(f"Column {name!r}: {e}", column=name, value=v) from e

def _address_or_default(row: Row, name: str, defaults: Defaults | None) -> Address:
    v = _col(row, name)
    if isinstance(v, str) and v.strip():
        return strip_address_padding(v)
    if defaults and defaults.get(name):
        return Address(defaults[name].lower())
    raise DecodeError(f"Missing column {name!r}", column=name)

def _meta(row: Row) -> dict[str, Any]:
    bn = _col(row, "block_num")
    try:
        block_number = int(bn, 16) if isinstance(bn, str) and bn[:2].lower() == "0x" else int(bn)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Bad block_num {bn!r}", column="block_num", value=bn) from e
    tx = _col(row, "tx_hash")
    return {
        "block_number": block_number,
        "block_timestamp": normalize_timestamp(_col(row, "block_timestamp")),
        "tx_hash": tx.lower() if isinstance(tx, str) else "",
    }

def _optional_data(row: Row, types: Sequence[str]) -> tuple[Any, ...] | None:
    data = _col(row, "data")
    if not isinstance(data, str) or not _strip_0x(data.strip()):
        return None
    try:
        return decode_data(data, types)
    except DecodeError as e:
        logger.debug("optional data field left empty (tx=%s): %s", _col(row, "tx_hash"), e)
        return None

def _operator_registered(row: Row, defaults: Defaults | None) -> OperatorRegistered:
    decoded = _optional_data(row, ["string"])
    return OperatorRegistered(
        **_meta(row),
        operator=_address_or_default(row, "operator", defaults),
        metadata_uri=decoded[0] if decoded else None,
    )

def _operator_deactivated(row: Row, defaults: Defaults | None) -> OperatorDeactivated:
    return OperatorDeactivated(**_meta(row), operator=_address_or_default(row, "operator", defaults))

def _htx_assigned(row: Row, defaults: Defaults | None) -> HTXAssigned:
    return HTXAssigned(
        **_meta(row),
        htx_id=_required_topic(row, "htxId", "bytes32"),
        node=_address_or_default(row, "node", defaults),
    )

def _result_flag(row: Row) -> bool:
    data = _col(row, "data")
    if not isinstance(data, str):
        return False
    h = _strip_0x(data.strip())
    if not _HEX_RE.match(h):
        raise DecodeError(f"Column 'data' is not hex: {data!r}", column="data", value=data)
    return _bool_from_hex(h)

def _htx_responded(row: Row, defaults: Defaults | None) -> HTXResponded:
    return HTXResponded(
        **_meta(row),
        htx_id=_required_topic(row, "htxId", "bytes32"),
        node=_address_or_default(row, "node", defaults),
        result=_result_flag(row),
    )

def _staked_to(row: Row, defaults: Defaults | None) -> StakedTo:
    decoded = _optional_data(row, ["uint256"])
    return StakedTo(
        **_meta(row),
        staker=_address_or_default(row, "staker", defaults),
        operator=_address_or_default(row, "operator", defaults),
        amount=decoded[0] if decoded else None,
    )

ROW_DECODERS: dict[EventKind, Callable[[Row, Defaults | None], DecodedEvent]] = {
    "OperatorRegistered":  _operator_registered,
    "OperatorDeactivated": _operator_deactivated,
    "HTXAssigned":         _htx_assigned,
    "HTXResponded":        _htx_responded,
    "StakedTo":            _staked_to,
}

def decode_row(kind: EventKind, row: Row, defaults: Defaults | None = None) -> DecodedEvent:
    """Turn one raw indexer row into a typed event. Raises DecodeError on unusable rows."""
    try:
        decoder = ROW_DECODERS[kind]
    except KeyError:
        raise DecodeError(f"No row decoder for event kind {kind!r}")
    if not isinstance(row, Mapping):
        raise DecodeError(f"Row must be a mapping, got {type(row).__name__}", value=row)
    return decoder(row, defaults)

def decode_rows(kind: EventKind, rows: Iterable[Row], defaults: Defaults | None = None) -> list[DecodedEvent]:
    """Decode many rows; a row that fails to decode is logged and skipped."""
    out: list[DecodedEvent] = []
    skipped = 0
    for row in rows:
        try:
            out.append(decode_row(kind, row, defaults))
        except DecodeError as e:
            skipped += 1
            logger.warning("skipping %s row (tx=%s): %s", kind,
                           _col(row, "tx_hash") if isinstance(row, Mapping) else None, e)
    if skipped:
        logger.info("decoded %d %s rows, skipped %d", len(out), kind, skipped)
    return out
