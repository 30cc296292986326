from __future__ import annotations

import re
from typing import Any, Mapping

from eth_utils import keccak

from .errors import FormatError
from .models import EventParam, EventSignature
from .value_types import EventSignatureHash

# Human-authored signatures: EventName(type1 indexed param1, type2 param2, ...)

HEARTBEAT_MANAGER_EVENTS: dict[str, str] = {
    "HeartbeatEnqueued":      "HeartbeatEnqueued(bytes32 indexed heartbeatKey, bytes rawHTX, address indexed submitter)",
    "RoundStarted":           "RoundStarted(bytes32 indexed heartbeatKey, uint8 round, bytes32 committeeRoot, uint64 snapshotId, uint64 startedAt, uint64 deadline, address[] members, bytes rawHTX)",
    "OperatorVoted":          "OperatorVoted(bytes32 indexed heartbeatKey, uint8 round, address indexed operator, uint8 verdict, uint256 weight)",
    "RoundFinalized":         "RoundFinalized(bytes32 indexed heartbeatKey, uint8 round, uint8 outcome)",
    "HeartbeatStatusChanged": "HeartbeatStatusChanged(bytes32 indexed heartbeatKey, uint8 oldStatus, uint8 newStatus, uint8 round)",
}

NILAV_ROUTER_EVENTS: dict[str, str] = {
    "HTXSubmitted": "HTXSubmitted(bytes32 indexed htxId, bytes32 indexed rawHTXHash, address indexed sender)",
    "HTXAssigned":  "HTXAssigned(bytes32 indexed htxId, address indexed node)",
    "HTXResponded": "HTXResponded(bytes32 indexed htxId, address indexed node, bool result)",
}

STAKING_EVENTS: dict[str, str] = {
    "OperatorRegistered":  "OperatorRegistered(address indexed operator, string metadataURI)",
    "OperatorDeactivated": "OperatorDeactivated(address indexed operator)",
    "StakedTo":            "StakedTo(address indexed staker, address indexed operator, uint256 amount)",
    "Staked":              "Staked(address indexed operator, address indexed staker, uint256 amount)",
    "UnstakeRequested":    "UnstakeRequested(address indexed operator, address indexed staker, uint256 amount, uint256 releaseTime)",
    "Unstaked":            "Unstaked(address indexed operator, address indexed staker, uint256 amount)",
    "OperatorJailed":      "OperatorJailed(address indexed operator)",
    "OperatorUnjailed":    "OperatorUnjailed(address indexed operator)",
    "OperatorSlashed":     "OperatorSlashed(address indexed operator, uint256 amount)",
}

ALL_EVENTS: dict[str, str] = {**HEARTBEAT_MANAGER_EVENTS, **STAKING_EVENTS, **NILAV_ROUTER_EVENTS}

_SIG_RE   = re.compile(r"^(\w+)\((.*)\)$", re.DOTALL)
_TYPE_RE  = re.compile(r"^[a-z][a-z0-9]*(\[([1-9]\d*)?\])*$")
_IDENT_RE = re.compile(r"^[A-Za-z_]\w*$")
_HASH_RE  = re.compile(r"^0x[0-9a-fA-F]{64}$")


def _parse_param(raw: str, signature: str) -> EventParam:
    tokens = raw.split()
    if not tokens or not _TYPE_RE.match(tokens[0]):
        raise FormatError(f"Invalid parameter {raw!r} in event signature: {signature}")
    typ, rest = tokens[0], tokens[1:]
    indexed = bool(rest) and rest[0] == "indexed"
    if indexed:
        rest = rest[1:]
    if len(rest) > 1 or (rest and not _IDENT_RE.match(rest[0])):
        raise FormatError(f"Invalid parameter {raw!r} in event signature: {signature}")
    return EventParam(type=typ, indexed=indexed, name=rest[0] if rest else None)


def parse_signature(signature: str) -> EventSignature:
    if not isinstance(signature, str):
        raise FormatError(f"Event signature must be a string, got {type(signature).__name__}")
    m = _SIG_RE.match(signature.strip())
    if not m:
        raise FormatError(f"Invalid event signature format: {signature}")
    name, params_str = m.group(1), m.group(2)
    if not params_str.strip():
        return EventSignature(name=name, params=())
    params = tuple(_parse_param(p, signature) for p in params_str.split(","))
    return EventSignature(name=name, params=params)


def canonicalize(signature: str | EventSignature) -> str:
    """'Transfer(address indexed from, address indexed to, uint256 value)' -> 'Transfer(address,address,uint256)'"""
    sig = signature if isinstance(signature, EventSignature) else parse_signature(signature)
    return sig.canonical


def is_signature_hash(value: str) -> bool:
    return isinstance(value, str) and bool(_HASH_RE.match(value))


def signature_hash(signature: str | EventSignature) -> EventSignatureHash:
    """keccak256 of the canonical signature. A value that already is a 32-byte hash is returned as-is."""
    if isinstance(signature, str) and is_signature_hash(signature.strip()):
        return EventSignatureHash(signature.strip().lower())
    return EventSignatureHash("0x" + keccak(text=canonicalize(signature)).hex())


def signature_from_abi(entry: Mapping[str, Any]) -> EventSignature:
    if entry.get("type") != "event":
        raise FormatError('ABI entry must be of type "event"')
    name = entry.get("name")
    inputs = entry.get("inputs", [])
    if not isinstance(name, str) or not isinstance(inputs, list):
        raise FormatError("Invalid event ABI: missing name/inputs")
    params: list[EventParam] = []
    for inp in inputs:
        if not isinstance(inp, dict) or "type" not in inp:
            raise FormatError("Invalid event ABI inputs")
        params.append(EventParam(type=inp["type"], indexed=bool(inp.get("indexed")), name=inp.get("name") or None))
    return EventSignature(name=name, params=tuple(params))


def hash_from_abi(entry: Mapping[str, Any]) -> EventSignatureHash:
    return signature_hash(signature_from_abi(entry))
