from __future__ import annotations

import re
from typing import Mapping

from ..domain.addresses import is_hex_string, pad_address
from ..domain.errors import ConfigurationError
from ..domain.models import ContractConfig, EventSignature, QueryOptions
from ..domain.query import FilterQuery
from ..domain.signatures import signature_hash
from ..domain.value_types import TopicWord
from .contracts import validate_contract_config

MAX_LIMIT = 1000
MAX_TOPIC_POSITION = 3
DEFAULT_COLUMNS: tuple[str, ...] = ("block_num", "block_timestamp", "tx_hash")

_PLAIN_COLUMNS = {"address", "data", "block_num", "block_timestamp", "tx_hash", "log_index"}
_TOPIC_COL_RE = re.compile(r"^topics\[([1-4])\]\s+as\s+([A-Za-z_]\w*)$", re.IGNORECASE)
_ORDER_RE     = re.compile(r"^(block_num|block_timestamp|log_index)\s+(asc|desc)$", re.IGNORECASE)
_WORD_RE      = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


def topic_column(position: int, alias: str) -> str:
    """Select expression for the 0-based topic `position` (the service counts from 1)."""
    return f"topics[{position + 1}] as {alias}"


def _check_column(col: str) -> str:
    c = " ".join(col.split())
    if c.lower() in _PLAIN_COLUMNS:
        return c.lower()
    m = _TOPIC_COL_RE.match(c)
    if m:
        return f"topics[{m.group(1)}] as {m.group(2)}"
    raise ConfigurationError(f"Unsupported select column: {col!r}")


def _check_order(order_by: str) -> str:
    m = _ORDER_RE.match(" ".join(order_by.split()))
    if not m:
        raise ConfigurationError(f"Unsupported ORDER BY: {order_by!r}")
    return f"{m.group(1).lower()} {m.group(2).upper()}"


def _check_limit(limit: object) -> int:
    if not isinstance(limit, int) or isinstance(limit, bool) or not 1 <= limit <= MAX_LIMIT:
        raise ConfigurationError(f"Invalid limit value {limit!r} (must be between 1 and {MAX_LIMIT})")
    return limit


def _check_starting_block(block: object) -> int | None:
    if block is None:
        return None
    if not isinstance(block, int) or isinstance(block, bool) or block < 0:
        raise ConfigurationError(f"Invalid starting block {block!r}")
    return block


def _topic_constraints(constraints: Mapping[int, str]) -> list[tuple[int, TopicWord]]:
    out: list[tuple[int, TopicWord]] = []
    for pos, value in constraints.items():
        if pos == 0:
            raise ConfigurationError("Topic position 0 is reserved for the event signature hash")
        if not isinstance(pos, int) or isinstance(pos, bool) or not 1 <= pos <= MAX_TOPIC_POSITION:
            raise ConfigurationError(f"Invalid topic position {pos!r} (must be 1..{MAX_TOPIC_POSITION})")
        if not isinstance(value, str) or not _WORD_RE.match(value.strip()):
            raise ConfigurationError(f"Topic {pos} value must be a hex value of at most 32 bytes, got {value!r}")
        out.append((pos, pad_address(value)))
    return sorted(out)


def build_event_query(
    contract: ContractConfig,
    signature: str | EventSignature,
    constraints: Mapping[int, str] | None = None,
    options: QueryOptions | None = None,
) -> FilterQuery:
    """
    Build a FilterQuery for one event on one contract.

    `constraints` maps 0-based indexed-parameter positions (1..3) to values
    that are left-padded into their topic slot; addresses and bytes32 values
    both work. Raises ConfigurationError (FormatError for a bad signature)
    before any network call.
    """
    validate_contract_config(contract)
    if not is_hex_string(contract.contract_address.strip()):
        raise ConfigurationError(f"Invalid contract address: {contract.contract_address}")

    opts = options or QueryOptions()
    limit = _check_limit(opts.limit)
    starting_block = _check_starting_block(opts.starting_block)
    order_by = _check_order(opts.order_by)
    columns = tuple(_check_column(c) for c in (opts.select_columns or DEFAULT_COLUMNS))

    topics: list[tuple[int, TopicWord]] = [(0, TopicWord(signature_hash(signature)))]
    topics += _topic_constraints(constraints or {})

    return FilterQuery(
        chain_id=contract.chain_id,
        contract_address=contract.contract_address.strip().lower(),
        topic_constraints=tuple(topics),
        select_columns=columns,
        order_by=order_by,
        limit=limit,
        starting_block=starting_block,
        signatures=tuple(opts.signatures),
    )
