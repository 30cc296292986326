from __future__ import annotations

import re

from ..domain.errors import ConfigurationError
from .query_builder import MAX_LIMIT

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def check_address(address: object, what: str = "address") -> str:
    if not isinstance(address, str) or not _ADDRESS_RE.match(address):
        raise ConfigurationError(f"Invalid {what} format")
    return address


def check_from_block(from_block: object) -> int | None:
    if from_block is None:
        return None
    if not isinstance(from_block, int) or isinstance(from_block, bool) or from_block < 0:
        raise ConfigurationError("Invalid fromBlock value")
    return from_block


def check_limit(limit: object) -> int | None:
    if limit is None:
        return None
    if not isinstance(limit, int) or isinstance(limit, bool) or not 1 <= limit <= MAX_LIMIT:
        raise ConfigurationError(f"Invalid limit value (must be between 1 and {MAX_LIMIT})")
    return limit
