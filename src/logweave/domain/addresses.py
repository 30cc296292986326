from __future__ import annotations

import re

from eth_utils import is_hex_address, to_checksum_address

from .errors import ConfigurationError
from .value_types import Address, TopicWord

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")


def _strip_0x(s: str) -> str:
    return s[2:] if s[:2].lower() == "0x" else s


def pad_address(address: str) -> TopicWord:
    """
    Left-zero-pad a 20-byte address into a 32-byte topic word.

    '0x0c57cb3432f3a493ecf3f465260139a2edbc753d'
      -> '0x0000000000000000000000000c57cb3432f3a493ecf3f465260139a2edbc753d'
    """
    return TopicWord("0x" + _strip_0x(address.strip().lower()).rjust(64, "0"))


def strip_address_padding(word: str) -> Address:
    """Last 20 bytes of a topic word. The leading 12 bytes are not checked."""
    return Address("0x" + _strip_0x(word.strip().lower())[-40:])


def is_hex_string(value: object) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value))


def normalize_address(address: str) -> str:
    """Checksummed form of a 20-byte address; ConfigurationError if it is not one."""
    if not is_hex_address(address):
        raise ConfigurationError(f"Invalid Ethereum address: {address}")
    return to_checksum_address(address)
