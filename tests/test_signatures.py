from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from logweave.domain.errors import FormatError
from logweave.domain.signatures import (
    ALL_EVENTS, canonicalize, hash_from_abi, is_signature_hash, parse_signature,
    signature_from_abi, signature_hash,
)

TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
APPROVAL_TOPIC = "0x8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"
MINT_V3_TOPIC = "0x7a53080ba414158be7ec69b987b5fb7d07dee101fe85488f0853ae16239d0bde"


def test_canonicalize_drops_names_and_indexed():
    sig = "Transfer(address indexed from, address indexed to, uint256 value)"
    assert canonicalize(sig) == "Transfer(address,address,uint256)"


def test_canonicalize_no_params():
    assert canonicalize("Paused()") == "Paused()"


@pytest.mark.parametrize("sig, topic", [
    ("Transfer(address indexed from, address indexed to, uint256 value)", TRANSFER_TOPIC),
    ("Transfer(address,address,uint256)", TRANSFER_TOPIC),
    ("Approval(address indexed owner, address indexed spender, uint256 value)", APPROVAL_TOPIC),
    ("Mint(address sender, address indexed owner, int24 indexed tickLower, int24 indexed tickUpper, "
     "uint128 amount, uint256 amount0, uint256 amount1)", MINT_V3_TOPIC),
])
def test_known_topic_hashes(sig, topic):
    assert signature_hash(sig) == topic


def test_existing_hash_passes_through_lowercased():
    assert signature_hash(TRANSFER_TOPIC.upper().replace("0X", "0x")) == TRANSFER_TOPIC


def test_hash_shape():
    h = signature_hash("OperatorDeactivated(address indexed operator)")
    assert is_signature_hash(h)
    assert h == h.lower()


types = st.sampled_from(["address", "uint256", "int24", "bool", "bytes32", "string", "bytes", "uint8[]", "address[3]"])
names = st.from_regex(r"\A[a-z][A-Za-z0-9_]{0,10}\Z").filter(lambda n: n != "indexed")


@given(st.lists(st.tuples(types, st.booleans(), names, st.booleans(), names), max_size=6))
def test_hash_ignores_names_and_indexed(params):
    a = ", ".join(f"{t}{' indexed' if i1 else ''} {n1}" for t, i1, n1, _, _ in params)
    b = ", ".join(f"{t}{' indexed' if i2 else ''} {n2}" for t, _, _, i2, n2 in params)
    bare = ",".join(t for t, *_ in params)
    assert signature_hash(f"Ev({a})") == signature_hash(f"Ev({b})") == signature_hash(f"Ev({bare})")


@pytest.mark.parametrize("bad", [
    "Transfer",
    "Transfer(address",
    "(address)",
    "Transfer(Address from)",
    "Transfer(address indexed from extra)",
    "Transfer(address,,uint256)",
    "Transfer(address 1from)",
])
def test_malformed_signatures_raise_format_error(bad):
    with pytest.raises(FormatError):
        signature_hash(bad)


def test_non_string_raises_format_error():
    with pytest.raises(FormatError):
        parse_signature(42)  # type: ignore[arg-type]


def test_parse_signature_keeps_param_details():
    sig = parse_signature("HTXResponded(bytes32 indexed htxId, address indexed node, bool result)")
    assert sig.name == "HTXResponded"
    assert [p.type for p in sig.indexed_params()] == ["bytes32", "address"]
    assert [p.name for p in sig.data_params()] == ["result"]


def test_catalogue_signatures_all_parse():
    for name, sig in ALL_EVENTS.items():
        assert canonicalize(sig).startswith(name + "(")


def test_abi_entry_hash_matches_text_signature():
    entry = {
        "type": "event",
        "name": "Transfer",
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    }
    assert signature_from_abi(entry).canonical == "Transfer(address,address,uint256)"
    assert hash_from_abi(entry) == TRANSFER_TOPIC


def test_abi_entry_must_be_event():
    with pytest.raises(FormatError):
        signature_from_abi({"type": "function", "name": "transfer", "inputs": []})


@pytest.mark.parametrize("bad", ["Ev(uint256[0] xs)", "Ev(uint256[0][] xs)", "Ev(address[00])"])
def test_zero_length_arrays_are_rejected(bad):
    with pytest.raises(FormatError):
        parse_signature(bad)
