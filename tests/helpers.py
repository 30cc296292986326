from __future__ import annotations

from typing import Any

from logweave.application.contracts import ContractRegistry
from logweave.domain.addresses import pad_address
from logweave.domain.errors import TransportError
from logweave.domain.models import ContractConfig, HTXAssigned, HTXResponded
from logweave.domain.query import FilterQuery
from logweave.domain.signatures import ALL_EVENTS, signature_hash

CHAIN_ID = 84532
STAKING = "0x63167bed28912cde2c7b8bc5b6bb1f8b41b22f46"
HEARTBEAT = "0x1111111111111111111111111111111111111111"
ROUTER = "0x2222222222222222222222222222222222222222"
OPERATOR = "0x0c57cb3432f3a493ecf3f465260139a2edbc753d"
TS_RAW = "2025-12-16 2:01:12.0 +00:00:00"
TS_NORM = "2025-12-16T02:01:12.0+00:00"

CONTRACTS = ContractRegistry(
    staking_operators=ContractConfig(CHAIN_ID, STAKING, "StakingOperators"),
    heartbeat_manager=ContractConfig(CHAIN_ID, HEARTBEAT, "HeartbeatManager"),
    nilav_router=ContractConfig(CHAIN_ID, ROUTER, "NilAVRouter"),
)

EVENT_BY_HASH = {signature_hash(sig): name for name, sig in ALL_EVENTS.items()}


def word(n: int) -> str:
    return n.to_bytes(32, "big").hex()


def key(n: int) -> str:
    return "0x" + word(n)


def encode_string(s: str) -> str:
    raw = s.encode()
    padded = raw.hex().ljust(((len(raw) + 31) // 32) * 64, "0")
    return "0x" + word(32) + word(len(raw)) + padded


def assigned(k: str, block: int, node: str = OPERATOR) -> HTXAssigned:
    return HTXAssigned(block_number=block, block_timestamp=TS_NORM, tx_hash=f"0x{block:064x}", htx_id=k, node=node)


def responded(k: str, block: int, result: bool = True, node: str = OPERATOR) -> HTXResponded:
    return HTXResponded(block_number=block, block_timestamp=TS_NORM, tx_hash=f"0x{block:064x}",
                        htx_id=k, node=node, result=result)


def assigned_row(k: str, block: int, node: str = OPERATOR) -> dict[str, Any]:
    return {"htxId": k, "node": pad_address(node), "block_num": block,
            "block_timestamp": TS_RAW, "tx_hash": f"0x{block:064X}"}


def responded_row(k: str, block: int, result: bool = True, node: str = OPERATOR) -> dict[str, Any]:
    return {"htxId": k, "node": pad_address(node), "data": "0x" + word(1 if result else 0),
            "block_num": block, "block_timestamp": TS_RAW, "tx_hash": f"0x{block:064x}"}


def registration_row(block: int, operator: str = OPERATOR, uri: str = "ipfs://node") -> dict[str, Any]:
    return {"operator": pad_address(operator), "data": encode_string(uri), "block_num": block,
            "block_timestamp": TS_RAW, "tx_hash": f"0x{block:064x}"}


class FakeIndexer:
    """
    Serves canned rows per event name and applies the query's block bound,
    ordering and limit the way the hosted service would.
    """

    def __init__(self, rows: dict[str, list[dict[str, Any]]] | None = None,
                 failures: dict[str, Exception] | None = None) -> None:
        self.rows = rows or {}
        self.failures = failures or {}
        self.queries: list[FilterQuery] = []

    def queries_for(self, event: str) -> list[FilterQuery]:
        return [q for q in self.queries if EVENT_BY_HASH.get(q.topic(0)) == event]

    async def execute(self, query: FilterQuery) -> list[dict[str, Any]]:
        self.queries.append(query)
        event = EVENT_BY_HASH[query.topic(0)]
        if event in self.failures:
            raise self.failures[event]
        rows = list(self.rows.get(event, []))
        if query.starting_block is not None:
            rows = [r for r in rows if r["block_num"] >= query.starting_block]
        rows.sort(key=lambda r: r["block_num"], reverse=query.order_by.endswith("DESC"))
        return rows[:query.limit]


def transport_failure(status: int = 503) -> TransportError:
    return TransportError(f"Indexer query failed ({status}): unavailable", status_code=status, body="unavailable")
