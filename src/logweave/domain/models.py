from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, ClassVar

from .value_types import Address, EventKind, LifecycleStatus

# ---------- signatures --------------------------------------------------------

@dataclass(slots=True, frozen=True)
class EventParam:
    type: str
    indexed: bool = False
    name: str | None = None

@dataclass(slots=True, frozen=True)
class EventSignature:
    name: str
    params: tuple[EventParam, ...]

    @property
    def canonical(self) -> str:
        return f"{self.name}({','.join(p.type for p in self.params)})"

    def indexed_params(self) -> tuple[EventParam, ...]:
        return tuple(p for p in self.params if p.indexed)

    def data_params(self) -> tuple[EventParam, ...]:
        return tuple(p for p in self.params if not p.indexed)

# ---------- query inputs ------------------------------------------------------

@dataclass(slots=True, frozen=True)
class ContractConfig:
    chain_id: int
    contract_address: str
    contract_name: str

@dataclass(slots=True, frozen=True)
class QueryOptions:
    select_columns: tuple[str, ...] | None = None
    starting_block: int | None = None
    order_by: str = "block_num DESC"
    limit: int = 50
    signatures: tuple[str, ...] = ()

# ---------- decoded events (tagged by `kind`) ---------------------------------

@dataclass(slots=True, frozen=True)
class BlockchainEvent:
    block_number: int
    block_timestamp: str          # normalized ISO-8601, or "" when the raw value was unusable
    tx_hash: str

    kind: ClassVar[EventKind]

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}

@dataclass(slots=True, frozen=True)
class OperatorRegistered(BlockchainEvent):
    operator: Address
    metadata_uri: str | None = None
    kind: ClassVar[EventKind] = "OperatorRegistered"

@dataclass(slots=True, frozen=True)
class OperatorDeactivated(BlockchainEvent):
    operator: Address
    kind: ClassVar[EventKind] = "OperatorDeactivated"

@dataclass(slots=True, frozen=True)
class HTXAssigned(BlockchainEvent):
    htx_id: str
    node: Address
    kind: ClassVar[EventKind] = "HTXAssigned"

    @property
    def correlation_key(self) -> str: return self.htx_id

    @classmethod
    def from_response(cls, ev: "HTXResponded") -> "HTXAssigned":
        """Stand-in assignment for a response whose assignment was never observed."""
        return cls(block_number=ev.block_number, block_timestamp=ev.block_timestamp,
                   tx_hash=ev.tx_hash, htx_id=ev.htx_id, node=ev.node)

@dataclass(slots=True, frozen=True)
class HTXResponded(BlockchainEvent):
    htx_id: str
    node: Address
    result: bool
    kind: ClassVar[EventKind] = "HTXResponded"

    @property
    def correlation_key(self) -> str: return self.htx_id

@dataclass(slots=True, frozen=True)
class StakedTo(BlockchainEvent):
    staker: Address
    operator: Address
    amount: int | None = None
    kind: ClassVar[EventKind] = "StakedTo"

DecodedEvent = OperatorRegistered | OperatorDeactivated | HTXAssigned | HTXResponded | StakedTo

# ---------- lifecycles --------------------------------------------------------

@dataclass(slots=True, frozen=True)
class Lifecycle:
    correlation_key: str
    initiating: BlockchainEvent
    concluding: BlockchainEvent | None = None

    @property
    def status(self) -> LifecycleStatus:
        return "pending" if self.concluding is None else "concluded"

    def to_dict(self) -> dict[str, Any]:
        return {
            "correlation_key": self.correlation_key,
            "status": self.status,
            "initiating": self.initiating.to_dict(),
            "concluding": None if self.concluding is None else self.concluding.to_dict(),
        }

@dataclass(slots=True, frozen=True)
class OperatorActivity:
    operator: Address
    registration: OperatorRegistered | None
    deactivation: OperatorDeactivated | None
    lifecycles: tuple[Lifecycle, ...]
    starting_block: int | None
    errors: dict[str, Exception]
