from __future__ import annotations
from dataclasses import dataclass

from ..config import Settings
from ..domain.errors import ConfigurationError
from ..domain.models import ContractConfig


def validate_contract_config(config: ContractConfig) -> None:
    """Every query must be scoped to one contract; never scan the whole chain."""
    if not config.contract_address or not config.contract_address.strip():
        raise ConfigurationError(
            f"Contract address is required for {config.contract_name} events. "
            "Never query without specifying a contract!"
        )


@dataclass(slots=True, frozen=True)
class ContractRegistry:
    staking_operators: ContractConfig   # OperatorRegistered, StakedTo, Unstaked, ...
    heartbeat_manager: ContractConfig   # HEARTBEAT_MANAGER_EVENTS; configured but no named query reads it yet
    nilav_router: ContractConfig        # HTXSubmitted, HTXAssigned, HTXResponded

    @classmethod
    def from_settings(cls, s: Settings) -> "ContractRegistry":
        return cls(
            staking_operators=ContractConfig(s.chain_id, s.staking_operators_address, "StakingOperators"),
            heartbeat_manager=ContractConfig(s.chain_id, s.heartbeat_manager_address, "HeartbeatManager"),
            nilav_router=ContractConfig(s.chain_id, s.nilav_router_address, "NilAVRouter"),
        )
