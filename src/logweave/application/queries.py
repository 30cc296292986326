from __future__ import annotations

from typing import cast

from ..domain.decoding import decode_rows
from ..domain.models import (
    ContractConfig, HTXAssigned, HTXResponded, OperatorDeactivated,
    OperatorRegistered, QueryOptions, StakedTo,
)
from ..domain.query import FilterQuery
from ..domain.signatures import NILAV_ROUTER_EVENTS, STAKING_EVENTS
from ..ports.indexer import IndexerClient
from .contracts import ContractRegistry
from .query_builder import DEFAULT_COLUMNS, build_event_query, topic_column
from .validation import check_address, check_from_block, check_limit

# Topic layout (0-based positions, 0 = signature hash):
#   OperatorRegistered / OperatorDeactivated: 1 = operator
#   StakedTo:                                 1 = staker, 2 = operator
#   HTXAssigned / HTXResponded:               1 = htxId,  2 = node

def operator_event_query(
    contract: ContractConfig, event: str, operator: str, *,
    from_block: int | None = None, limit: int = 1, with_data: bool = False,
) -> FilterQuery:
    cols = (topic_column(1, "operator"),) + (("data",) if with_data else ()) + DEFAULT_COLUMNS
    return build_event_query(
        contract, STAKING_EVENTS[event], {1: operator},
        QueryOptions(select_columns=cols, starting_block=from_block, limit=limit),
    )


def htx_event_query(
    contract: ContractConfig, event: str, node: str, *,
    from_block: int | None = None, limit: int = 10, with_data: bool = False,
) -> FilterQuery:
    cols = (topic_column(1, "htxId"), topic_column(2, "node")) + (("data",) if with_data else ()) + DEFAULT_COLUMNS
    return build_event_query(
        contract, NILAV_ROUTER_EVENTS[event], {2: node},
        QueryOptions(select_columns=cols, starting_block=from_block, limit=limit),
    )


def staker_event_query(
    contract: ContractConfig, staker: str, *, from_block: int | None = None, limit: int = 10,
) -> FilterQuery:
    cols = (topic_column(1, "staker"), topic_column(2, "operator"), "data") + DEFAULT_COLUMNS
    return build_event_query(
        contract, STAKING_EVENTS["StakedTo"], {1: staker},
        QueryOptions(select_columns=cols, starting_block=from_block, limit=limit),
    )

# ---------- query + decode ----------------------------------------------------

async def get_operator_registration(
    indexer: IndexerClient, contracts: ContractRegistry, operator: str,
) -> list[OperatorRegistered]:
    """Most recent OperatorRegistered event for `operator` (at most one)."""
    check_address(operator, "operator address")
    q = operator_event_query(contracts.staking_operators, "OperatorRegistered", operator, with_data=True)
    rows = await indexer.execute(q)
    return cast(list[OperatorRegistered], decode_rows("OperatorRegistered", rows, {"operator": operator}))


async def get_operator_deactivation(
    indexer: IndexerClient, contracts: ContractRegistry, operator: str, from_block: int | None = None,
) -> list[OperatorDeactivated]:
    check_address(operator, "operator address")
    check_from_block(from_block)
    q = operator_event_query(contracts.staking_operators, "OperatorDeactivated", operator, from_block=from_block)
    rows = await indexer.execute(q)
    return cast(list[OperatorDeactivated], decode_rows("OperatorDeactivated", rows, {"operator": operator}))


async def get_htx_assignments(
    indexer: IndexerClient, contracts: ContractRegistry, node: str,
    from_block: int | None = None, limit: int | None = None,
) -> list[HTXAssigned]:
    check_address(node, "node address")
    check_from_block(from_block)
    q = htx_event_query(contracts.nilav_router, "HTXAssigned", node,
                        from_block=from_block, limit=check_limit(limit) or 10)
    rows = await indexer.execute(q)
    return cast(list[HTXAssigned], decode_rows("HTXAssigned", rows, {"node": node}))


async def get_htx_responses(
    indexer: IndexerClient, contracts: ContractRegistry, node: str,
    from_block: int | None = None, limit: int | None = None,
) -> list[HTXResponded]:
    check_address(node, "node address")
    check_from_block(from_block)
    q = htx_event_query(contracts.nilav_router, "HTXResponded", node,
                        from_block=from_block, limit=check_limit(limit) or 10, with_data=True)
    rows = await indexer.execute(q)
    return cast(list[HTXResponded], decode_rows("HTXResponded", rows, {"node": node}))


async def get_staked_events(
    indexer: IndexerClient, contracts: ContractRegistry, staker: str,
    from_block: int | None = None, limit: int | None = None,
) -> list[StakedTo]:
    """StakedTo events sent by a wallet; shows which operators it has staked to."""
    check_address(staker, "staker address")
    check_from_block(from_block)
    q = staker_event_query(contracts.staking_operators, staker,
                           from_block=from_block, limit=check_limit(limit) or 10)
    rows = await indexer.execute(q)
    return cast(list[StakedTo], decode_rows("StakedTo", rows, {"staker": staker}))
