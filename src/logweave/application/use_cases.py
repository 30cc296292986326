from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..domain.lifecycle import aggregate_lifecycles
from ..domain.models import HTXAssigned, OperatorActivity
from ..domain.value_types import Address
from ..ports.indexer import IndexerClient
from .contracts import ContractRegistry
from .queries import (
    get_htx_assignments, get_htx_responses, get_operator_deactivation,
    get_operator_registration,
)
from .validation import check_address, check_limit

logger = logging.getLogger(__name__)


async def load_operator_activity(
    *,
    indexer: IndexerClient,
    contracts: ContractRegistry,
    operator: str,
    limit: int = 10,
) -> OperatorActivity:
    """
    Dependent-query pass for one operator.

    1) discovery: the operator's registration; a failure here aborts the pass
    2) its block becomes the lower bound of every later query (nothing the
       operator did can predate its registration); no registration -> unbounded
    3) deactivation, HTX assignments and HTX responses run concurrently; a
       failing query is recorded in `errors` and the others are still used
    4) assignments and responses are joined by htxId into lifecycles
    """
    check_address(operator, "operator address")
    check_limit(limit)

    registrations = await get_operator_registration(indexer, contracts, operator)
    registration = registrations[0] if registrations else None
    starting_block = registration.block_number if registration is not None else None
    if registration is None:
        logger.info("no registration found for %s; dependent queries run unbounded", operator)
    else:
        logger.info("operator %s registered at block %d", operator, starting_block)

    names = ("deactivation", "htx_assignments", "htx_responses")
    results = await asyncio.gather(
        get_operator_deactivation(indexer, contracts, operator, starting_block),
        get_htx_assignments(indexer, contracts, operator, starting_block, limit),
        get_htx_responses(indexer, contracts, operator, starting_block, limit),
        return_exceptions=True,
    )

    values: dict[str, list[Any]] = {}
    errors: dict[str, Exception] = {}
    for name, res in zip(names, results):
        if isinstance(res, BaseException):
            if not isinstance(res, Exception):
                raise res
            logger.warning("%s query failed for %s: %s", name, operator, res)
            errors[name] = res
            values[name] = []
        else:
            values[name] = res

    lifecycles = aggregate_lifecycles(
        values["htx_assignments"], values["htx_responses"],
        synthesize=HTXAssigned.from_response, limit=limit,
    )
    logger.info("operator %s: %d lifecycles (%d assignments, %d responses, %d failed queries)",
                operator, len(lifecycles), len(values["htx_assignments"]),
                len(values["htx_responses"]), len(errors))

    deactivations = values["deactivation"]
    return OperatorActivity(
        operator=Address(operator.lower()),
        registration=registration,
        deactivation=deactivations[0] if deactivations else None,
        lifecycles=tuple(lifecycles),
        starting_block=starting_block,
        errors=errors,
    )
