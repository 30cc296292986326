# logweave/ports/indexer.py
from __future__ import annotations

from typing import Any, Protocol
from ..domain.query import FilterQuery

RawEventRow = dict[str, Any]


class IndexerClient(Protocol):
    """Port defining the contract for the hosted log-indexing service."""

    async def execute(self, query: FilterQuery) -> list[RawEventRow]:
        """Run one query; return rows keyed by column name, in service order. Empty list is a valid answer."""
