from __future__ import annotations
import logging
import time
from typing import Any

import httpx

from ..domain.errors import TransportError
from ..domain.query import FilterQuery
from ..ports.indexer import IndexerClient, RawEventRow

logger = logging.getLogger(__name__)

DEFAULT_INDEXER_URL = "https://indexing.conduit.xyz/v2/query"


def flatten_tables(payload: Any) -> list[RawEventRow]:
    """
    The service answers with one table or a list of tables:
        {"columns": [{"name": ...}], "rows": [[...], ...]}
    Rows become dicts keyed by column name; order is kept within and across tables.
    Items that are not tables and rows that are not lists are ignored.
    """
    tables = payload if isinstance(payload, list) else [payload]
    out: list[RawEventRow] = []
    for t in tables:
        if not isinstance(t, dict):
            continue
        cols, rows = t.get("columns"), t.get("rows")
        if not isinstance(cols, list) or not isinstance(rows, list):
            continue
        names = [c.get("name") if isinstance(c, dict) else c for c in cols]
        for row in rows:
            if not isinstance(row, (list, tuple)):
                continue
            out.append(dict(zip(names, row)))
    return out


class HttpxIndexer(IndexerClient):
    """One GET per query, no retries; retry policy belongs to the caller."""

    def __init__(
        self,
        url: str = DEFAULT_INDEXER_URL,
        *,
        api_key: str | None = None,
        timeout_s: float = 20,
        http2: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._api_key = api_key
        self.client = httpx.AsyncClient(
            http2=http2,
            timeout=httpx.Timeout(timeout_s),
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "HttpxIndexer":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def _params(self, query: FilterQuery) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if self._api_key:
            params.append(("api-key", self._api_key))
        params.append(("query", query.render()))
        params += [("signatures", s) for s in query.signatures]
        return params

    async def execute(self, query: FilterQuery) -> list[RawEventRow]:
        t0 = time.perf_counter()
        try:
            r = await self.client.get(self.url, params=self._params(query))
        except httpx.HTTPError as e:
            logger.warning("indexer request failed: %s: %s", type(e).__name__, e)
            raise TransportError(f"Indexer request failed: {type(e).__name__}: {e}") from e

        if not r.is_success:
            body = r.text
            logger.warning("indexer query failed (%s): %s", r.status_code, body[:500])
            raise TransportError(
                f"Indexer query failed ({r.status_code}): {body}",
                status_code=r.status_code, body=body, response=r,
            )
        try:
            payload = r.json()
        except ValueError as e:
            raise TransportError(
                "Indexer returned a non-JSON body",
                status_code=r.status_code, body=r.text, response=r,
            ) from e

        try:
            rows = flatten_tables(payload)
        except (TypeError, AttributeError) as e:
            raise TransportError(
                f"Indexer returned an unexpected payload shape: {e}",
                status_code=r.status_code, body=r.text, response=r,
            ) from e
        logger.debug("indexer: %d rows in %.3fs (contract=%s, from_block=%s)",
                     len(rows), time.perf_counter() - t0, query.contract_address, query.starting_block)
        return rows

    async def ping(self, query: FilterQuery) -> bool:
        """True if `query` runs and returns at least one row; failures are logged, not raised."""
        try:
            return len(await self.execute(query)) > 0
        except TransportError as e:
            logger.error("indexer connection test failed: %s", e)
            return False
