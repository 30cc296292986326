from __future__ import annotations
from dataclasses import dataclass

from .errors import ConfigurationError
from .value_types import TopicWord

LOG_TABLE = "logs"


@dataclass(slots=True, frozen=True)
class FilterQuery:
    """
    One structured query against the indexer's log table.

    `topic_constraints` holds 0-based (position, word) pairs; position 0 is the
    event signature hash. The service numbers topics from 1, so position p is
    rendered as `topics[p+1]`. `render()` is the only place that produces the
    service's textual grammar.
    """
    chain_id: int
    contract_address: str
    topic_constraints: tuple[tuple[int, TopicWord], ...]
    select_columns: tuple[str, ...]
    order_by: str = "block_num DESC"
    limit: int = 50
    starting_block: int | None = None
    signatures: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.contract_address or not self.contract_address.strip():
            raise ConfigurationError("FilterQuery requires a contract address")
        if not isinstance(self.chain_id, int) or isinstance(self.chain_id, bool):
            raise ConfigurationError(f"FilterQuery requires an integer chain id, got {self.chain_id!r}")

    def topic(self, position: int) -> TopicWord | None:
        for pos, word in self.topic_constraints:
            if pos == position:
                return word
        return None

    def render(self) -> str:
        where = [
            f"chain = {self.chain_id}",
            f"address = '{self.contract_address.lower()}'",
        ]
        where += [f"topics[{pos + 1}] = '{word}'" for pos, word in self.topic_constraints]
        if self.starting_block is not None:
            where.append(f"block_num >= {self.starting_block}")
        cols = ",\n  ".join(self.select_columns)
        conds = "\n  AND ".join(where)
        return (
            f"SELECT\n  {cols}\n"
            f"FROM {LOG_TABLE}\n"
            f"WHERE\n  {conds}\n"
            f"ORDER BY {self.order_by}\n"
            f"LIMIT {self.limit}"
        )
