from __future__ import annotations
import os
from typing import Iterable

import pyarrow as pa
import pyarrow.parquet as pq

from ..domain.models import Lifecycle

LIFECYCLE_SCHEMA = pa.schema([
    pa.field("correlation_key",            pa.string()),
    pa.field("status",                     pa.string()),
    pa.field("initiating_kind",            pa.string()),
    pa.field("initiating_block_number",    pa.int64()),
    pa.field("initiating_block_timestamp", pa.string()),
    pa.field("initiating_tx_hash",         pa.string()),
    pa.field("node",                       pa.string()),
    pa.field("concluding_kind",            pa.string()),
    pa.field("concluding_block_number",    pa.int64()),
    pa.field("concluding_block_timestamp", pa.string()),
    pa.field("concluding_tx_hash",         pa.string()),
    pa.field("result",                     pa.bool_()),
])

def lifecycles_to_table(lifecycles: Iterable[Lifecycle]) -> pa.Table:
    """Rows keep the given lifecycle order (newest initiating block first after aggregation)."""
    cols: dict[str, list] = {f.name: [] for f in LIFECYCLE_SCHEMA}
    for lc in lifecycles:
        ini, con = lc.initiating, lc.concluding
        cols["correlation_key"].append(lc.correlation_key)
        cols["status"].append(lc.status)
        cols["initiating_kind"].append(ini.kind)
        cols["initiating_block_number"].append(ini.block_number)
        cols["initiating_block_timestamp"].append(ini.block_timestamp or None)
        cols["initiating_tx_hash"].append(ini.tx_hash)
        cols["node"].append(getattr(ini, "node", None))
        cols["concluding_kind"].append(con.kind if con else None)
        cols["concluding_block_number"].append(con.block_number if con else None)
        cols["concluding_block_timestamp"].append((con.block_timestamp or None) if con else None)
        cols["concluding_tx_hash"].append(con.tx_hash if con else None)
        cols["result"].append(getattr(con, "result", None) if con else None)
    return pa.Table.from_pydict(cols, schema=LIFECYCLE_SCHEMA)

class LifecycleParquetWriter:
    def __init__(self, out_dir: str, codec: str = "zstd") -> None:
        self.out_dir = out_dir
        self.codec = codec
        os.makedirs(self.out_dir, exist_ok=True)

    def write(self, lifecycles: Iterable[Lifecycle], name: str) -> str:
        path = os.path.join(self.out_dir, f"{name}.parquet")
        tmp  = path + ".tmp"
        pq.write_table(lifecycles_to_table(lifecycles), tmp, compression=self.codec)
        os.replace(tmp, path)
        return path
