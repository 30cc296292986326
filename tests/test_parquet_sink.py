from __future__ import annotations

import os

import pyarrow.parquet as pq

from logweave.adapters.parquet_sink import LIFECYCLE_SCHEMA, LifecycleParquetWriter, lifecycles_to_table
from logweave.domain.lifecycle import aggregate_lifecycles

from helpers import assigned, key, responded


def _lifecycles():
    return aggregate_lifecycles([assigned(key(1), 100), assigned(key(2), 105)], [responded(key(1), 102, False)])


def test_table_columns_follow_lifecycles():
    t = lifecycles_to_table(_lifecycles())
    assert t.schema == LIFECYCLE_SCHEMA
    d = t.to_pydict()
    assert d["correlation_key"] == [key(2), key(1)]
    assert d["status"] == ["pending", "concluded"]
    assert d["concluding_block_number"] == [None, 102]
    assert d["result"] == [None, False]


def test_writer_replaces_tmp_file(tmp_path):
    path = LifecycleParquetWriter(str(tmp_path / "out")).write(_lifecycles(), "lifecycles")
    assert path.endswith("lifecycles.parquet")
    assert not os.path.exists(path + ".tmp")
    assert pq.read_table(path).num_rows == 2
