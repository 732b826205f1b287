"""Event stores and row sources.

Stores expose named partitions (ROOT trees, Parquet files or in-memory
arrays) through a common interface consumed by :class:`pecreader.Reader`.
"""

from .protocols import ColumnBuffer, PartitionStore, RowSource
from .chunked import ArrayRowSource, ChunkedRowSource, UprootRowSource
from .backends import MemoryStore, ParquetStore, UprootStore, get_store

__all__ = [
    "ColumnBuffer",
    "PartitionStore",
    "RowSource",
    "ChunkedRowSource",
    "ArrayRowSource",
    "UprootRowSource",
    "MemoryStore",
    "ParquetStore",
    "UprootStore",
    "get_store",
]
