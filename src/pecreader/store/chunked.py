"""Row sources that load registered columns in entry ranges.

Reading a ROOT or Parquet partition one entry at a time is slow, so rows are
served from a cached chunk of ``chunk_size`` entries. Each chunk is loaded
with ``entry_start``/``entry_stop`` and converted to Python lists once.
"""

import logging
from abc import abstractmethod
from typing import Dict, List, Optional

import awkward as ak

from pecreader.store.protocols import ColumnBuffer, RowSource

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10_000


class ChunkedRowSource(RowSource):
    """Base class for row sources backed by columnar range reads.

    Subclasses implement :meth:`_read_columns`, returning an awkward record
    array with one field per requested column for the given entry range.
    """

    def __init__(self, name: str, num_entries: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.name = name
        self.chunk_size = chunk_size
        self._num_entries = int(num_entries)
        self._buffers: Dict[str, ColumnBuffer] = {}
        self._chunk: Optional[Dict[str, list]] = None
        self._chunk_start = 0
        self._chunk_stop = 0
        self.closed = False

    @property
    def row_count(self) -> int:
        return self._num_entries

    def register_column(self, name: str, buffer: ColumnBuffer) -> None:
        self._buffers[name] = buffer
        # Cached chunk does not hold the new column
        self._chunk = None

    def read_row(self, index: int) -> None:
        if self.closed:
            raise ValueError(f"Row source '{self.name}' is closed")
        if not 0 <= index < self._num_entries:
            raise IndexError(
                f"Entry {index} out of range for '{self.name}' "
                f"with {self._num_entries} entries"
            )

        if self._chunk is None or not self._chunk_start <= index < self._chunk_stop:
            self._load_chunk(index)

        offset = index - self._chunk_start
        for name, buffer in self._buffers.items():
            buffer.value = self._chunk[name][offset]

    def close(self) -> None:
        self._chunk = None
        self._buffers.clear()
        self.closed = True

    def _load_chunk(self, start: int) -> None:
        stop = min(start + self.chunk_size, self._num_entries)
        names = list(self._buffers)
        logger.debug(f"Loading entries [{start}, {stop}) of '{self.name}' for {len(names)} columns")

        arrays = self._read_columns(names, start, stop)
        self._chunk = {name: ak.to_list(arrays[name]) for name in names}
        self._chunk_start = start
        self._chunk_stop = stop

    @abstractmethod
    def _read_columns(self, names: List[str], start: int, stop: int) -> ak.Array:
        pass


class ArrayRowSource(ChunkedRowSource):
    """Row source over an awkward record array already held in memory."""

    def __init__(self, name: str, array: ak.Array, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(name, len(array), chunk_size)
        self._array = array

    def _read_columns(self, names: List[str], start: int, stop: int) -> ak.Array:
        return self._array[start:stop][names]

    def close(self) -> None:
        super().close()
        self._array = None


class UprootRowSource(ChunkedRowSource):
    """Row source over a ROOT TTree opened with uproot."""

    def __init__(self, name: str, tree, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(name, tree.num_entries, chunk_size)
        self._tree = tree

    def _read_columns(self, names: List[str], start: int, stop: int) -> ak.Array:
        return self._tree.arrays(
            filter_name=names, entry_start=start, entry_stop=stop, library="ak"
        )

    def close(self) -> None:
        super().close()
        self._tree = None
