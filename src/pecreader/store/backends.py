"""Concrete event stores.

Each store maps partition names onto a format-specific row source:
- :class:`UprootStore`: TTrees in a ROOT file
- :class:`ParquetStore`: ``<partition>.parquet`` files in a directory
- :class:`MemoryStore`: awkward arrays held in memory
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Union

import awkward as ak
import uproot

from pecreader.errors import InvalidSourceError, PartitionNotFoundError
from pecreader.store.chunked import DEFAULT_CHUNK_SIZE, ArrayRowSource, UprootRowSource
from pecreader.store.protocols import PartitionStore, RowSource

logger = logging.getLogger(__name__)


class MemoryStore(PartitionStore):
    """Store over in-memory partitions.

    Parameters
    ----------
    partitions : Mapping[str, Any]
        Partition name to an awkward record array, or anything
        ``ak.Array`` accepts (e.g. a list of per-event dicts)
    identifier : str
        Name reported in error messages
    chunk_size : int
        Entries converted per chunk
    """

    def __init__(
        self,
        partitions: Mapping[str, Any],
        identifier: str = "memory",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._partitions = {
            name: array if isinstance(array, ak.Array) else ak.Array(array)
            for name, array in partitions.items()
        }
        self._identifier = identifier
        self.chunk_size = chunk_size

    @property
    def identifier(self) -> str:
        return self._identifier

    def open_partition(self, name: str) -> RowSource:
        if name not in self._partitions:
            raise PartitionNotFoundError(name, self._identifier)
        return ArrayRowSource(name, self._partitions[name], self.chunk_size)


class ParquetStore(PartitionStore):
    """Store over a directory of Parquet files, one partition per file."""

    def __init__(self, directory: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.directory = Path(directory)
        self.chunk_size = chunk_size
        if not self.directory.is_dir():
            raise InvalidSourceError(str(self.directory), "is not a directory")

    @property
    def identifier(self) -> str:
        return str(self.directory)

    @property
    def is_valid(self) -> bool:
        return self.directory.is_dir()

    def open_partition(self, name: str) -> RowSource:
        path = self.directory / f"{name}.parquet"
        if not path.is_file():
            raise PartitionNotFoundError(name, self.identifier)

        logger.debug(f"Loading partition '{name}' from {path}")
        return ArrayRowSource(name, ak.from_parquet(str(path)), self.chunk_size)


class UprootStore(PartitionStore):
    """Store over the TTrees of a ROOT file opened with uproot.

    Raises
    ------
    InvalidSourceError
        If the file does not exist or is not a readable ROOT file
    """

    def __init__(self, path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.path = str(path)
        self.chunk_size = chunk_size
        try:
            self._file = uproot.open(self.path)
        except (OSError, ValueError) as err:
            raise InvalidSourceError(self.path) from err
        self._closed = False

    @property
    def identifier(self) -> str:
        return self.path

    @property
    def is_valid(self) -> bool:
        return not self._closed

    def open_partition(self, name: str) -> RowSource:
        if self._closed:
            raise InvalidSourceError(self.path, "is closed")
        try:
            tree = self._file[name]
        except KeyError:
            raise PartitionNotFoundError(name, self.path) from None

        # Keys that resolve to histograms or directories are not partitions
        if not isinstance(tree, uproot.TTree):
            raise PartitionNotFoundError(name, self.path)

        return UprootRowSource(name, tree, self.chunk_size)

    def close(self) -> None:
        if not self._closed:
            self._file.close()
            self._closed = True


def get_store(path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE) -> PartitionStore:
    """Factory function to get the appropriate store for a source path.

    Args:
        path: Source location. Supported values:
            - a ``.root`` file: ROOT TTrees read with uproot
            - a directory: one ``<partition>.parquet`` file per partition

    Returns:
        Store instance for the source

    Raises:
        InvalidSourceError: If the source does not exist
        ValueError: If the source format is not supported

    Examples:
        >>> store = get_store("samples/ttH.root")
        >>> source = store.open_partition("Vars")
    """
    path = Path(path)

    if path.suffix == ".root":
        return UprootStore(path, chunk_size=chunk_size)
    if path.is_dir():
        return ParquetStore(path, chunk_size=chunk_size)
    if not path.exists():
        raise InvalidSourceError(str(path))

    raise ValueError(
        f"Unsupported source: {path}. "
        "Supported sources: '.root' files and directories of '.parquet' files"
    )
