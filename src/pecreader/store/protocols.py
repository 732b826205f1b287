"""Abstract base classes defining the event store interface.

A store is a collection of named partitions (trees). Opening a partition
yields a row source: columns are registered against it once, and every call
to ``read_row`` copies that row's values into the registered buffers.
"""

from abc import ABC, abstractmethod
from typing import Any


class ColumnBuffer:
    """Holder for the current row's value of one named column."""

    __slots__ = ("name", "value")

    def __init__(self, name: str):
        self.name = name
        self.value: Any = None

    def __repr__(self):
        return f"ColumnBuffer({self.name!r}, value={self.value!r})"


class RowSource(ABC):
    """A bound partition yielding rows through registered column buffers.

    Examples:
        >>> source = store.open_partition("Vars")
        >>> pt = ColumnBuffer("jet_pt")
        >>> source.register_column("jet_pt", pt)
        >>> source.read_row(0)
        >>> pt.value
        [61.2, 33.8]
    """

    name: str

    @property
    @abstractmethod
    def row_count(self) -> int:
        """Total number of rows in the partition."""
        pass

    @abstractmethod
    def register_column(self, name: str, buffer: ColumnBuffer) -> None:
        """Register a buffer to be filled with column ``name`` on every read.

        Args:
            name: Column (branch) name in the partition
            buffer: Buffer whose ``value`` is overwritten by ``read_row``
        """
        pass

    @abstractmethod
    def read_row(self, index: int) -> None:
        """Copy the values of row ``index`` into all registered buffers.

        Raises:
            IndexError: If ``index`` is outside ``[0, row_count)``
        """
        pass

    def close(self) -> None:
        """Release resources held by this binding."""
        pass


class PartitionStore(ABC):
    """A named-partition columnar event store.

    Stores are borrowed by readers: closing a reader never closes its store.
    """

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Human-readable identifier of the store, used in error messages."""
        pass

    @property
    def is_valid(self) -> bool:
        """Whether the store can still be read from."""
        return True

    @abstractmethod
    def open_partition(self, name: str) -> RowSource:
        """Bind the partition ``name`` and return a fresh row source for it.

        Raises:
            PartitionNotFoundError: If the store has no such partition
        """
        pass

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
