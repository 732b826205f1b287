"""Sequential event reader over a partitioned event store.

The reader walks an ordered list of partitions (trees) in a store, one event
at a time, and exposes the current event as typed records::

    reader = Reader(store, ["Vars"], is_mc=True, reweighter=reweighter)
    while reader.advance():
        jets = reader.get_jets()
        weight = reader.get_weight()

Accessors reflect the event produced by the latest successful
:meth:`Reader.advance`. Calling them before the first ``advance`` (or after a
``rewind``) violates their precondition and raises :class:`ReaderError`.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union

from pecreader.errors import InvalidSourceError, ReaderError
from pecreader.materializer import EventBuffers, EventSnapshot
from pecreader.objects import MET, Jet, Lepton
from pecreader.reweighting import JetReweighter
from pecreader.store.protocols import PartitionStore, RowSource
from pecreader.systematics import NOMINAL, SystDirection, SystematicSelection, SystType

logger = logging.getLogger(__name__)


@dataclass
class WeightCache:
    """Last computed event weight and whether it is still up to date."""

    value: float = 1.0
    valid: bool = False

    def invalidate(self) -> None:
        self.valid = False

    def store(self, value: float) -> float:
        self.value = value
        self.valid = True
        return value


class Reader:
    """
    Reads events from a sequence of partitions of an event store.

    Parameters
    ----------
    store : PartitionStore
        Source of partitions. Borrowed: closing the reader leaves it open.
    partitions : str or Iterable[str]
        Ordered names of the partitions to read, at least one
    is_mc : bool
        Whether the source is simulation. Simulation provides JEC-varied
        jets and missing energy and a stored event weight; the weight of
        data events is always 1.
    reweighter : JetReweighter, optional
        Per-jet weight factors applied on top of the stored weight

    Raises
    ------
    InvalidSourceError
        If the store is missing or no longer readable
    PartitionNotFoundError
        If the first partition does not exist in the store
    """

    def __init__(
        self,
        store: PartitionStore,
        partitions: Union[str, Iterable[str]],
        is_mc: bool = True,
        reweighter: Optional[JetReweighter] = None,
    ) -> None:
        if store is None or not store.is_valid:
            raise InvalidSourceError(getattr(store, "identifier", repr(store)))

        if isinstance(partitions, str):
            partitions = [partitions]
        self.partitions: Tuple[str, ...] = tuple(partitions)
        if not self.partitions:
            raise ValueError("At least one partition name is required.")

        self.store = store
        self.is_mc = is_mc
        self.reweighter = reweighter

        self._selection = NOMINAL
        self._apply_reweighting = True
        self._weight = WeightCache()

        self._buffers = EventBuffers(is_mc)
        self._event: Optional[EventSnapshot] = None

        self._source: Optional[RowSource] = None
        self._partition_index = 0
        self._num_entries = 0
        self._entry = 0
        self._exhausted = False

        self._bind(0)

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def advance(self) -> bool:
        """
        Read the next event.

        Moves on to the next partition when the current one is exhausted.

        Returns
        -------
        bool
            False once all partitions have been read, True otherwise
        """
        if self._exhausted:
            return False

        while self._entry == self._num_entries:
            if self._partition_index + 1 == len(self.partitions):
                self._exhausted = True
                logger.debug(f"No events left in {len(self.partitions)} partition(s)")
                return False

            self._bind(self._partition_index + 1)

        self._source.read_row(self._entry)
        self._entry += 1

        # Snapshot is complete before it replaces the previous event
        self._event = self._buffers.build_snapshot()
        self._weight.invalidate()
        return True

    def rewind(self) -> None:
        """Go back to the start of the first partition.

        The first partition is bound again with a fresh row source, also for a
        single-partition reader. No event is available until the next
        :meth:`advance`.
        """
        self._exhausted = False
        self._event = None
        self._weight.invalidate()
        self._bind(0)

    def close(self) -> None:
        """Release the partition binding. The store itself stays open."""
        self._release()
        self._exhausted = True

    def __enter__(self) -> "Reader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __iter__(self) -> Iterator["Reader"]:
        while self.advance():
            yield self

    @property
    def current_partition(self) -> str:
        return self.partitions[self._partition_index]

    @property
    def current_entry(self) -> int:
        """Index of the next unread entry in the current partition."""
        return self._entry

    @property
    def num_entries(self) -> int:
        """Number of entries in the current partition."""
        return self._num_entries

    # -------------------------------------------------------------------------
    # Systematics and weights
    # -------------------------------------------------------------------------

    @property
    def systematics(self) -> SystematicSelection:
        """The effective systematic selection."""
        return self._selection

    def set_systematics(
        self,
        syst_type: SystType,
        syst_direction: SystDirection = SystDirection.up,
    ) -> None:
        """
        Select the systematic variation exposed by the jet and MET accessors.

        For the nominal type the direction is always set to ``up``. The cached
        weight is invalidated since per-jet weights depend on the variation.
        """
        self._selection = SystematicSelection(syst_type, syst_direction)
        self._weight.invalidate()

    @property
    def reweighting_enabled(self) -> bool:
        return self._apply_reweighting

    def set_reweighting_enabled(self, on: bool = True) -> None:
        """
        Switch the per-jet reweighting on or off.

        The cached weight is deliberately left untouched: the switch only
        affects weights computed after the next :meth:`advance` or
        :meth:`set_systematics`.
        """
        self._apply_reweighting = on

    def get_weight(self) -> float:
        """
        Return the weight of the current event.

        For simulation this is the stored event weight times the per-jet
        factors of the nominal jets, evaluated for the current systematic
        variation. Zero factors are skipped. The result is cached until the
        event or the systematic selection changes.
        """
        if not self.is_mc:
            return 1.0

        event = self._current_event()
        if self._weight.valid:
            return self._weight.value

        weight = event.raw_weight

        if self._apply_reweighting and self.reweighter is not None:
            for jet in event.jets[NOMINAL]:
                factor = self.reweighter.score_jet(
                    jet, self._selection.type, self._selection.direction
                )
                if factor != 0.0:
                    weight *= factor

        return self._weight.store(weight)

    # -------------------------------------------------------------------------
    # Event content
    # -------------------------------------------------------------------------

    def get_leptons(self) -> Tuple[Lepton, ...]:
        return self._current_event().leptons

    def get_jets(self) -> Tuple[Jet, ...]:
        """Jets of the current event in the selected systematic variation."""
        return self._current_event().jets[self._view()]

    def get_met(self) -> MET:
        """Missing energy of the current event in the selected variation."""
        return self._current_event().mets[self._view()]

    def get_num_pv(self) -> int:
        return self._current_event().num_pv

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _view(self) -> SystematicSelection:
        # Data only has nominal collections
        return self._selection if self.is_mc else NOMINAL

    def _current_event(self) -> EventSnapshot:
        if self._event is None:
            raise ReaderError("No event has been read; call advance() first.")
        return self._event

    def _bind(self, index: int) -> None:
        # Cursor is left untouched when the partition cannot be opened
        name = self.partitions[index]
        source = self.store.open_partition(name)

        self._release()
        self._buffers.register(source)

        self._partition_index = index
        self._source = source
        self._num_entries = source.row_count
        self._entry = 0
        logger.info(
            f"Reading tree '{name}' with {self._num_entries} entries "
            f"from {self.store.identifier}"
        )

    def _release(self) -> None:
        if self._source is not None:
            self._source.close()
            self._source = None
