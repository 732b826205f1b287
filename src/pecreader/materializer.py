"""Conversion of per-row column buffers into physics records.

Columns are grouped into one buffer per record kind (leptons, jets, missing
energy). Each buffer registers its columns against a row source and converts
the current row into records in a single pass.
"""

from dataclasses import dataclass
from operator import attrgetter
from typing import Dict, Optional, Tuple, Type

from pecreader.objects import MET, Jet, Lepton
from pecreader.store.protocols import ColumnBuffer, RowSource
from pecreader.systematics import NOMINAL, SystDirection, SystematicSelection, SystType

JEC_UP = SystematicSelection(SystType.jec, SystDirection.up)
JEC_DOWN = SystematicSelection(SystType.jec, SystDirection.down)

# Branch name tag of each JEC variation
VARIATION_TAGS = {
    JEC_UP: "jesup",
    JEC_DOWN: "jesdown",
}

LEPTON_SIZE_BRANCH = "nlepton"
LEPTON_BRANCHES = {
    "flavour": "lept_flav",
    "pt": "lept_pt",
    "eta": "lept_eta",
    "phi": "lept_phi",
    "rel_iso": "lept_iso",
}
NUM_PV_BRANCH = "nvertex"
WEIGHT_BRANCH = "evtweight"


def jet_branches(tag: Optional[str] = None) -> Tuple[str, Dict[str, str]]:
    """Return the size branch and field-to-branch map of a jet collection.

    >>> jet_branches("jesup")[1]["pt"]
    'jet_jesup_pt'
    """
    prefix = f"jet_{tag}_" if tag else "jet_"
    size = f"{tag}_njets" if tag else "njets"
    return size, {
        "pt": f"{prefix}pt",
        "eta": f"{prefix}eta",
        "phi": f"{prefix}phi",
        "btag": f"{prefix}btagdiscri",
        "flavour": f"{prefix}flav",
    }


def met_branches(tag: Optional[str] = None) -> Dict[str, str]:
    prefix = f"met_{tag}_" if tag else "met_"
    return {"pt": f"{prefix}pt", "phi": f"{prefix}phi"}


def sort_by_pt(records) -> tuple:
    """Order records by decreasing pt, keeping buffer order for equal pt."""
    return tuple(sorted(records, key=attrgetter("pt"), reverse=True))


class RecordBuffer:
    """Buffers for the fields of a single record per row (e.g. MET)."""

    def __init__(self, record_type: Type, branches: Dict[str, str]):
        missing = set(record_type._fields) - set(branches)
        if missing:
            raise ValueError(f"No branches given for {record_type.__name__} fields {sorted(missing)}")
        self.record_type = record_type
        self.columns = {name: ColumnBuffer(branches[name]) for name in record_type._fields}

    def register(self, source: RowSource) -> None:
        for column in self.columns.values():
            source.register_column(column.name, column)

    def to_record(self):
        return self.record_type(*(column.value for column in self.columns.values()))


class CollectionBuffer(RecordBuffer):
    """Buffers for a variable-size collection of records per row.

    The collection size is read from its own branch, as in the flat tuple
    layout where ``njets`` accompanies the ``jet_*`` arrays.
    """

    def __init__(self, record_type: Type, size_branch: str, branches: Dict[str, str]):
        super().__init__(record_type, branches)
        self.size = ColumnBuffer(size_branch)

    def register(self, source: RowSource) -> None:
        source.register_column(self.size.name, self.size)
        super().register(source)

    def to_records(self) -> tuple:
        values = [column.value for column in self.columns.values()]
        records = (
            self.record_type(*(value[i] for value in values))
            for i in range(int(self.size.value))
        )
        return sort_by_pt(records)


@dataclass(frozen=True)
class EventSnapshot:
    """Materialized content of one event.

    Jets and missing energy are keyed by the systematic variation they
    belong to. Data events only carry the nominal entry.
    """

    leptons: Tuple[Lepton, ...]
    jets: Dict[SystematicSelection, Tuple[Jet, ...]]
    mets: Dict[SystematicSelection, MET]
    num_pv: int
    raw_weight: float = 1.0


class EventBuffers:
    """All column buffers needed to materialize an event.

    Parameters
    ----------
    is_mc : bool
        Simulation carries JEC-varied jets and missing energy and a stored
        event weight; data only has the nominal collections.
    """

    def __init__(self, is_mc: bool):
        self.is_mc = is_mc
        self.variations = (NOMINAL, JEC_UP, JEC_DOWN) if is_mc else (NOMINAL,)

        self.leptons = CollectionBuffer(Lepton, LEPTON_SIZE_BRANCH, LEPTON_BRANCHES)
        self.jets = {}
        self.mets = {}
        for variation in self.variations:
            tag = VARIATION_TAGS.get(variation)
            self.jets[variation] = CollectionBuffer(Jet, *jet_branches(tag))
            self.mets[variation] = RecordBuffer(MET, met_branches(tag))

        self.num_pv = ColumnBuffer(NUM_PV_BRANCH)
        self.raw_weight = ColumnBuffer(WEIGHT_BRANCH) if is_mc else None

    def register(self, source: RowSource) -> None:
        """Register every buffer against a freshly bound row source."""
        self.leptons.register(source)
        for variation in self.variations:
            self.jets[variation].register(source)
            self.mets[variation].register(source)
        source.register_column(self.num_pv.name, self.num_pv)
        if self.raw_weight is not None:
            source.register_column(self.raw_weight.name, self.raw_weight)

    def build_snapshot(self) -> EventSnapshot:
        """Convert the current row into a complete event snapshot."""
        return EventSnapshot(
            leptons=self.leptons.to_records(),
            jets={variation: self.jets[variation].to_records() for variation in self.variations},
            mets={variation: self.mets[variation].to_record() for variation in self.variations},
            num_pv=int(self.num_pv.value),
            raw_weight=float(self.raw_weight.value) if self.raw_weight is not None else 1.0,
        )
