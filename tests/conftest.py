# tests/conftest.py
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from pecreader.reweighting import JetReweighter
from pecreader.store import MemoryStore

LeptonRow = Tuple[int, float, float, float, float]
JetRow = Tuple[float, float, float, float, int]


def _jet_columns(prefix: str, size_branch: str, jets: Sequence[JetRow]) -> Dict[str, list]:
    return {
        size_branch: len(jets),
        f"{prefix}pt": [j[0] for j in jets],
        f"{prefix}eta": [j[1] for j in jets],
        f"{prefix}phi": [j[2] for j in jets],
        f"{prefix}btagdiscri": [j[3] for j in jets],
        f"{prefix}flav": [j[4] for j in jets],
    }


def make_event(
    leptons: Sequence[LeptonRow] = (),
    jets: Sequence[JetRow] = (),
    met: Tuple[float, float] = (0.0, 0.0),
    nvertex: int = 10,
    weight: Optional[float] = 1.0,
    jets_up: Optional[Sequence[JetRow]] = None,
    jets_down: Optional[Sequence[JetRow]] = None,
    met_up: Optional[Tuple[float, float]] = None,
    met_down: Optional[Tuple[float, float]] = None,
) -> Dict[str, object]:
    """Build one row in the flat tuple layout.

    JEC branches and the event weight are only written when ``weight`` is
    not None, i.e. for simulation.
    """
    row = {
        "nlepton": len(leptons),
        "lept_flav": [lep[0] for lep in leptons],
        "lept_pt": [lep[1] for lep in leptons],
        "lept_eta": [lep[2] for lep in leptons],
        "lept_phi": [lep[3] for lep in leptons],
        "lept_iso": [lep[4] for lep in leptons],
        "met_pt": met[0],
        "met_phi": met[1],
        "nvertex": nvertex,
    }
    row.update(_jet_columns("jet_", "njets", jets))

    if weight is not None:
        row.update(_jet_columns("jet_jesup_", "jesup_njets", jets if jets_up is None else jets_up))
        row.update(_jet_columns("jet_jesdown_", "jesdown_njets", jets if jets_down is None else jets_down))
        up = met if met_up is None else met_up
        down = met if met_down is None else met_down
        row.update({
            "met_jesup_pt": up[0],
            "met_jesup_phi": up[1],
            "met_jesdown_pt": down[0],
            "met_jesdown_phi": down[1],
            "evtweight": weight,
        })

    return row


def simple_events(count: int, first_weight: float = 1.0, is_mc: bool = True) -> List[dict]:
    """Events whose leading jet pt encodes their position, 100 + i GeV."""
    return [
        make_event(
            leptons=[(13, 40.0 + i, 0.1, 0.2, 0.05)],
            jets=[(100.0 + i, 0.5, 1.0, 0.9, 5), (30.0, -1.0, 2.0, 0.1, 0)],
            met=(50.0 + i, 0.3),
            nvertex=20 + i,
            weight=first_weight + i if is_mc else None,
        )
        for i in range(count)
    ]


class FixedReweighter(JetReweighter):
    """Returns configured factors in turn, recording every call."""

    def __init__(self, *factors: float):
        self.factors = factors or (1.0,)
        self.calls = []

    def score_jet(self, jet, syst_type, direction):
        factor = self.factors[len(self.calls) % len(self.factors)]
        self.calls.append((jet, syst_type, direction))
        return factor


class FlavourReweighter(JetReweighter):
    """Deterministic factor depending on the jet flavour and the variation."""

    TABLE = {
        ("nominal", "up"): {5: 1.5, 0: 0.5},
        ("jec", "up"): {5: 2.0, 0: 0.25},
        ("jec", "down"): {5: 1.25, 0: 4.0},
    }

    def score_jet(self, jet, syst_type, direction):
        return self.TABLE[(syst_type.value, direction.value)].get(jet.flavour, 0.0)


@pytest.fixture
def two_partition_store() -> MemoryStore:
    """P1 with 3 events and P2 with 2 events."""
    events = simple_events(5)
    return MemoryStore({"P1": events[:3], "P2": events[3:]}, identifier="two_partitions.root")


@pytest.fixture
def data_store() -> MemoryStore:
    return MemoryStore({"Vars": simple_events(3, is_mc=False)}, identifier="data.root")


@pytest.fixture
def varied_event() -> dict:
    """Simulated event with distinct JEC-shifted jets and missing energy."""
    return make_event(
        leptons=[(11, 25.0, 0.1, 0.0, 0.01), (-13, 60.0, -0.4, 1.0, 0.02), (13, 25.0, 2.0, 3.0, 0.03)],
        jets=[(40.0, 0.0, 0.0, 0.8, 5), (90.0, 1.0, 1.0, 0.2, 0), (40.0, 2.0, 2.0, 0.5, 4)],
        jets_up=[(44.0, 0.0, 0.0, 0.8, 5), (99.0, 1.0, 1.0, 0.2, 0)],
        jets_down=[(36.0, 0.0, 0.0, 0.8, 5), (81.0, 1.0, 1.0, 0.2, 0), (36.0, 2.0, 2.0, 0.5, 4), (20.0, 0.0, 0.0, 0.1, 0)],
        met=(35.0, 0.5),
        met_up=(38.0, 0.6),
        met_down=(32.0, 0.4),
        nvertex=17,
        weight=0.5,
    )
