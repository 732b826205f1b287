"""Sequential event reader for PEC-style columnar tuples.

A small framework for looping over CMS analysis tuples event by event with:
- Multi-partition (multi-tree) traversal with rewind
- Typed lepton, jet and missing-energy records ordered in pt
- JEC systematic variations of jets and missing energy
- Lazily computed, cached event weights with b-tag shape reweighting
"""

from pecreader.errors import InvalidSourceError, PartitionNotFoundError, ReaderError
from pecreader.objects import MET, Jet, Lepton
from pecreader.reader import Reader
from pecreader.systematics import SystDirection, SystematicSelection, SystType

__version__ = "1.0.0"

__all__ = [
    "Reader",
    "Lepton",
    "Jet",
    "MET",
    "SystType",
    "SystDirection",
    "SystematicSelection",
    "ReaderError",
    "InvalidSourceError",
    "PartitionNotFoundError",
]
