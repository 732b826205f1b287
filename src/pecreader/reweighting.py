"""Per-jet event reweighting.

The reader multiplies the stored event weight by one factor per jet. A factor
of exactly zero means no calibration is available for that jet and is skipped
by the reader rather than zeroing the event.
"""

import gzip
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Tuple, Union

from correctionlib import Correction, CorrectionSet

from pecreader.objects import Jet
from pecreader.systematics import SystDirection, SystType

logger = logging.getLogger(__name__)


class JetReweighter(ABC):
    """Computes a multiplicative weight for a single jet."""

    @abstractmethod
    def score_jet(self, jet: Jet, syst_type: SystType, direction: SystDirection) -> float:
        """Return the weight factor of ``jet`` under the given variation.

        Must be a pure function of its arguments. Returns 0 when no factor
        is available for the jet.
        """
        pass


class CorrectionlibBTagReweighter(JetReweighter):
    """
    B-tag discriminator shape reweighting backed by correctionlib.

    The correction is evaluated with inputs
    ``(systematic, flavour, abseta, pt, discriminant)``, following the layout
    of the BTV shape-correction JSON files.

    Parameters
    ----------
    correction : Correction
        Evaluator of the shape correction
    max_abs_eta : float
        Upper edge of the tagging acceptance in |eta|
    min_pt : float
        Lower edge of the tagging acceptance in pt
    """

    SYSTEMATIC_NAMES: Dict[Tuple[SystType, SystDirection], str] = {
        (SystType.nominal, SystDirection.up): "central",
        (SystType.nominal, SystDirection.down): "central",
        (SystType.jec, SystDirection.up): "up_jes",
        (SystType.jec, SystDirection.down): "down_jes",
    }

    def __init__(self, correction: Correction, max_abs_eta: float = 2.4, min_pt: float = 20.0):
        self.correction = correction
        self.max_abs_eta = max_abs_eta
        self.min_pt = min_pt

    @classmethod
    def from_file(
        cls, path: Union[str, Path], name: str = "deepCSV_shape", **kwargs
    ) -> "CorrectionlibBTagReweighter":
        """
        Load the correction ``name`` from a correctionlib JSON file.

        Parameters
        ----------
        path : str or Path
            ``.json`` or ``.json.gz`` correctionlib file
        name : str
            Name of the correction inside the file
        **kwargs
            Passed to the constructor

        Raises
        ------
        ValueError
            If the file extension is not supported
        KeyError
            If the file has no correction with that name
        """
        path = str(path)
        if path.endswith(".json.gz"):
            with gzip.open(path, "rt") as file_handle:
                cset = CorrectionSet.from_string(file_handle.read().strip())
        elif path.endswith(".json"):
            cset = CorrectionSet.from_file(path)
        else:
            raise ValueError(
                f"Unsupported correctionlib format: {path}. "
                "Expected .json or .json.gz"
            )

        logger.info(f"Loaded b-tag reweighting '{name}' from {path}")
        return cls(cset[name], **kwargs)

    def systematic_name(self, syst_type: SystType, direction: SystDirection) -> str:
        return self.SYSTEMATIC_NAMES[(SystType(syst_type), SystDirection(direction))]

    @staticmethod
    def hadron_flavour(jet: Jet) -> int:
        flavour = abs(int(jet.flavour))
        return flavour if flavour in (4, 5) else 0

    def score_jet(self, jet: Jet, syst_type: SystType, direction: SystDirection) -> float:
        if jet.pt < self.min_pt or abs(jet.eta) > self.max_abs_eta:
            return 0.0

        flavour = self.hadron_flavour(jet)
        systematic = self.systematic_name(syst_type, direction)

        # Charm jets have no JES-dependent shape correction
        if flavour == 4:
            systematic = "central"

        return float(
            self.correction.evaluate(systematic, flavour, abs(jet.eta), jet.pt, jet.btag)
        )
