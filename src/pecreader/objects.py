"""Physics object records materialized by the reader.

Records are immutable named tuples. Kinematics are exposed as ``vector``
objects so they compose with the rest of the scikit-hep stack.
"""

from typing import NamedTuple

import vector

# Lepton masses in GeV, keyed by absolute PDG id
LEPTON_MASSES = {
    11: 0.000511,
    13: 0.105658,
}


class Lepton(NamedTuple):
    """Charged lepton.

    Attributes
    ----------
    flavour : int
        Signed PDG id (e.g. 11 for e-, -13 for mu+)
    pt, eta, phi : float
        Kinematics in GeV and radians
    rel_iso : float
        Relative isolation
    """

    flavour: int
    pt: float
    eta: float
    phi: float
    rel_iso: float

    @property
    def is_electron(self) -> bool:
        return abs(self.flavour) == 11

    @property
    def is_muon(self) -> bool:
        return abs(self.flavour) == 13

    @property
    def charge(self) -> int:
        # Negative PDG ids are antiparticles, which carry positive charge
        return -1 if self.flavour > 0 else 1

    @property
    def p4(self):
        mass = LEPTON_MASSES.get(abs(self.flavour), 0.0)
        return vector.obj(pt=self.pt, eta=self.eta, phi=self.phi, mass=mass)


class Jet(NamedTuple):
    """Reconstructed jet with its b-tagging discriminator and hadron flavour."""

    pt: float
    eta: float
    phi: float
    btag: float
    flavour: int

    @property
    def p4(self):
        return vector.obj(pt=self.pt, eta=self.eta, phi=self.phi, mass=0.0)


class MET(NamedTuple):
    """Missing transverse energy."""

    pt: float
    phi: float

    @property
    def p2(self):
        return vector.obj(pt=self.pt, phi=self.phi)
