"""Systematic variation types and the selection value used by the reader."""

from dataclasses import dataclass
from enum import Enum


class SystType(str, Enum):
    nominal = "nominal"
    jec = "jec"


class SystDirection(str, Enum):
    up = "up"
    down = "down"


@dataclass(frozen=True)
class SystematicSelection:
    """
    A requested systematic variation.

    Direction is meaningless for the nominal view, so a nominal selection is
    always normalised to ``up``. Enum members and their string values are
    both accepted.

    Attributes
    ----------
    type : SystType
        Which quantities are varied
    direction : SystDirection
        Direction of the shift
    """

    type: SystType = SystType.nominal
    direction: SystDirection = SystDirection.up

    def __post_init__(self):
        object.__setattr__(self, "type", SystType(self.type))
        object.__setattr__(self, "direction", SystDirection(self.direction))
        if self.type is SystType.nominal:
            object.__setattr__(self, "direction", SystDirection.up)

    @property
    def is_varied(self) -> bool:
        return self.type is not SystType.nominal

    def __str__(self) -> str:
        if not self.is_varied:
            return self.type.value
        return f"{self.type.value}_{self.direction.value}"


NOMINAL = SystematicSelection()
