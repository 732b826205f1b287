# tests/test_systematics.py
import pytest

from pecreader.systematics import NOMINAL, SystDirection, SystematicSelection, SystType


def test_nominal_down_collapses_to_up():
    selection = SystematicSelection(SystType.nominal, SystDirection.down)
    assert selection.direction is SystDirection.up
    assert selection == NOMINAL
    assert hash(selection) == hash(NOMINAL)


def test_jec_keeps_direction():
    selection = SystematicSelection(SystType.jec, SystDirection.down)
    assert selection.direction is SystDirection.down
    assert selection.is_varied
    assert str(selection) == "jec_down"


def test_string_values_are_coerced():
    selection = SystematicSelection("jec", "up")
    assert selection.type is SystType.jec
    assert selection.direction is SystDirection.up
    assert str(NOMINAL) == "nominal"


def test_unknown_value_is_rejected():
    with pytest.raises(ValueError):
        SystematicSelection("jer", "up")
