# tests/test_config.py
import json
import logging

import pytest
from pydantic import ValidationError

from conftest import simple_events
from pecreader import InvalidSourceError, SystDirection, SystType
from pecreader.builder import build_reader
from pecreader.schema import ReaderConfig, load_config
from pecreader.store import MemoryStore
from pecreader.utils import setup_logging
from test_reweighting import SHAPE_CORRECTION


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "reader.yaml"
    path.write_text(
        "source: samples/ttH.root\n"
        "partitions: [Vars]\n"
        "is_mc: true\n"
        "reweighting:\n"
        "  enable: false\n"
    )
    return path


def test_load_config(config_file):
    config = load_config(config_file)

    assert config.partitions == ["Vars"]
    assert config["is_mc"] is True
    assert config.systematics.type is SystType.nominal
    assert "reweighting" in config
    assert config.get("missing", 3) == 3


def test_overrides(config_file):
    config = load_config(
        config_file,
        ["partitions=[P1,P2]", "systematics.type=jec", "systematics.direction=down", "chunk_size=5"],
    )

    assert config.partitions == ["P1", "P2"]
    assert config.systematics.type is SystType.jec
    assert config.systematics.direction is SystDirection.down
    assert config.chunk_size == 5


def test_unknown_override_key(config_file):
    with pytest.raises(KeyError):
        load_config(config_file, ["reweighting.strength=2"])


def test_malformed_override(config_file):
    with pytest.raises(ValueError):
        load_config(config_file, ["is_mc"])


def test_single_partition_string():
    config = ReaderConfig(source="x.root", partitions="Vars", is_mc=False)
    assert config.partitions == ["Vars"]


@pytest.mark.parametrize(
    "settings",
    [
        {"partitions": []},
        {"partitions": ["A", "A"]},
        {"chunk_size": 0},
        {"reweighting": {"enable": True}},
        {"unexpected": 1},
    ],
)
def test_invalid_configs(settings):
    base = {"source": "x.root", "partitions": ["Vars"], "reweighting": {"enable": False}}
    base.update(settings)
    with pytest.raises(ValidationError):
        ReaderConfig(**base)


def test_build_reader_applies_settings():
    config = ReaderConfig(
        source="unused.root",
        partitions=["Vars"],
        systematics={"type": "nominal", "direction": "down"},
        reweighting={"enable": False},
    )
    reader = build_reader(config, store=MemoryStore({"Vars": simple_events(2)}))

    assert reader.reweighter is None
    assert not reader.reweighting_enabled
    assert reader.systematics.direction is SystDirection.up
    assert [r.get_weight() for r in reader] == [1.0, 2.0]


def test_build_reader_with_reweighting(tmp_path):
    correction = tmp_path / "btag.json"
    correction.write_text(json.dumps(SHAPE_CORRECTION))
    config = ReaderConfig(
        source="unused.root",
        partitions=["Vars"],
        systematics={"type": "jec", "direction": "up"},
        reweighting={"file": str(correction), "min_pt": 50.0},
    )
    reader = build_reader(config, store=MemoryStore({"Vars": simple_events(1)}))
    reader.advance()

    # Only the 100 GeV b jet passes min_pt; the 30 GeV jet scores zero
    assert reader.get_weight() == pytest.approx(1.2)


def test_build_reader_opens_source(tmp_path):
    config = ReaderConfig(
        source=str(tmp_path / "missing.root"),
        partitions=["Vars"],
        is_mc=False,
    )
    with pytest.raises(InvalidSourceError) as excinfo:
        build_reader(config)
    assert excinfo.value.source.endswith("missing.root")


def test_setup_logging_installs_single_handler(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)

    setup_logging("DEBUG")
    setup_logging("INFO")

    assert len(root.handlers) == 1
    assert type(root.handlers[0]).__name__ == "RichHandler"
    assert root.level == logging.DEBUG
