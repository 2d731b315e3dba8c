"""Design catalog validation."""

from __future__ import annotations

import json

import pytest

from paydrop.catalog import load_designs, parse_designs
from paydrop.errors import ConfigError


def test_parse_designs():
    designs = parse_designs([
        {"name": "Design_One", "cid": "QmOne"},
        {"name": "Design_Two", "cid": "QmTwo", "mediaType": "image/gif"},
    ])
    assert [d.name for d in designs] == ["Design_One", "Design_Two"]
    assert designs[0].media_type == "image/png"
    assert designs[1].media_type == "image/gif"


@pytest.mark.parametrize("raw", [
    [],
    {"name": "x", "cid": "y"},
    ["Design_One"],
    [{"cid": "QmOne"}],
    [{"name": "Design_One"}],
    [{"name": "x" * 33, "cid": "QmOne"}],
    [{"name": "A", "cid": "Qm1"}, {"name": "A", "cid": "Qm2"}],
])
def test_invalid_catalogs(raw):
    with pytest.raises(ConfigError):
        parse_designs(raw)


def test_load_designs(tmp_path):
    path = tmp_path / "designs.json"
    path.write_text(json.dumps([{"name": "Design_One", "cid": "QmOne"}]))
    assert load_designs(path)[0].cid == "QmOne"


def test_load_designs_missing(tmp_path):
    with pytest.raises(ConfigError):
        load_designs(tmp_path / "missing.json")


def test_load_designs_bad_json(tmp_path):
    path = tmp_path / "designs.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        load_designs(path)
