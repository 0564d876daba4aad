"""
运行配置与 Settings 测试。
"""

from __future__ import annotations

import pytest

from riskroute.config import PARTS, load_run_config, parse_tile, parse_xy
from riskroute.exceptions import RiskRouteError
from riskroute.settings import Settings


def _write(tmp_path, text: str):
    path = tmp_path / "run.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_parts_presets():
    assert PARTS == {1: (1, 1), 2: (5, 5)}


def test_parse_helpers():
    assert parse_tile("5x5") == (5, 5)
    assert parse_tile("2,3") == (2, 3)
    assert parse_xy(" 4, 7 ") == (4, 7)
    with pytest.raises(ValueError):
        parse_tile("0x1")
    with pytest.raises(ValueError):
        parse_xy("4")


def test_minimal_config_defaults(tmp_path):
    cfg = load_run_config(_write(tmp_path, "input: example.txt\n"))
    assert cfg.input == str(tmp_path / "example.txt")
    assert cfg.tile_factors() == (1, 1)
    assert cfg.search.options() == {"heuristic": "manhattan", "early_exit": True, "max_expansions": None}
    assert cfg.search.goal_xy() is None


def test_part_and_tile_precedence(tmp_path):
    cfg = load_run_config(_write(tmp_path, "input: a.txt\npart: 2\n"))
    assert cfg.tile_factors() == (5, 5)
    cfg = load_run_config(_write(tmp_path, "input: a.txt\npart: 2\ntile: {x: 3, y: 2}\n"))
    assert cfg.tile_factors() == (3, 2)


def test_search_section(tmp_path):
    text = "input: /abs/a.txt\nsearch:\n  heuristic: ZERO\n  early_exit: false\n  max_expansions: 50\n  goal: '3, 4'\n"
    cfg = load_run_config(_write(tmp_path, text))
    assert cfg.input == "/abs/a.txt"
    assert cfg.search.heuristic == "zero"
    assert cfg.search.goal_xy() == (3, 4)
    assert cfg.search.options()["max_expansions"] == 50


@pytest.mark.parametrize(
    "text, field",
    [
        ("input: a.txt\nunknown: 1\n", "unknown"),
        ("input: a.txt\nsearch: {heuristic: euclidean}\n", "search.heuristic"),
        ("input: a.txt\ntile: {x: 0}\n", "tile.x"),
        ("input: a.txt\npart: 3\n", "part"),
        ("tile: {x: 2}\n", "input"),
    ],
)
def test_invalid_config(tmp_path, text, field):
    with pytest.raises(RiskRouteError) as excinfo:
        load_run_config(_write(tmp_path, text))
    assert excinfo.value.code == "CONFIG_INVALID"
    assert f"`{field}`" in excinfo.value.detail


def test_non_mapping_config(tmp_path):
    with pytest.raises(RiskRouteError) as excinfo:
        load_run_config(_write(tmp_path, "- a\n- b\n"))
    assert excinfo.value.code == "CONFIG_INVALID"


def test_missing_config(tmp_path):
    with pytest.raises(RiskRouteError) as excinfo:
        load_run_config(tmp_path / "missing.yaml")
    assert excinfo.value.code == "INPUT_NOT_FOUND"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("RISKROUTE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("RISKROUTE_DEFAULT_INPUT", "day15.txt")
    s = Settings()
    assert s.LOG_LEVEL == "DEBUG"
    assert s.DEFAULT_INPUT == "day15.txt"
