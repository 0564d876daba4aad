from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = Path(__file__).resolve().parent / "data"


def pytest_configure(config):
    # 确保本仓库根目录排在 sys.path 最前
    if str(PROJECT_ROOT) in sys.path:
        sys.path.remove(str(PROJECT_ROOT))
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def example_path() -> Path:
    return DATA_DIR / "example.txt"


@pytest.fixture
def example_rows() -> list[list[int]]:
    lines = (DATA_DIR / "example.txt").read_text(encoding="utf-8").split()
    return [[int(ch) for ch in line] for line in lines]


@pytest.fixture
def small_rows() -> list[list[int]]:
    return [
        [1, 1, 6, 3],
        [1, 3, 8, 1],
        [2, 1, 3, 6],
        [3, 6, 9, 4],
    ]
