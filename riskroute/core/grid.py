"""
风险网格模块。

提供 CostGrid 数据类以及从文本读取风险网格的功能。
文本格式：每行一个网格行，由连续的单个数字字符组成（无分隔符）。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from ..exceptions import RiskRouteError
from ..logging_config import get_logger

logger = get_logger(__name__)

Position = tuple[int, int]  # (x, y)，x 为列，y 为行


@dataclass(frozen=True)
class CostGrid:
    """不可变的矩形代价网格，cells[y, x] 为进入该格的代价。"""

    cells: np.ndarray  # int64, shape = (height, width)

    def __post_init__(self) -> None:
        src = np.asarray(self.cells)
        if src.dtype == np.bool_ or not (
            np.issubdtype(src.dtype, np.integer) or np.issubdtype(src.dtype, np.floating)
        ):
            raise RiskRouteError("GRID_INVALID", "grid costs must be integers", f"dtype={src.dtype}")
        # 浮点输入只接受有限的整数值，禁止静默截断
        if np.issubdtype(src.dtype, np.floating) and not (
            np.all(np.isfinite(src)) and np.all(src == np.floor(src))
        ):
            raise RiskRouteError("GRID_INVALID", "grid costs must be finite integers")
        arr = np.array(src, dtype=np.int64, copy=True)
        if arr.ndim != 2 or arr.size == 0:
            raise RiskRouteError("GRID_INVALID", "grid must be a non-empty 2-D table", f"shape={arr.shape}")
        if np.any(arr < 0):
            raise RiskRouteError("GRID_INVALID", "grid costs must be non-negative")
        arr.setflags(write=False)
        object.__setattr__(self, "cells", arr)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "CostGrid":
        """从嵌套列表构建网格，校验非空与矩形。"""
        if len(rows) == 0 or len(rows[0]) == 0:
            raise RiskRouteError("GRID_INVALID", "grid must have at least one row and one column")
        width = len(rows[0])
        for y, row in enumerate(rows):
            if len(row) != width:
                raise RiskRouteError(
                    "GRID_INVALID",
                    "grid rows must all have the same length",
                    f"row {y} has {len(row)} cells, expected {width}",
                )
        return cls(np.asarray(rows))

    @property
    def width(self) -> int:
        return int(self.cells.shape[1])

    @property
    def height(self) -> int:
        return int(self.cells.shape[0])

    @property
    def shape(self) -> tuple[int, int]:
        """返回 (height, width)。"""
        return self.height, self.width

    @property
    def bottom_right(self) -> Position:
        return self.width - 1, self.height - 1

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def value(self, x: int, y: int) -> int:
        return int(self.cells[y, x])

    def index(self, x: int, y: int) -> int:
        """一维缓冲区下标 y * width + x。"""
        return y * self.width + x

    def position(self, index: int) -> Position:
        y, x = divmod(index, self.width)
        return x, y

    def flat(self) -> np.ndarray:
        """按 y * width + x 排列的一维只读视图。"""
        return self.cells.reshape(-1)

    def to_rows(self) -> list[list[int]]:
        return self.cells.tolist()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CostGrid):
            return NotImplemented
        return self.cells.shape == other.cells.shape and bool(np.array_equal(self.cells, other.cells))

    def __hash__(self) -> int:
        return hash((self.cells.shape, self.cells.tobytes()))


def parse_row(line: str) -> list[int]:
    """
    解析单行数字串。

    >>> parse_row("1163751742")
    [1, 1, 6, 3, 7, 5, 1, 7, 4, 2]
    """
    return [int(ch) for ch in line]


def parse_risk_rows(lines: Iterable[str]) -> list[list[int]]:
    """
    解析多行文本为整数行；空行跳过，非数字字符报错并给出行号。
    """
    rows: list[list[int]] = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        if not (line.isascii() and line.isdigit()):
            raise RiskRouteError("GRID_PARSE", "risk rows must contain only digits", f"line {lineno}: {line!r}")
        rows.append(parse_row(line))
    return rows


def read_risk_grid(path: str | Path) -> CostGrid:
    """
    从文本文件读取风险网格。

    Raises:
        RiskRouteError: 文件不存在（INPUT_NOT_FOUND）、内容无法解析（GRID_PARSE）
            或网格非矩形/为空（GRID_INVALID）
    """
    p = Path(path)
    if not p.is_file():
        raise RiskRouteError("INPUT_NOT_FOUND", "input file does not exist", str(p))

    rows = parse_risk_rows(p.read_text(encoding="utf-8").splitlines())
    grid = CostGrid.from_rows(rows)
    logger.debug(f"[GRID] loaded {p.name}: width={grid.width}, height={grid.height}")
    return grid


__all__ = ["CostGrid", "Position", "parse_row", "parse_risk_rows", "read_risk_grid"]
