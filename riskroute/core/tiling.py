"""
网格平铺模块。

将基础风险瓦片在 x / y 方向复制，每远离原点瓦片一步风险加一，9 之后回绕到 1。
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from ..exceptions import RiskRouteError
from ..logging_config import get_logger
from .grid import CostGrid

logger = get_logger(__name__)

MAX_RISK = 9


def wrap_risk(risk, steps):
    """
    风险值加 steps 后回绕到 [1, 9]。

    同时支持标量和 numpy 数组。

    >>> wrap_risk(9, 1)
    1
    """
    return (risk + steps - 1) % MAX_RISK + 1


def _check_tile(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        raise RiskRouteError("TILE_INVALID", f"{name} must be a positive integer", f"got {value!r}")
    return int(value)


def expand_tiles(
    base: Union[CostGrid, Sequence[Sequence[int]]],
    tile_x: int = 1,
    tile_y: int = 1,
) -> CostGrid:
    """
    生成 (width * tile_x) x (height * tile_y) 的完整代价网格。

    先沿 x 方向复制每一行（按列瓦片序号递增），再把得到的行沿 y 方向复制
    （按行瓦片序号递增）。瓦片 (i, j) 中基础值 v 的格子最终为
    ((v + i + j - 1) mod 9) + 1。

    Args:
        base: 基础瓦片（CostGrid 或嵌套列表）
        tile_x: x 方向瓦片数，>= 1
        tile_y: y 方向瓦片数，>= 1

    Returns:
        新的 CostGrid；tile 为 (1, 1) 时与 base 相等

    Raises:
        RiskRouteError: tile 数小于 1（TILE_INVALID）；需要平铺但基础值不在 [1, 9]（GRID_INVALID）
    """
    tile_x = _check_tile("tile_x", tile_x)
    tile_y = _check_tile("tile_y", tile_y)
    grid = base if isinstance(base, CostGrid) else CostGrid.from_rows(base)

    if tile_x == 1 and tile_y == 1:
        return grid

    cells = grid.cells
    if cells.min() < 1 or cells.max() > MAX_RISK:
        raise RiskRouteError(
            "GRID_INVALID",
            f"tiled risk levels must lie in [1, {MAX_RISK}]",
            f"got range [{int(cells.min())}, {int(cells.max())}]",
        )
    # x 方向：第 i 份拷贝加 i
    row_band = np.concatenate([wrap_risk(cells, i) for i in range(tile_x)], axis=1)
    # y 方向：第 j 份拷贝在 x 结果基础上再加 j
    expanded = np.concatenate([wrap_risk(row_band, j) for j in range(tile_y)], axis=0)

    logger.debug(
        f"[TILE] expanded {grid.width}x{grid.height} by ({tile_x}, {tile_y}) "
        f"-> {expanded.shape[1]}x{expanded.shape[0]}"
    )
    return CostGrid(expanded)


__all__ = ["MAX_RISK", "expand_tiles", "wrap_risk"]
