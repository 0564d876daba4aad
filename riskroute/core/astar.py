"""
A* 最低风险路径搜索模块。

在 4 邻接代价网格上从 (0, 0) 搜索到目标格点：进入某格的代价等于该格的值，
起点自身的值不计入。open set 为二叉堆，允许重复条目（惰性删除），
visited 为与网格同尺寸的布尔数组。
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from ..exceptions import RiskRouteError
from ..logging_config import get_logger
from .grid import CostGrid, Position, read_risk_grid
from .tiling import expand_tiles

logger = get_logger(__name__)

# 四方向移动（下、右、上、左）
DIRECTIONS: tuple[Position, ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))

HEURISTICS = ("manhattan", "zero")

# 状态机
INIT = "init"
EXPANDING = "expanding"
DONE = "done"
NO_PATH = "no_path"
BUDGET_EXHAUSTED = "max_expansions_reached"


@dataclass
class SearchResult:
    cost: Optional[int]
    reachable: bool
    reason: Optional[str]
    expanded: int
    path: list[Position] = field(default_factory=list)


def heuristic_cost(position: Position, goal: Position) -> int:
    """
    曼哈顿距离启发函数。

    >>> heuristic_cost((1, 1), (3, 3))
    4
    """
    x, y = position
    goal_x, goal_y = goal
    return abs(goal_x - x) + abs(goal_y - y)


class FrontierSearch:
    """
    单次 A* 搜索的状态机：INIT -> EXPANDING -> DONE / NO_PATH。

    每次 step() 执行一次扩展，便于逐步检查 frontier；run() 执行到结束。
    frontier 条目为 (priority, cost, index, parent_index)，index = y * width + x。

    示例:
        ```python
        search = FrontierSearch(grid, goal=(9, 9))
        result = search.run()
        ```
    """

    def __init__(
        self,
        grid: CostGrid,
        goal: Optional[Position] = None,
        *,
        heuristic: str = "manhattan",
        early_exit: bool = True,
        max_expansions: Optional[int] = None,
    ):
        if heuristic not in HEURISTICS:
            raise ValueError(f"heuristic 必须是 {HEURISTICS} 之一，得到 {heuristic!r}")
        if max_expansions is not None and max_expansions < 1:
            raise ValueError("max_expansions 必须 >= 1")

        goal = grid.bottom_right if goal is None else (int(goal[0]), int(goal[1]))
        if not grid.in_bounds(*goal):
            raise RiskRouteError(
                "GOAL_OUT_OF_BOUNDS",
                "goal lies outside the grid",
                f"goal={goal}, grid_size=({grid.width}, {grid.height})",
            )

        self.grid = grid
        self.goal = goal
        self.heuristic = heuristic
        self.early_exit = early_exit
        self.max_expansions = max_expansions

        # 曼哈顿距离乘以 min(1, 最小格值)，含 0 代价格时仍保持可采纳与一致
        if heuristic == "manhattan":
            self.h_scale = min(1, int(grid.cells.min()))
        else:
            self.h_scale = 0

        self._costs = grid.flat()
        self.frontier: list[tuple[int, int, int, int]] = []
        self.visited = np.zeros(grid.width * grid.height, dtype=bool)
        self.parent = np.full(grid.width * grid.height, -1, dtype=np.int64)
        self.expanded = 0
        self.state = INIT
        self.cost: Optional[int] = None
        self._goal_index = grid.index(*goal)
        self._goal_parent = -1

    def _h(self, x: int, y: int) -> int:
        return self.h_scale * heuristic_cost((x, y), self.goal)

    def _start(self) -> None:
        origin = (0, 0)
        logger.debug(
            f"[A*] start: grid_size=({self.grid.width}, {self.grid.height}), goal={self.goal}, "
            f"heuristic={self.heuristic}, early_exit={self.early_exit}"
        )
        self.state = EXPANDING
        if self.goal == origin:
            self.cost = 0
            self.state = DONE
            return
        heapq.heappush(self.frontier, (self._h(*origin), 0, self.grid.index(*origin), -1))

    def step(self) -> str:
        """执行一次扩展并返回当前状态。"""
        if self.state == INIT:
            self._start()
            return self.state
        if self.state != EXPANDING:
            return self.state

        # 惰性删除：跳过已访问的重复条目
        while self.frontier and self.visited[self.frontier[0][2]]:
            heapq.heappop(self.frontier)

        if not self.frontier:
            self.state = NO_PATH
            logger.warning(f"[A*] frontier exhausted before reaching goal={self.goal}, expanded={self.expanded}")
            return self.state

        if self.max_expansions is not None and self.expanded >= self.max_expansions:
            self.state = BUDGET_EXHAUSTED
            logger.warning(f"[A*] max_expansions={self.max_expansions} reached before goal={self.goal}")
            return self.state

        _, cost, index, parent_index = heapq.heappop(self.frontier)
        self.visited[index] = True
        self.parent[index] = parent_index
        self.expanded += 1

        if index == self._goal_index:
            self.cost = cost
            self.state = DONE
            return self.state

        width = self.grid.width
        x, y = self.grid.position(index)
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if not self.grid.in_bounds(nx, ny):
                continue
            neighbor = ny * width + nx
            if self.visited[neighbor]:
                continue

            new_cost = cost + int(self._costs[neighbor])
            if self.early_exit and neighbor == self._goal_index:
                self.cost = new_cost
                self._goal_parent = index
                self.state = DONE
                return self.state

            heapq.heappush(self.frontier, (new_cost + self._h(nx, ny), new_cost, neighbor, index))

        return self.state

    def run(self) -> SearchResult:
        """执行到结束，返回带可达性与诊断信息的结果。"""
        while self.step() in (INIT, EXPANDING):
            pass

        if self.state != DONE:
            return SearchResult(None, False, self.state, self.expanded)

        path = self._reconstruct_path()
        logger.debug(f"[A*] done: cost={self.cost}, expanded={self.expanded}, path_len={len(path)}")
        return SearchResult(self.cost, True, None, self.expanded, path)

    def _reconstruct_path(self) -> list[Position]:
        path = [self.goal]
        # 提前终止时目标未出堆，其前驱记录在 _goal_parent
        node = self._goal_parent if self._goal_parent >= 0 else int(self.parent[self._goal_index])
        while node >= 0:
            path.append(self.grid.position(node))
            node = int(self.parent[node])
        path.reverse()
        return path


def lowest_cost_path_with_info(
    grid: CostGrid,
    goal: Optional[Position] = None,
    *,
    heuristic: str = "manhattan",
    early_exit: bool = True,
    max_expansions: Optional[int] = None,
) -> SearchResult:
    """
    在 grid 上从 (0, 0) 搜索到 goal（默认右下角），返回 SearchResult。

    失败原因：
      - no_path（frontier 耗尽）
      - max_expansions_reached
    """
    search = FrontierSearch(
        grid,
        goal,
        heuristic=heuristic,
        early_exit=early_exit,
        max_expansions=max_expansions,
    )
    return search.run()


def ensure_reachable(res: SearchResult) -> SearchResult:
    """不可达时按失败原因抛出 RiskRouteError（NO_PATH / MAX_EXPANSIONS），否则原样返回。"""
    if res.reachable:
        return res
    if res.reason == BUDGET_EXHAUSTED:
        raise RiskRouteError("MAX_EXPANSIONS", "search stopped before reaching the goal", f"expanded={res.expanded}")
    raise RiskRouteError("NO_PATH", "goal is unreachable", f"expanded={res.expanded}")


def lowest_cost_path(
    grid: CostGrid,
    goal: Optional[Position] = None,
    **options,
) -> int:
    """
    返回从 (0, 0) 到 goal 的最低总代价；不可达或超出扩展预算时抛出 RiskRouteError。
    """
    return ensure_reachable(lowest_cost_path_with_info(grid, goal, **options)).cost


def lowest_risk(
    rows,
    tile: tuple[int, int] = (1, 1),
    goal: Optional[Position] = None,
    **options,
) -> int:
    """
    平铺基础瓦片后求最低风险。

    >>> lowest_risk([[1, 1, 6, 3], [1, 3, 8, 1], [2, 1, 3, 6], [3, 6, 9, 4]])
    17
    """
    tile_x, tile_y = tile
    grid = expand_tiles(rows, tile_x, tile_y)
    return lowest_cost_path(grid, goal, **options)


def lowest_risk_from_file(path, tile: tuple[int, int] = (1, 1), **options) -> int:
    """读取文本网格文件并求最低风险。"""
    return lowest_risk(read_risk_grid(path), tile=tile, **options)


__all__ = [
    "DIRECTIONS",
    "HEURISTICS",
    "FrontierSearch",
    "SearchResult",
    "ensure_reachable",
    "heuristic_cost",
    "lowest_cost_path",
    "lowest_cost_path_with_info",
    "lowest_risk",
    "lowest_risk_from_file",
]
