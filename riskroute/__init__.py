"""riskroute package initialisation helpers."""

from __future__ import annotations

from .core.astar import lowest_cost_path, lowest_risk, lowest_risk_from_file
from .core.grid import CostGrid, read_risk_grid
from .core.tiling import expand_tiles
from .exceptions import RiskRouteError

__version__ = "0.1.0"

__all__ = [
    "CostGrid",
    "RiskRouteError",
    "expand_tiles",
    "lowest_cost_path",
    "lowest_risk",
    "lowest_risk_from_file",
    "read_risk_grid",
]
