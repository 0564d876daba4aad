from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import RiskRouteError

# 谜题分段 -> 瓦片倍数
PARTS: Dict[int, Tuple[int, int]] = {1: (1, 1), 2: (5, 5)}


def format_validation_error(err: ValidationError, source: str) -> str:
    parts: List[str] = []
    for issue in err.errors():
        location = ".".join(str(item) for item in issue.get("loc", ()))
        message = issue.get("msg", "")
        parts.append(f"- field `{location}`: {message}")
    details = "\n".join(parts) if parts else str(err)
    return f"[SCHEMA] validation failed for {source}\n{details}"


def parse_xy(value: str) -> Tuple[int, int]:
    parts = value.split(",", 1)
    if len(parts) != 2:
        raise ValueError(f"Invalid x,y pair: {value!r}")
    return int(parts[0].strip()), int(parts[1].strip())


def parse_tile(value: str) -> Tuple[int, int]:
    """Parse ``"5x5"`` (or ``"5,5"``) into tile factors."""
    normalized = value.lower().replace(",", "x")
    parts = normalized.split("x", 1)
    if len(parts) != 2:
        raise ValueError(f"Invalid tile spec: {value!r}")
    tile_x, tile_y = int(parts[0].strip()), int(parts[1].strip())
    if tile_x < 1 or tile_y < 1:
        raise ValueError(f"Tile factors must be positive: {value!r}")
    return tile_x, tile_y


class TileSection(BaseModel):
    x: int = Field(1, ge=1, description="Tile copies along x")
    y: int = Field(1, ge=1, description="Tile copies along y")

    def as_tuple(self) -> Tuple[int, int]:
        return self.x, self.y


class SearchSection(BaseModel):
    heuristic: str = Field("manhattan", description="Frontier heuristic: manhattan or zero")
    early_exit: bool = Field(True, description="Stop when the goal is first generated")
    max_expansions: Optional[int] = Field(None, ge=1, description="Expansion budget")
    goal: Optional[str] = Field(None, description="Goal coordinate x,y (default bottom-right)")

    @field_validator("heuristic")
    @classmethod
    def _validate_heuristic(cls, value: str) -> str:
        lowered = value.lower()
        if lowered not in {"manhattan", "zero"}:
            raise ValueError("heuristic must be manhattan or zero")
        return lowered

    @field_validator("goal")
    @classmethod
    def _validate_goal(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        x, y = parse_xy(value)
        if x < 0 or y < 0:
            raise ValueError("goal coordinates must be non-negative")
        return f"{x},{y}"

    def goal_xy(self) -> Optional[Tuple[int, int]]:
        return parse_xy(self.goal) if self.goal else None

    def options(self) -> Dict[str, Any]:
        return {
            "heuristic": self.heuristic,
            "early_exit": self.early_exit,
            "max_expansions": self.max_expansions,
        }


class RunConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input: str = Field(..., description="Risk grid text file")
    part: Optional[int] = Field(None, description="Puzzle part preset (1 or 2)")
    tile: Optional[TileSection] = None
    search: SearchSection = Field(default_factory=SearchSection)

    @field_validator("part")
    @classmethod
    def _validate_part(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return None
        if value not in PARTS:
            raise ValueError(f"part must be one of {sorted(PARTS)}")
        return value

    def tile_factors(self) -> Tuple[int, int]:
        """显式 tile 优先，其次 part 预设，默认 (1, 1)。"""
        if self.tile is not None:
            return self.tile.as_tuple()
        if self.part is not None:
            return PARTS[self.part]
        return 1, 1


def load_run_config(path: str | Path) -> RunConfig:
    """
    读取 YAML 运行配置并校验；相对 input 路径按配置文件所在目录解析。
    """
    p = Path(path)
    if not p.is_file():
        raise RiskRouteError("INPUT_NOT_FOUND", "config file does not exist", str(p))
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise RiskRouteError("CONFIG_INVALID", "config is not valid YAML", str(exc)) from exc
    if not isinstance(data, dict):
        raise RiskRouteError("CONFIG_INVALID", "config root must be a mapping", str(p))

    try:
        cfg = RunConfig.model_validate(data)
    except ValidationError as exc:
        raise RiskRouteError("CONFIG_INVALID", "config failed validation", format_validation_error(exc, str(p))) from exc

    input_path = Path(cfg.input)
    if not input_path.is_absolute():
        cfg.input = str(p.parent / input_path)
    return cfg


__all__ = [
    "PARTS",
    "RunConfig",
    "SearchSection",
    "TileSection",
    "format_validation_error",
    "load_run_config",
    "parse_tile",
    "parse_xy",
]
