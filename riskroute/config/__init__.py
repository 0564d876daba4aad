"""
配置模块。

提供 YAML 运行配置的 schema 与谜题分段预设。
"""

from .schema import (
    PARTS,
    RunConfig,
    SearchSection,
    TileSection,
    load_run_config,
    parse_tile,
    parse_xy,
)

__all__ = [
    "PARTS",
    "RunConfig",
    "SearchSection",
    "TileSection",
    "load_run_config",
    "parse_tile",
    "parse_xy",
]
