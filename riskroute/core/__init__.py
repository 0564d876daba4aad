"""
riskroute core module.

包含风险网格、瓦片平铺、A* 最低风险搜索等核心功能。
"""

__all__ = ["grid", "tiling", "astar"]
