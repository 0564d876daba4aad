#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
import sys
import uuid
from typing import Any, Dict, Optional, Sequence, Tuple

from riskroute.config.schema import PARTS, load_run_config, parse_tile, parse_xy
from riskroute.core.astar import HEURISTICS, ensure_reachable, lowest_cost_path_with_info
from riskroute.core.grid import read_risk_grid
from riskroute.core.tiling import expand_tiles
from riskroute.exceptions import RiskRouteError
from riskroute.logging_config import get_logger, set_level, set_run_id
from riskroute.settings import settings

logger = get_logger(__name__)


def _tile_arg(value: str) -> Tuple[int, int]:
    try:
        return parse_tile(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from err


def _goal_arg(value: str) -> Tuple[int, int]:
    try:
        return parse_xy(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from err


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1: {value!r}")
    return number


def _solve(
    input_path: str,
    tile: Tuple[int, int],
    goal: Optional[Tuple[int, int]],
    options: Dict[str, Any],
) -> Dict[str, Any]:
    base = read_risk_grid(input_path)
    grid = expand_tiles(base, *tile)
    res = ensure_reachable(lowest_cost_path_with_info(grid, goal, **options))
    logger.info(
        f"[SOLVE] {input_path}: tile={tile}, size=({grid.width}, {grid.height}), "
        f"cost={res.cost}, expanded={res.expanded}"
    )
    return {
        "input": str(input_path),
        "tile": list(tile),
        "goal": list(goal) if goal else list(grid.bottom_right),
        "cost": res.cost,
        "expanded": res.expanded,
        "path_len": len(res.path),
    }


def _emit(summary: Dict[str, Any], info: bool) -> None:
    if info:
        print(json.dumps(summary, ensure_ascii=False))
    else:
        print(summary["cost"])


def handle_solve(args: argparse.Namespace) -> int:
    tile = args.tile if args.tile is not None else PARTS[args.part]
    options = {
        "heuristic": args.heuristic,
        "early_exit": not args.no_early_exit,
        "max_expansions": args.max_expansions,
    }
    _emit(_solve(args.input, tile, args.goal, options), args.info)
    return 0


def handle_both(args: argparse.Namespace) -> int:
    for part in sorted(PARTS):
        summary = _solve(args.input, PARTS[part], None, {})
        print(summary["cost"])
    return 0


def handle_run(args: argparse.Namespace) -> int:
    cfg = load_run_config(args.config)
    summary = _solve(cfg.input, cfg.tile_factors(), cfg.search.goal_xy(), cfg.search.options())
    _emit(summary, args.info)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="riskroute", description="Lowest total risk path across a risk grid")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve = subparsers.add_parser("solve", help="求单个输入文件的最低风险")
    solve.add_argument("input", nargs="?", default=settings.DEFAULT_INPUT, help="风险网格文本文件")
    solve.add_argument("--part", type=int, choices=sorted(PARTS), default=1, help="谜题分段（2 = 5x5 平铺）")
    solve.add_argument("--tile", type=_tile_arg, default=None, help="瓦片倍数 WxH，覆盖 --part")
    solve.add_argument("--goal", type=_goal_arg, default=None, help="目标格点 x,y（默认右下角）")
    solve.add_argument("--heuristic", choices=HEURISTICS, default="manhattan", help="启发函数")
    solve.add_argument("--no-early-exit", action="store_true", help="目标出堆时才终止")
    solve.add_argument("--max-expansions", type=_positive_int, default=None, help="最大扩展次数")
    solve.add_argument("--info", action="store_true", help="输出 JSON 诊断信息")

    both = subparsers.add_parser("both", help="依次输出 part 1 与 part 2 的答案")
    both.add_argument("input", nargs="?", default=settings.DEFAULT_INPUT, help="风险网格文本文件")

    run = subparsers.add_parser("run", help="按 YAML 配置运行")
    run.add_argument("config", help="YAML 配置文件")
    run.add_argument("--info", action="store_true", help="输出 JSON 诊断信息")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_level(settings.LOG_LEVEL)
    set_run_id(uuid.uuid4().hex[:8])
    try:
        if args.command == "solve":
            return handle_solve(args)
        if args.command == "both":
            return handle_both(args)
        if args.command == "run":
            return handle_run(args)
    except RiskRouteError as err:
        logger.error("%s", err)
        if getattr(args, "info", False):
            print(json.dumps({"error": err.to_dict()}, ensure_ascii=False), file=sys.stderr)
        else:
            print(f"error: {err}", file=sys.stderr)
        return 2
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
