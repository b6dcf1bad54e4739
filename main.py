"""TickReplay 统一命令行入口。

该模块提供单一入口 `main.py`，通过子命令驱动不同任务：

- `sweep`：全策略参数扫描（默认任务）。加载数据 -> 跑完整网格 -> 排名 -> 写报告。
- `single`：单策略回测。跑一个参数组合，输出统计与成交明细。
- `indicators`：按配置计算向量化因子并导出 CSV。
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from algo.factors.registry import apply_factors, build_factors
from algo.strategy.registry import build_strategy
from analysis.reports.report import (
    export_indicators_csv,
    export_results_csv,
    export_trades_csv,
    format_strategy_stats,
    write_master_report,
    write_single_report,
)
from engine.backtest_engine import BacktestEngine
from engine.batch_backtest import SweepEngine
from market_data.loader import load_ticks_from_csv
from market_data.tick_sequence import TickSequence
from shared.config.config_loader import load_config
from shared.config.schema import AppConfig
from shared.utils.logging import setup_logger
from utils.param_search import resolve_grid

_LOGGER = setup_logger("main")


@dataclass
class CliArgs:
    """定义命令行参数结构。

    config: 配置文件路径
    task: 要运行的任务类型 (sweep/single/indicators)
    未显式传入的可选项为 None，表示沿用配置文件里的值。
    """
    config: str
    task: str
    data: str | None = None
    workers: int | None = None
    families: list[str] | None = None
    output_dir: str | None = None
    top_n: int | None = None
    no_export: bool = False
    family: str | None = None
    params: list[str] = field(default_factory=list)


def _split_families(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def build_parser() -> argparse.ArgumentParser:
    """构建 CLI 参数解析器。

    Returns
    -------
    argparse.ArgumentParser
        配置好的参数解析器。
    """
    parser = argparse.ArgumentParser(prog="tickreplay", description="TickReplay 策略回放与参数扫描")

    def _add_common_args(p: argparse.ArgumentParser, *, default: Any) -> None:
        p.add_argument("--config", default=default, help="配置文件路径 (默认: config/config.yml)")
        p.add_argument("--data", default=argparse.SUPPRESS, help="CSV 数据路径（覆盖 data.path）")
        p.add_argument("--output-dir", default=argparse.SUPPRESS, help="输出目录（覆盖 report.output_dir）")
        p.add_argument("--no-export", action="store_true", default=argparse.SUPPRESS, help="不导出 CSV")

    # 允许 `python main.py --config ... sweep`（全局）与 `python main.py sweep --config ...`（子命令）
    _add_common_args(parser, default="config/config.yml")

    sub = parser.add_subparsers(dest="task")

    p_sweep = sub.add_parser("sweep", help="全策略参数扫描（默认）")
    _add_common_args(p_sweep, default=argparse.SUPPRESS)
    p_sweep.add_argument("--workers", type=int, default=None, help="进程数；1 顺序执行，<=0 自动")
    p_sweep.add_argument(
        "--families",
        type=_split_families,
        default=None,
        help="只跑这些策略族，逗号分隔，如 sma,rsi",
    )
    p_sweep.add_argument("--top-n", type=int, default=None, help="报告榜单长度")

    p_single = sub.add_parser("single", help="单策略回测")
    _add_common_args(p_single, default=argparse.SUPPRESS)
    p_single.add_argument("--family", required=True, help="策略族名称，如 sma")
    p_single.add_argument(
        "--param",
        dest="params",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="策略参数，可重复，如 --param period=20",
    )

    p_ind = sub.add_parser("indicators", help="计算向量化因子并导出")
    _add_common_args(p_ind, default=argparse.SUPPRESS)

    return parser


def parse_args(argv: list[str] | None = None) -> CliArgs:
    """解析命令行参数。

    Parameters
    ----------
    argv:
        传入的参数列表；为 None 时读取 sys.argv。

    Returns
    -------
    CliArgs
        解析后的参数对象。
    """
    parser = build_parser()
    ns = parser.parse_args(argv)
    task = ns.task or "sweep"
    return CliArgs(
        config=str(getattr(ns, "config", "config/config.yml")),
        task=task,
        data=getattr(ns, "data", None),
        workers=getattr(ns, "workers", None),
        families=getattr(ns, "families", None),
        output_dir=getattr(ns, "output_dir", None),
        top_n=getattr(ns, "top_n", None),
        no_export=bool(getattr(ns, "no_export", False)),
        family=getattr(ns, "family", None),
        params=list(getattr(ns, "params", []) or []),
    )


def parse_param_pairs(pairs: list[str]) -> dict[str, Any]:
    """`key=value` 列表 -> dict；value 按 YAML 标量解析（20 -> int，2.0 -> float）。"""
    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid --param (expected key=value): {pair}")
        params[key] = yaml.safe_load(raw) if raw.strip() else None
    return params


def _load_ticks(args: CliArgs, cfg: AppConfig) -> tuple[TickSequence, str]:
    path = args.data or cfg.data.path
    if not path:
        raise ValueError("No data file: set data.path in config or pass --data")
    ticks = load_ticks_from_csv(
        path,
        volume_scale=cfg.data.volume_scale,
        initial_capacity=cfg.data.initial_capacity,
    )
    return ticks, str(path)


def run_sweep(args: CliArgs, cfg: AppConfig) -> dict[str, Any]:
    ticks, _ = _load_ticks(args, cfg)
    output_dir = args.output_dir or cfg.report.output_dir
    top_n = args.top_n or cfg.report.top_n
    workers = args.workers if args.workers is not None else cfg.runner.workers
    families = args.families or cfg.runner.families or None

    engine = SweepEngine(
        ticks,
        grid=resolve_grid(cfg.grid_overrides()),
        families=families,
        workers=workers,
    )
    res = engine.run()
    ranked = res.artifacts["ranked"]

    _LOGGER.info("Top %s:", min(top_n, len(ranked)))
    for i, r in enumerate(ranked[:top_n], start=1):
        _LOGGER.info(
            "  %2d. %-25s P&L=%12.2f 胜率=%5.1f%% Sharpe=%6.2f 交易=%s",
            i,
            r.strategy_name,
            r.total_pl,
            r.win_rate,
            r.sharpe_ratio,
            r.total_trades,
        )

    summary = dict(res.summary)
    summary["task"] = "sweep"
    summary["top"] = [r.strategy_name for r in ranked[:top_n]]
    summary["report"] = str(write_master_report(ranked, ticks, output_dir=output_dir, top_n=top_n))
    summary["csv"] = None
    if cfg.report.export_csv and not args.no_export:
        summary["csv"] = str(export_results_csv(ranked, output_dir=output_dir))
    return summary


def run_single(args: CliArgs, cfg: AppConfig) -> dict[str, Any]:
    if not args.family:
        raise ValueError("single task requires --family")
    strategy = build_strategy(args.family, parse_param_pairs(args.params))
    ticks, source = _load_ticks(args, cfg)
    output_dir = args.output_dir or cfg.report.output_dir

    res = BacktestEngine(ticks, strategy).run()
    result = res.artifacts["result"]
    trades = res.artifacts["trades"]
    print(format_strategy_stats(result))

    summary = dict(res.summary)
    summary["task"] = "single"
    summary["report"] = str(
        write_single_report(
            result,
            trades,
            output_dir,
            source=Path(source).name,
            sample_trades=cfg.report.sample_trades,
        )
    )
    summary["csv"] = None
    if cfg.report.export_csv and not args.no_export:
        summary["csv"] = str(export_trades_csv(result.strategy_name, trades, output_dir=output_dir))
    return summary


def run_indicators(args: CliArgs, cfg: AppConfig) -> dict[str, Any]:
    factors = build_factors(cfg.factors)
    if not factors:
        raise ValueError("No factors configured (config key: factors)")
    ticks, _ = _load_ticks(args, cfg)
    output_dir = args.output_dir or cfg.report.output_dir

    df = apply_factors(ticks.to_frame(), factors)
    columns = [c for c in df.columns if c not in ("ts", "price", "volume")]
    summary: dict[str, Any] = {"task": "indicators", "rows": len(df), "columns": columns, "csv": None}
    if not args.no_export:
        summary["csv"] = str(export_indicators_csv(df, output_dir=output_dir))
    return summary


def main(argv: list[str] | None = None) -> Any:
    """程序主入口。

    Parameters
    ----------
    argv:
        可选的参数列表；为 None 时读取 sys.argv。

    Returns
    -------
    Any
        对应子命令的 summary dict。
    """
    args = parse_args(argv)
    runners = {"sweep": run_sweep, "single": run_single, "indicators": run_indicators}
    if args.task not in runners:
        raise ValueError(f"Unknown task: {args.task}")

    try:
        cfg = load_config(args.config)
        return runners[args.task](args, cfg)
    except (ValueError, FileNotFoundError) as exc:
        _LOGGER.error("任务 %s 失败: %s", args.task, exc)
        raise


if __name__ == "__main__":
    main()
