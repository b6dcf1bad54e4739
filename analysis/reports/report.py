"""回测报告生成（文本 + CSV）。

报告只消费不可变的结果记录（StrategyResult / Trade），不接触策略内部状态。
文件名统一带 `YYYYmmdd_HHMMSS` 时间戳，输出目录按需创建。
"""

from __future__ import annotations

import csv
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Sequence

import pandas as pd

from market_data.tick_sequence import TickSequence
from shared.models.models import StrategyResult, Trade
from shared.utils.logging import setup_logger
from utils.metrics import rank_results

_LOGGER = setup_logger("report")

_RULE = "═" * 67
_THIN_RULE = "─" * 70

RESULT_CSV_FIELDS = [
    "Strategy",
    "Total Trades",
    "Profitable",
    "Win Rate %",
    "Total P&L",
    "Avg P&L",
    "Largest Win",
    "Largest Loss",
    "Sharpe Ratio",
    "Max Drawdown",
]

TRADE_CSV_FIELDS = [
    "entry_time",
    "entry_price",
    "exit_time",
    "exit_price",
    "profit_loss",
    "profit_loss_pct",
]


def _stamp(generated_at: datetime | None) -> str:
    return (generated_at or datetime.now()).strftime("%Y%m%d_%H%M%S")


def _slug(label: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "_", label).strip("_").lower() or "strategy"


def _pct(part: int, total: int) -> float:
    return part * 100.0 / total if total else 0.0


def _write_csv(path: Path, rows: list[dict[str, Any]], fieldnames: list[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)


def _section(lines: list[str], title: str) -> None:
    lines.append(_RULE)
    lines.append(title)
    lines.append(_RULE)


def _ranking_table(lines: list[str], rows: Sequence[StrategyResult]) -> None:
    lines.append(f"{'Strategy':<25} {'Win%':>8} {'Total P&L':>12} {'Sharpe':>10} {'Trades':>10}")
    lines.append(_THIN_RULE)
    for r in rows:
        lines.append(
            f"{r.strategy_name:<25} {r.win_rate:7.1f}% ${r.total_pl:>10,.0f} "
            f"{r.sharpe_ratio:9.2f} {r.total_trades:>10,}"
        )
    lines.append("")


def format_strategy_stats(result: StrategyResult) -> str:
    """单个策略的多行统计摘要。"""
    lines = [
        f"Strategy: {result.strategy_name}",
        f"  Total Trades:      {result.total_trades:,}",
        f"  Profitable Trades: {result.profitable_trades:,} ({result.win_rate:.1f}%)",
        f"  Total P&L:         ${result.total_pl:,.2f}",
        f"  Avg P&L / Trade:   ${result.avg_pl:,.2f}",
        f"  Largest Win:       ${result.largest_win:,.2f}",
        f"  Largest Loss:      ${result.largest_loss:,.2f}",
        f"  Sharpe Ratio:      {result.sharpe_ratio:.2f}",
        f"  Max Drawdown:      ${result.max_drawdown:,.2f}",
    ]
    return "\n".join(lines)


def _date_range(ticks: TickSequence) -> str:
    first, last = ticks.first(), ticks.last()
    if first is None or last is None:
        return "n/a"
    return f"{first.dt:%Y-%m-%d} to {last.dt:%Y-%m-%d}"


def build_master_report(
    results: Iterable[StrategyResult],
    ticks: TickSequence,
    top_n: int = 10,
    generated_at: datetime | None = None,
) -> str:
    """扫描总报告：总体统计、最好/最差 N 名、关键结论。

    Parameters
    ----------
    results:
        所有参数组合的结果（顺序无关，内部按总盈亏排序）。
    ticks:
        回放所用的数据，用于展示规模与日期范围；允许为空。
    top_n:
        榜单长度。
    generated_at:
        报告时间；None 取当前本地时间。
    """
    ranked = rank_results(results)
    total = len(ranked)
    profitable = sum(1 for r in ranked if r.total_pl > 0)
    unprofitable = total - profitable
    generated = generated_at or datetime.now()

    lines: list[str] = []
    lines.append("╔═══════════════════════════════════════════════════════════════════╗")
    lines.append("║          TICKREPLAY - COMPREHENSIVE STRATEGY ANALYSIS             ║")
    lines.append("╚═══════════════════════════════════════════════════════════════════╝")
    lines.append("")
    lines.append(f"Generated: {generated:%Y-%m-%d %H:%M:%S}")
    lines.append(f"Dataset: {len(ticks):,} ticks")
    lines.append(f"Date Range: {_date_range(ticks)}")
    lines.append("")

    _section(lines, "OVERALL SUMMARY")
    lines.append(f"  Total Strategies Tested: {total}")
    lines.append(f"  Profitable: {profitable} ({_pct(profitable, total):.1f}%)")
    lines.append(f"  Unprofitable: {unprofitable} ({_pct(unprofitable, total):.1f}%)")
    lines.append("")

    _section(lines, f"TOP {top_n} BEST PERFORMERS")
    lines.append("")
    _ranking_table(lines, ranked[:top_n])

    _section(lines, f"WORST {top_n} PERFORMERS")
    lines.append("")
    _ranking_table(lines, list(reversed(ranked[-top_n:])) if ranked else [])

    _section(lines, "KEY FINDINGS")
    if ranked:
        best, worst = ranked[0], ranked[-1]
        lines.append(f"Best Strategy: {best.strategy_name}")
        lines.append(
            f"   P&L: ${best.total_pl:,.2f} | Win Rate: {best.win_rate:.1f}% | Sharpe: {best.sharpe_ratio:.2f}"
        )
        lines.append("")
        lines.append(f"Worst Strategy: {worst.strategy_name}")
        lines.append(f"   P&L: ${worst.total_pl:,.2f} | Win Rate: {worst.win_rate:.1f}%")
        lines.append("")
        lines.append(
            f"{unprofitable}/{total} ({_pct(unprofitable, total):.0f}%) strategies lost money"
        )
    else:
        lines.append("No strategies were tested.")
    lines.append("")
    lines.append(_RULE)
    return "\n".join(lines) + "\n"


def write_master_report(
    results: Iterable[StrategyResult],
    ticks: TickSequence,
    output_dir: str | Path = "results",
    top_n: int = 10,
    generated_at: datetime | None = None,
) -> Path:
    generated = generated_at or datetime.now()
    path = Path(output_dir) / f"master_report_{_stamp(generated)}.txt"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        build_master_report(results, ticks, top_n=top_n, generated_at=generated),
        encoding="utf-8",
    )
    _LOGGER.info("总报告已保存: %s", path)
    return path


def export_results_csv(
    results: Iterable[StrategyResult],
    output_dir: str | Path = "results",
    generated_at: datetime | None = None,
) -> Path:
    """按总盈亏降序导出所有结果，数值保留两位小数。"""
    rows = [
        {
            "Strategy": r.strategy_name,
            "Total Trades": r.total_trades,
            "Profitable": r.profitable_trades,
            "Win Rate %": f"{r.win_rate:.2f}",
            "Total P&L": f"{r.total_pl:.2f}",
            "Avg P&L": f"{r.avg_pl:.2f}",
            "Largest Win": f"{r.largest_win:.2f}",
            "Largest Loss": f"{r.largest_loss:.2f}",
            "Sharpe Ratio": f"{r.sharpe_ratio:.2f}",
            "Max Drawdown": f"{r.max_drawdown:.2f}",
        }
        for r in rank_results(results)
    ]
    path = Path(output_dir) / f"all_strategies_{_stamp(generated_at)}.csv"
    _write_csv(path, rows, RESULT_CSV_FIELDS)
    _LOGGER.info("CSV 已导出: %s (%s 行)", path, len(rows))
    return path


def build_single_report(
    result: StrategyResult,
    trades: Sequence[Trade],
    *,
    source: str = "",
    sample_trades: int = 20,
    generated_at: datetime | None = None,
) -> str:
    generated = generated_at or datetime.now()
    lines: list[str] = []
    lines.append("╔════════════════════════════════════════════════════════════╗")
    lines.append("║           TickReplay Backtest Report                       ║")
    lines.append("╚════════════════════════════════════════════════════════════╝")
    lines.append("")
    lines.append(f"Generated: {generated:%Y-%m-%d %H:%M:%S}")
    if source:
        lines.append(f"Data Source: {source}")
    lines.append(f"Strategy: {result.strategy_name}")
    lines.append("")
    lines.append(format_strategy_stats(result))
    lines.append("")

    sample = list(trades[:sample_trades])
    if sample:
        lines.append("─" * 61)
        lines.append(f"Sample Trades (First {len(sample)}):")
        lines.append("─" * 61)
        for t in sample:
            lines.append("Trade:")
            lines.append(f"  Entry: {t.entry_dt:%Y-%m-%d %H:%M} @ ${t.entry_price:.2f}")
            lines.append(f"  Exit:  {t.exit_dt:%Y-%m-%d %H:%M} @ ${t.exit_price:.2f}")
            lines.append(f"  P&L:   ${t.profit_loss:+.2f}")
            lines.append("")
    return "\n".join(lines) + "\n"


def write_single_report(
    result: StrategyResult,
    trades: Sequence[Trade],
    output_dir: str | Path = "results",
    *,
    source: str = "",
    sample_trades: int = 20,
    generated_at: datetime | None = None,
) -> Path:
    generated = generated_at or datetime.now()
    path = Path(output_dir) / f"backtest_{_slug(result.strategy_name)}_{_stamp(generated)}.txt"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        build_single_report(
            result, trades, source=source, sample_trades=sample_trades, generated_at=generated
        ),
        encoding="utf-8",
    )
    _LOGGER.info("单策略报告已保存: %s", path)
    return path


def export_trades_csv(
    strategy_name: str,
    trades: Iterable[Trade],
    output_dir: str | Path = "results",
    generated_at: datetime | None = None,
) -> Path:
    rows = [
        {
            "entry_time": t.entry_dt.isoformat(),
            "entry_price": t.entry_price,
            "exit_time": t.exit_dt.isoformat(),
            "exit_price": t.exit_price,
            "profit_loss": f"{t.profit_loss:.2f}",
            "profit_loss_pct": f"{t.profit_loss_pct:.2f}",
        }
        for t in trades
    ]
    path = Path(output_dir) / f"trades_{_slug(strategy_name)}_{_stamp(generated_at)}.csv"
    _write_csv(path, rows, TRADE_CSV_FIELDS)
    _LOGGER.info("交易明细已导出: %s (%s 笔)", path, len(rows))
    return path


def export_indicators_csv(
    df: pd.DataFrame,
    output_dir: str | Path = "results",
    generated_at: datetime | None = None,
) -> Path:
    """导出向量化因子结果（含 UTC 时间列）。"""
    out = df.copy()
    out.insert(1, "time", pd.to_datetime(out["ts"], unit="ns", utc=True))
    path = Path(output_dir) / f"indicators_{_stamp(generated_at)}.csv"
    path.parent.mkdir(parents=True, exist_ok=True)
    out.to_csv(path, index=False)
    _LOGGER.info("因子已导出: %s (%s 行, %s 列)", path, len(out), len(out.columns))
    return path
