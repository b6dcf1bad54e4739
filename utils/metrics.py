"""回测绩效指标计算（按成交笔统计）。"""

from __future__ import annotations

from statistics import mean, pstdev
from typing import Iterable, Sequence

from shared.models.models import StrategyResult, Trade


def compute_sharpe(returns: Sequence[float]) -> float:
    """逐笔收益率（%）的 均值 / 总体标准差；无风险利率视为 0。

    这是按成交笔的近似 Sharpe，不做年化；样本为空或 σ = 0 时返回 0。
    """
    if not returns:
        return 0.0
    mu = mean(returns)
    sigma = pstdev(returns, mu)
    return mu / sigma if sigma > 0 else 0.0


def compute_max_drawdown(trades: Iterable[Trade]) -> float:
    """按成交顺序累计已实现盈亏，返回最大回撤（<= 0，绝对金额）。"""
    equity = 0.0
    peak = 0.0
    max_dd = 0.0
    for t in trades:
        equity += t.profit_loss
        peak = max(peak, equity)
        max_dd = min(max_dd, equity - peak)
    return max_dd


def analyze_trades(name: str, trades: Sequence[Trade]) -> StrategyResult:
    """把一个策略实例的成交账本归约为 StrategyResult（纯函数）。

    Parameters
    ----------
    name:
        策略展示名，如 `SMA(20)`。
    trades:
        按平仓顺序排列的成交账本。

    Returns
    -------
    StrategyResult
        无成交时除名称外全部为 0。
    """
    if not trades:
        return StrategyResult(strategy_name=name)

    pnls = [t.profit_loss for t in trades]
    profitable = sum(1 for p in pnls if p > 0)
    total_pl = sum(pnls)

    return StrategyResult(
        strategy_name=name,
        total_trades=len(trades),
        profitable_trades=profitable,
        win_rate=profitable * 100.0 / len(trades),
        total_pl=total_pl,
        avg_pl=total_pl / len(trades),
        largest_win=max(pnls),
        largest_loss=min(pnls),
        sharpe_ratio=compute_sharpe([t.profit_loss_pct for t in trades]),
        max_drawdown=compute_max_drawdown(trades),
    )


def rank_results(results: Iterable[StrategyResult]) -> list[StrategyResult]:
    """按总盈亏降序排序（稳定排序，同分保持原顺序）。"""
    return sorted(results, key=lambda r: r.total_pl, reverse=True)
