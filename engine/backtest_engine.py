"""单策略回放引擎。"""

from __future__ import annotations

from dataclasses import asdict

from algo.strategy.base import Strategy
from engine.base_engine import BaseEngine, EngineResult
from market_data.tick_sequence import TickSequence
from shared.models.models import StrategyResult, Trade
from utils.metrics import analyze_trades


def replay(ticks: TickSequence, strategy: Strategy) -> Strategy:
    """把整段 Tick 序列逐个喂给策略，最后调用一次 `on_complete`。"""
    for tick, index in ticks.iterate():
        strategy.on_tick(tick, index)
    strategy.on_complete()
    return strategy


def run_strategy(ticks: TickSequence, strategy: Strategy) -> tuple[StrategyResult, list[Trade]]:
    """回放并汇总：返回 (StrategyResult, 成交账本)。"""
    replay(ticks, strategy)
    trades = strategy.get_trades()
    return analyze_trades(strategy.label, trades), trades


class BacktestEngine(BaseEngine):
    """对单个策略实例做一次完整回放。

    Parameters
    ----------
    ticks:
        只读共享的 Tick 序列。
    strategy:
        全新的策略实例（不可复用已经跑过的实例）。
    """

    def __init__(self, ticks: TickSequence, strategy: Strategy):
        super().__init__(ticks)
        self.strategy = strategy

    def run(self) -> EngineResult:
        result, trades = run_strategy(self.ticks, self.strategy)
        summary = asdict(result)
        summary["ticks"] = self.tick_count
        summary["open_position"] = self.strategy.in_position
        return EngineResult(summary=summary, artifacts={"result": result, "trades": trades})
