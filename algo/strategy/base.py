"""策略抽象基类。

约定（所有指标策略共享）：
- 只有 `on_tick` 会修改状态，且必须按 index 递增、每个 tick 调用一次；
- 状态机只有 Flat / Long 两态，任意时刻最多一个持仓；
- `on_complete` 不会强制平仓，序列结束时仍持有的仓位不产生 Trade。
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from shared.models.models import Tick, Trade


class Strategy(ABC):
    """逐 tick 驱动的单持仓策略。"""

    def __init__(self) -> None:
        self._in_position = False
        self._entry_ts = 0
        self._entry_price = 0.0
        self._trades: list[Trade] = []

    @property
    @abstractmethod
    def label(self) -> str:
        """结果展示名，如 `SMA(20)`。"""
        ...

    @property
    def in_position(self) -> bool:
        return self._in_position

    @abstractmethod
    def on_tick(self, tick: Tick, index: int) -> None:
        """消费一个 tick。"""
        ...

    def on_complete(self) -> None:
        """序列结束回调（默认无操作）。"""

    def get_trades(self) -> list[Trade]:
        return list(self._trades)

    def _enter_long(self, tick: Tick) -> None:
        self._in_position = True
        self._entry_ts = tick.ts
        self._entry_price = tick.price

    def _exit_long(self, tick: Tick) -> Trade:
        self._in_position = False
        trade = Trade.close(self._entry_ts, self._entry_price, tick)
        self._trades.append(trade)
        return trade

    def __repr__(self) -> str:
        return f"{type(self).__name__}<{self.label}>"


def require_positive(**periods: int) -> None:
    for name, val in periods.items():
        if int(val) <= 0:
            raise ValueError(f"{name} must be > 0")
