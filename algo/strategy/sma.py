"""简单移动均线（SMA）策略。"""

from __future__ import annotations

from algo.strategy.base import Strategy, require_positive
from shared.models.models import Tick


class SMAStrategy(Strategy):
    """价格上穿 SMA 开多，下穿 SMA 平仓。

    Parameters
    ----------
    period:
        均线窗口；环形缓冲 + 滚动求和，每 tick O(1)。
    """

    def __init__(self, period: int = 20):
        super().__init__()
        require_positive(period=period)
        self.period = int(period)
        self._buffer = [0.0] * self.period
        self._pos = 0
        self._count = 0
        self._sum = 0.0

    @property
    def label(self) -> str:
        return f"SMA({self.period})"

    @property
    def value(self) -> float | None:
        """当前 SMA；预热未完成时为 None。"""
        if self._count < self.period:
            return None
        return self._sum / self.period

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        if self._count >= self.period:
            self._sum -= self._buffer[self._pos]
        self._buffer[self._pos] = price
        self._sum += price
        self._count += 1

        if self._count >= self.period:
            sma = self._sum / self.period
            if price > sma and not self._in_position:
                self._enter_long(tick)
            elif price < sma and self._in_position:
                self._exit_long(tick)

        self._pos = (self._pos + 1) % self.period
