"""RSI（相对强弱指数）策略，Wilder 平滑。"""

from __future__ import annotations

from algo.strategy.base import Strategy, require_positive
from shared.models.models import Tick


class RSIStrategy(Strategy):
    """RSI 低于超卖线开多，高于超买线平仓。

    平滑方式：
    1. 前 `period` 个价格变动取简单平均作为初始 avg_gain / avg_loss；
    2. 之后 `avg = (avg * (period - 1) + x) / period`。

    首个 tick 只记录价格；初始均值算出的那个 tick 不出信号。
    avg_loss 为 0 时 RSI 取 100。
    """

    def __init__(self, period: int = 14, oversold: float = 30, overbought: float = 70):
        super().__init__()
        require_positive(period=period)
        self.period = int(period)
        self.oversold = float(oversold)
        self.overbought = float(overbought)
        self._count = 0
        self._sum_gain = 0.0
        self._sum_loss = 0.0
        self._avg_gain = 0.0
        self._avg_loss = 0.0
        self._last_price = 0.0
        self.last_rsi: float | None = None

    @property
    def label(self) -> str:
        return f"RSI({self.period},{self.oversold:g}/{self.overbought:g})"

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        if index == 0:
            self._last_price = price
            return

        change = price - self._last_price
        self._last_price = price
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0

        if self._count < self.period:
            self._sum_gain += gain
            self._sum_loss += loss
            self._count += 1
            if self._count == self.period:
                self._avg_gain = self._sum_gain / self.period
                self._avg_loss = self._sum_loss / self.period
            return

        self._avg_gain = (self._avg_gain * (self.period - 1) + gain) / self.period
        self._avg_loss = (self._avg_loss * (self.period - 1) + loss) / self.period

        rsi = 100.0
        if self._avg_loss > 0:
            rs = self._avg_gain / self._avg_loss
            rsi = 100 - (100 / (1 + rs))
        self.last_rsi = rsi

        if rsi < self.oversold and not self._in_position:
            self._enter_long(tick)
        elif rsi > self.overbought and self._in_position:
            self._exit_long(tick)
