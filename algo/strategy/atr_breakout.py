"""ATR 突破策略。"""

from __future__ import annotations

from algo.strategy.base import Strategy, require_positive
from shared.models.models import Tick


class ATRBreakoutStrategy(Strategy):
    """基于 ATR 的突破 / 跟踪止损。

    只有收盘价可用，真实波幅退化为 |price - prev_price|。
    recent_high / recent_low 每个 tick 跟踪更新：
    - price > recent_high - ATR * multiplier 且空仓 -> 开多，recent_high 重置为当前价；
    - price < recent_low + ATR * multiplier 且持仓 -> 平仓，recent_low 重置为当前价。
    """

    def __init__(self, period: int = 14, multiplier: float = 2.0):
        super().__init__()
        require_positive(period=period)
        self.period = int(period)
        self.multiplier = float(multiplier)
        self._tr_buffer = [0.0] * self.period
        self._pos = 0
        self._count = 0
        self._atr_sum = 0.0
        self._prev_close = 0.0
        self.recent_high = float("-inf")
        self.recent_low = float("inf")

    @property
    def label(self) -> str:
        return f"ATR({self.period},{self.multiplier:.1f}x)"

    @property
    def atr(self) -> float | None:
        if self._count < self.period:
            return None
        return self._atr_sum / self.period

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        if index == 0:
            self._prev_close = price
            self.recent_high = price
            self.recent_low = price
            return

        true_range = abs(price - self._prev_close)
        if self._count >= self.period:
            self._atr_sum -= self._tr_buffer[self._pos]
        self._tr_buffer[self._pos] = true_range
        self._atr_sum += true_range
        self._count += 1
        self._prev_close = price

        self.recent_high = max(self.recent_high, price)
        self.recent_low = min(self.recent_low, price)

        if self._count >= self.period:
            threshold = (self._atr_sum / self.period) * self.multiplier
            if price > self.recent_high - threshold and not self._in_position:
                self._enter_long(tick)
                self.recent_high = price
            elif price < self.recent_low + threshold and self._in_position:
                self._exit_long(tick)
                self.recent_low = price

        self._pos = (self._pos + 1) % self.period
