"""MACD 策略（MACD 线与信号线交叉）。"""

from __future__ import annotations

from algo.strategy.base import Strategy, require_positive
from algo.strategy.ema import ema_alpha
from shared.models.models import Tick


class MACDStrategy(Strategy):
    """MACD 上穿信号线开多，下穿信号线平仓。

    - 快/慢 EMA 以首个价格为种子；MACD = fast - slow；
    - 信号线在 index == slow_period 时以当期 MACD 为种子，之后按 signal_period 做 EMA；
    - index > slow_period + signal_period 后才判断交叉：
      金叉 = 前值 MACD <= 前值信号线 且 当前 MACD > 当前信号线，死叉对称。
    """

    def __init__(self, fast_period: int = 12, slow_period: int = 26, signal_period: int = 9):
        super().__init__()
        require_positive(fast_period=fast_period, slow_period=slow_period, signal_period=signal_period)
        if fast_period >= slow_period:
            raise ValueError("fast_period must be < slow_period")
        self.fast_period = int(fast_period)
        self.slow_period = int(slow_period)
        self.signal_period = int(signal_period)
        self._fast_alpha = ema_alpha(self.fast_period)
        self._slow_alpha = ema_alpha(self.slow_period)
        self._signal_alpha = ema_alpha(self.signal_period)
        self._fast_ema = 0.0
        self._slow_ema = 0.0
        self._signal_ema = 0.0
        self._prev_macd = 0.0
        self._prev_signal = 0.0
        self._count = 0

    @property
    def label(self) -> str:
        return f"MACD({self.fast_period},{self.slow_period},{self.signal_period})"

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        if self._count == 0:
            self._fast_ema = price
            self._slow_ema = price
            self._count += 1
            return

        self._fast_ema = price * self._fast_alpha + self._fast_ema * (1 - self._fast_alpha)
        self._slow_ema = price * self._slow_alpha + self._slow_ema * (1 - self._slow_alpha)
        macd = self._fast_ema - self._slow_ema

        if self._count >= self.slow_period:
            if self._count == self.slow_period:
                self._signal_ema = macd
            else:
                self._signal_ema = macd * self._signal_alpha + self._signal_ema * (1 - self._signal_alpha)
            signal = self._signal_ema

            if self._count > self.slow_period + self.signal_period:
                bullish = self._prev_macd <= self._prev_signal and macd > signal
                bearish = self._prev_macd >= self._prev_signal and macd < signal
                if bullish and not self._in_position:
                    self._enter_long(tick)
                elif bearish and self._in_position:
                    self._exit_long(tick)

            self._prev_macd = macd
            self._prev_signal = signal

        self._count += 1
