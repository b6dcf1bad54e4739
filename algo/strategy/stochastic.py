"""随机指标（Stochastic %K/%D）策略。"""

from __future__ import annotations

from algo.strategy.base import Strategy, require_positive
from shared.models.models import Tick


class StochasticStrategy(Strategy):
    """平滑 %K 低于超卖线开多，高于超买线平仓。

    Tick 只有单一价格，因此同一价格同时充当 high/low/close：
    当前价若为窗口极值，原始 %K 会落在 0 或 100。

    Parameters
    ----------
    period:
        高低点窗口。
    smooth_k:
        %K 平滑窗口（算术平均）。
    smooth_d:
        %D 窗口（对平滑 %K 再取平均，仅供观察，不参与信号）。
    oversold / overbought:
        入场 / 出场阈值。
    """

    def __init__(
        self,
        period: int = 14,
        smooth_k: int = 3,
        smooth_d: int = 3,
        oversold: float = 20,
        overbought: float = 80,
    ):
        super().__init__()
        require_positive(period=period, smooth_k=smooth_k, smooth_d=smooth_d)
        self.period = int(period)
        self.smooth_k = int(smooth_k)
        self.smooth_d = int(smooth_d)
        self.oversold = float(oversold)
        self.overbought = float(overbought)
        self._prices = [0.0] * self.period
        self._k_buffer = [0.0] * self.smooth_k
        self._d_buffer = [0.0] * self.smooth_d
        self._d_count = 0
        self._count = 0
        self.last_k: float | None = None
        self.last_d: float | None = None

    @property
    def label(self) -> str:
        return f"Stochastic({self.period},{self.oversold:g}/{self.overbought:g})"

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        self._prices[self._count % self.period] = price

        if self._count >= self.period:
            highest = max(self._prices)
            lowest = min(self._prices)
            raw_k = 0.0
            if highest != lowest:
                raw_k = ((price - lowest) / (highest - lowest)) * 100
            self._k_buffer[self._count % self.smooth_k] = raw_k

            if self._count >= self.period + self.smooth_k:
                k = sum(self._k_buffer) / self.smooth_k
                self.last_k = k
                self._update_d(k)

                if k < self.oversold and not self._in_position:
                    self._enter_long(tick)
                elif k > self.overbought and self._in_position:
                    self._exit_long(tick)

        self._count += 1

    def _update_d(self, k: float) -> None:
        self._d_buffer[self._d_count % self.smooth_d] = k
        self._d_count += 1
        if self._d_count >= self.smooth_d:
            self.last_d = sum(self._d_buffer) / self.smooth_d
