"""双均线交叉策略（快/慢 EMA）。"""

from __future__ import annotations

from algo.strategy.base import Strategy, require_positive
from algo.strategy.ema import ema_alpha
from shared.models.models import Tick


class DualMAStrategy(Strategy):
    """快线上穿慢线（金叉）开多，下穿（死叉）平仓。

    Parameters
    ----------
    fast_period:
        快线 EMA 周期。
    slow_period:
        慢线 EMA 周期，同时决定预热长度；必须大于 fast_period。
    """

    def __init__(self, fast_period: int = 10, slow_period: int = 50):
        super().__init__()
        require_positive(fast_period=fast_period, slow_period=slow_period)
        if fast_period >= slow_period:
            raise ValueError("fast_period must be < slow_period")
        self.fast_period = int(fast_period)
        self.slow_period = int(slow_period)
        self._fast_alpha = ema_alpha(self.fast_period)
        self._slow_alpha = ema_alpha(self.slow_period)
        self._fast_ema = 0.0
        self._slow_ema = 0.0
        self._count = 0
        self._prev_above = False  # 上一个已评估 tick 快线是否在慢线之上

    @property
    def label(self) -> str:
        return f"DualMA({self.fast_period}/{self.slow_period})"

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        if self._count == 0:
            self._fast_ema = price
            self._slow_ema = price
            self._prev_above = False
        else:
            self._fast_ema = price * self._fast_alpha + self._fast_ema * (1 - self._fast_alpha)
            self._slow_ema = price * self._slow_alpha + self._slow_ema * (1 - self._slow_alpha)

        if self._count >= self.slow_period:
            above = self._fast_ema > self._slow_ema
            if above and not self._prev_above and not self._in_position:
                self._enter_long(tick)
            elif not above and self._prev_above and self._in_position:
                self._exit_long(tick)
            self._prev_above = above

        self._count += 1
