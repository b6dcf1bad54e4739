"""布林带均值回归策略。"""

from __future__ import annotations

import math

from algo.strategy.base import Strategy, require_positive
from shared.models.models import Tick


def window_mean_std(buffer: list[float], total: float) -> tuple[float, float]:
    """均值取滚动和；方差每次对整个窗口重新计算（总体方差）。"""
    n = len(buffer)
    mean = total / n
    variance = 0.0
    for x in buffer:
        diff = x - mean
        variance += diff * diff
    return mean, math.sqrt(variance / n)


class BollingerBandsStrategy(Strategy):
    """价格触及下轨开多，触及上轨平仓。

    Parameters
    ----------
    period:
        窗口长度。
    num_std:
        上下轨的标准差倍数 k。
    """

    def __init__(self, period: int = 20, num_std: float = 2.0):
        super().__init__()
        require_positive(period=period)
        self.period = int(period)
        self.num_std = float(num_std)
        self._buffer = [0.0] * self.period
        self._pos = 0
        self._count = 0
        self._sum = 0.0
        self.last_bands: tuple[float, float, float] | None = None  # (lower, mid, upper)

    @property
    def label(self) -> str:
        return f"Bollinger({self.period},{self.num_std:.1f}σ)"

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        if self._count >= self.period:
            self._sum -= self._buffer[self._pos]
        self._buffer[self._pos] = price
        self._sum += price
        self._count += 1

        if self._count >= self.period:
            mid, std = window_mean_std(self._buffer, self._sum)
            upper = mid + self.num_std * std
            lower = mid - self.num_std * std
            self.last_bands = (lower, mid, upper)

            if price <= lower and not self._in_position:
                self._enter_long(tick)
            elif price >= upper and self._in_position:
                self._exit_long(tick)

        self._pos = (self._pos + 1) % self.period
