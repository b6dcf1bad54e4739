"""Z-Score 均值回归策略。"""

from __future__ import annotations

from algo.strategy.base import Strategy, require_positive
from algo.strategy.bollinger import window_mean_std
from shared.models.models import Tick


class ZScoreStrategy(Strategy):
    """z < -threshold 开多；z > 0（回到均值之上）平仓。

    出场条件与入场不对称：回归均值即止盈，而不是等到 +threshold。
    σ 为 0 时 z 取 0。
    """

    def __init__(self, period: int = 20, threshold: float = 2.0):
        super().__init__()
        require_positive(period=period)
        self.period = int(period)
        self.threshold = float(threshold)
        self._buffer = [0.0] * self.period
        self._pos = 0
        self._count = 0
        self._sum = 0.0
        self.last_z: float | None = None

    @property
    def label(self) -> str:
        return f"ZScore({self.period},{self.threshold:.1f}σ)"

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        if self._count >= self.period:
            self._sum -= self._buffer[self._pos]
        self._buffer[self._pos] = price
        self._sum += price
        self._count += 1

        if self._count >= self.period:
            mean, std = window_mean_std(self._buffer, self._sum)
            z = (price - mean) / std if std > 0 else 0.0
            self.last_z = z

            if z < -self.threshold and not self._in_position:
                self._enter_long(tick)
            elif z > 0 and self._in_position:
                self._exit_long(tick)

        self._pos = (self._pos + 1) % self.period
