"""指数移动平均（EMA）策略。"""

from __future__ import annotations

from algo.strategy.base import Strategy, require_positive
from shared.models.models import Tick


def ema_alpha(period: int) -> float:
    return 2.0 / (period + 1)


class EMAStrategy(Strategy):
    """价格上穿 EMA 开多，下穿 EMA 平仓。

    EMA 以首个价格作为种子，前 `period` 个 tick 只更新不出信号。
    """

    def __init__(self, period: int = 20):
        super().__init__()
        require_positive(period=period)
        self.period = int(period)
        self._alpha = ema_alpha(self.period)
        self._ema = 0.0
        self._count = 0

    @property
    def label(self) -> str:
        return f"EMA({self.period})"

    @property
    def value(self) -> float | None:
        return self._ema if self._count else None

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        if self._count == 0:
            self._ema = price
        else:
            self._ema = price * self._alpha + self._ema * (1 - self._alpha)

        if self._count >= self.period:
            if price > self._ema and not self._in_position:
                self._enter_long(tick)
            elif price < self._ema and self._in_position:
                self._exit_long(tick)

        self._count += 1
