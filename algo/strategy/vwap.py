"""VWAP（成交量加权均价）策略。"""

from __future__ import annotations

from algo.strategy.base import Strategy
from shared.models.models import Tick


class VWAPStrategy(Strategy):
    """价格低于累计 VWAP 开多，高于 VWAP 平仓。

    VWAP 从序列起点累计（无窗口）；累计成交量为 0 时不评估信号。
    """

    def __init__(self) -> None:
        super().__init__()
        self._cum_pv = 0.0
        self._cum_volume = 0

    @property
    def label(self) -> str:
        return "VWAP"

    @property
    def value(self) -> float | None:
        if self._cum_volume <= 0:
            return None
        return self._cum_pv / self._cum_volume

    def on_tick(self, tick: Tick, index: int) -> None:
        price = tick.price
        self._cum_pv += price * tick.volume
        self._cum_volume += tick.volume

        if self._cum_volume > 0:
            vwap = self._cum_pv / self._cum_volume
            if price < vwap and not self._in_position:
                self._enter_long(tick)
            elif price > vwap and self._in_position:
                self._exit_long(tick)
