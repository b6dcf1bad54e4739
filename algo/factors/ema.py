"""EMA 因子。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from algo.factors.base import require_column


@dataclass(frozen=True)
class EMAFactor:
    """指数移动平均，alpha = 2 / (period + 1)，以首个价格为种子（adjust=False）。

    与逐 tick 的 EMA 策略保持一致：下标 < period 的行视为预热，输出 NaN。
    """

    period: int = 20
    price_col: str = "price"
    out_col: str | None = None
    name: str = "ema"
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.period <= 0:
            raise ValueError("EMA period must be > 0")
        object.__setattr__(
            self,
            "params",
            {"period": self.period, "price_col": self.price_col, "out_col": self.out_col},
        )

    def compute(self, df: pd.DataFrame) -> pd.DataFrame:
        price = require_column(df, self.price_col, "EMAFactor")
        out = self.out_col or f"ema_{self.period}"
        # min_periods 只做遮罩，不改变递推的种子
        df[out] = price.ewm(
            alpha=2.0 / (self.period + 1), adjust=False, min_periods=self.period + 1
        ).mean()
        return df
