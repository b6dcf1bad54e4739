"""ATR 因子。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from algo.factors.base import require_column


@dataclass(frozen=True)
class ATRFactor:
    """平均真实波幅（SMA 版本）。

    tick 数据只有成交价，真实波幅退化为相邻价格差的绝对值。
    """

    period: int = 14
    price_col: str = "price"
    out_col: str | None = None
    name: str = "atr"
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.period <= 0:
            raise ValueError("ATR period must be > 0")
        object.__setattr__(
            self,
            "params",
            {"period": self.period, "price_col": self.price_col, "out_col": self.out_col},
        )

    def compute(self, df: pd.DataFrame) -> pd.DataFrame:
        price = require_column(df, self.price_col, "ATRFactor")
        out = self.out_col or f"atr_{self.period}"
        true_range = price.diff().abs()
        df[out] = true_range.rolling(self.period, min_periods=self.period).mean()
        return df
