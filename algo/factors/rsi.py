"""RSI 因子（Wilder 平滑）。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from algo.factors.base import require_column


def _wilder_average(values: pd.Series, period: int) -> pd.Series:
    """前 period 个值取简单平均作为种子，其后按 alpha = 1/period 递推。"""
    seeded = pd.Series(np.nan, index=values.index, dtype=float)
    if len(values) <= period:
        return seeded
    seeded.iloc[period] = values.iloc[1 : period + 1].mean()
    seeded.iloc[period + 1 :] = values.iloc[period + 1 :].to_numpy()
    return seeded.ewm(alpha=1.0 / period, adjust=False).mean()


@dataclass(frozen=True)
class RSIFactor:
    """相对强弱指数。

    第 0 行只提供基准价格；第 `period` 行起有值（与 RSI 策略的初始均值同一行）。
    avg_loss 为 0 时取 100。
    """

    period: int = 14
    price_col: str = "price"
    out_col: str | None = None
    name: str = "rsi"
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.period <= 0:
            raise ValueError("RSI period must be > 0")
        object.__setattr__(
            self,
            "params",
            {"period": self.period, "price_col": self.price_col, "out_col": self.out_col},
        )

    def compute(self, df: pd.DataFrame) -> pd.DataFrame:
        price = require_column(df, self.price_col, "RSIFactor")
        out = self.out_col or f"rsi_{self.period}"

        delta = price.diff()
        avg_gain = _wilder_average(delta.clip(lower=0.0), self.period)
        avg_loss = _wilder_average((-delta).clip(lower=0.0), self.period)

        rsi = 100.0 - (100.0 / (1.0 + avg_gain / avg_loss))
        rsi = rsi.mask(avg_loss == 0, 100.0)
        df[out] = rsi.where(avg_gain.notna())
        return df
