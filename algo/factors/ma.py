"""简单移动均线因子。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from algo.factors.base import require_column


@dataclass(frozen=True)
class MAFactor:
    """滚动窗口均值；前 `period - 1` 行为 NaN。"""

    period: int = 20
    price_col: str = "price"
    out_col: str | None = None
    name: str = "ma"
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.period <= 0:
            raise ValueError("MA period must be > 0")
        object.__setattr__(
            self,
            "params",
            {"period": self.period, "price_col": self.price_col, "out_col": self.out_col},
        )

    def compute(self, df: pd.DataFrame) -> pd.DataFrame:
        price = require_column(df, self.price_col, "MAFactor")
        out = self.out_col or f"ma_{self.period}"
        df[out] = price.rolling(self.period, min_periods=self.period).mean()
        return df
