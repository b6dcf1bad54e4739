"""布林带 / Z-Score 因子。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from algo.factors.base import require_column


@dataclass(frozen=True)
class BollingerFactor:
    """滚动均值 ± k 倍总体标准差（ddof=0），同时输出 z-score。

    输出列（前缀默认 `bb_{period}`）：`_mid`、`_upper`、`_lower`、`_z`。
    标准差为 0 时 z 取 0。
    """

    period: int = 20
    num_std: float = 2.0
    price_col: str = "price"
    prefix: str | None = None
    name: str = "bollinger"
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.period <= 0:
            raise ValueError("Bollinger period must be > 0")
        object.__setattr__(
            self,
            "params",
            {
                "period": self.period,
                "num_std": self.num_std,
                "price_col": self.price_col,
                "prefix": self.prefix,
            },
        )

    def compute(self, df: pd.DataFrame) -> pd.DataFrame:
        price = require_column(df, self.price_col, "BollingerFactor")
        prefix = self.prefix or f"bb_{self.period}"

        rolling = price.rolling(self.period, min_periods=self.period)
        mid = rolling.mean()
        std = rolling.std(ddof=0)

        df[f"{prefix}_mid"] = mid
        df[f"{prefix}_upper"] = mid + self.num_std * std
        df[f"{prefix}_lower"] = mid - self.num_std * std
        z = (price - mid) / std.replace(0.0, np.nan)
        df[f"{prefix}_z"] = z.mask(std == 0, 0.0)
        return df
