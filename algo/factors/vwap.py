"""VWAP 因子。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from algo.factors.base import require_column


@dataclass(frozen=True)
class VWAPFactor:
    """自序列起点累计的成交量加权均价；累计成交量为 0 时为 NaN。"""

    price_col: str = "price"
    volume_col: str = "volume"
    out_col: str = "vwap"
    name: str = "vwap"
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(
            self,
            "params",
            {"price_col": self.price_col, "volume_col": self.volume_col, "out_col": self.out_col},
        )

    def compute(self, df: pd.DataFrame) -> pd.DataFrame:
        price = require_column(df, self.price_col, "VWAPFactor")
        volume = require_column(df, self.volume_col, "VWAPFactor")
        cum_pv = (price * volume).cumsum()
        cum_vol = volume.cumsum()
        df[self.out_col] = cum_pv / cum_vol.replace(0.0, np.nan)
        return df
