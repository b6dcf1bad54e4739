"""向量化因子协议与公共校验。

因子是对整列价格的批量计算，用于导出指标和校验逐 tick 策略的增量数学。
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

import pandas as pd


class Factor(Protocol):
    """因子协议：`compute(df) -> df`，在 df 上追加一列或多列。"""

    name: str
    params: Mapping[str, Any]

    def compute(self, df: pd.DataFrame) -> pd.DataFrame:
        ...


def require_column(df: pd.DataFrame, col: str, owner: str) -> pd.Series:
    if col not in df.columns:
        raise ValueError(f"{owner} requires column: {col}")
    return df[col].astype(float)
