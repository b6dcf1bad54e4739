"""参数网格：默认扫描网格与网格展开。"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from shared.models.models import StrategyResult, Trade

ParamGrid = Dict[str, List[Dict[str, Any]]]


@dataclass
class SweepResult:
    """一次参数组合回测的结果。"""
    family: str
    params: dict
    result: StrategyResult
    trades: list[Trade] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.result.strategy_name


def _product_dict(param_grid: Mapping[str, List[Any]]) -> List[Dict[str, Any]]:
    keys = list(param_grid.keys())
    values = [param_grid[k] for k in keys]
    combos: list[dict] = []
    for vals in itertools.product(*values):
        combo = dict(zip(keys, vals))
        combos.append(combo)
    return combos


def _pairs(keys: tuple[str, ...], rows: list[tuple]) -> List[Dict[str, Any]]:
    return [dict(zip(keys, row)) for row in rows]


def _cross(left: List[Dict[str, Any]], right: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{**a, **b} for a in left for b in right]


_RSI_BANDS = _pairs(("oversold", "overbought"), [(20, 80), (30, 70), (25, 75)])
_STOCH_BANDS = _pairs(("oversold", "overbought"), [(20, 80), (30, 70)])

DEFAULT_GRID: ParamGrid = {
    "sma": _product_dict({"period": [10, 20, 50, 100, 200, 500]}),
    "ema": _product_dict({"period": [10, 20, 50, 100, 200]}),
    "dual_ma": _pairs(("fast_period", "slow_period"), [(10, 50), (20, 100), (50, 200)]),
    "rsi": _cross(_product_dict({"period": [7, 14, 21]}), _RSI_BANDS),
    "macd": _pairs(("fast_period", "slow_period", "signal_period"), [(12, 26, 9), (8, 21, 7), (10, 24, 9)]),
    "stochastic": _cross(_product_dict({"period": [14, 21], "smooth_k": [3], "smooth_d": [3]}), _STOCH_BANDS),
    "bollinger": _product_dict({"period": [10, 20, 30], "num_std": [1.5, 2.0, 2.5]}),
    "atr_breakout": _product_dict({"period": [10, 14, 20], "multiplier": [1.5, 2.0, 2.5]}),
    "zscore": _product_dict({"period": [20, 30, 50], "threshold": [1.5, 2.0, 2.5]}),
    "vwap": [{}],
}


def expand_grid(family: str, spec: Mapping[str, Any] | List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """把一个策略族的网格描述展开成参数组合列表。

    支持形态：
    - [{"period": 10}, {"period": 20}]          # 显式组合
    - {"combos": [{...}, ...]}                   # 同上（配置写法）
    - {"params": {"period": [10, 20], ...}}     # 笛卡尔积
    """
    if isinstance(spec, list):
        return [dict(c) for c in spec]
    if not isinstance(spec, Mapping):
        raise ValueError(f"grid for '{family}' must be a list or a dict")

    combos = spec.get("combos")
    params = spec.get("params")
    if combos is not None and params is not None:
        raise ValueError(f"grid for '{family}' must define only one of combos/params")
    if combos is not None:
        return [dict(c) for c in combos]
    if params is not None:
        for k, v in params.items():
            if not isinstance(v, list) or not v:
                raise ValueError(f"grid param '{family}.{k}' must be a non-empty list")
        return _product_dict(params)
    raise ValueError(f"grid for '{family}' needs combos or params")


def resolve_grid(overrides: Mapping[str, Any] | None = None) -> ParamGrid:
    """默认网格 + 配置覆盖（按策略族整体替换）。"""
    grid: ParamGrid = {k: [dict(c) for c in v] for k, v in DEFAULT_GRID.items()}
    for family, spec in (overrides or {}).items():
        grid[family] = expand_grid(family, spec)
    return grid


def grid_size(grid: ParamGrid) -> int:
    return sum(len(v) for v in grid.values())
