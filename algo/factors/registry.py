"""因子注册表：字符串 -> 因子实现。"""

from __future__ import annotations

import inspect
from typing import Any, Iterable, Mapping

import pandas as pd

from algo.factors.atr import ATRFactor
from algo.factors.base import Factor
from algo.factors.bollinger import BollingerFactor
from algo.factors.ema import EMAFactor
from algo.factors.ma import MAFactor
from algo.factors.rsi import RSIFactor
from algo.factors.vwap import VWAPFactor

_REGISTRY: dict[str, type] = {}

_RESERVED_KEYS = {"name", "type", "params"}


def register_factor(name: str, cls: type) -> None:
    _REGISTRY[name] = cls


def get_factor_cls(name: str) -> type:
    if name not in _REGISTRY:
        raise ValueError(f"Unknown factor: {name}")
    return _REGISTRY[name]


def factor_names() -> list[str]:
    return list(_REGISTRY)


def _init_params(cls: type) -> set[str]:
    sig = inspect.signature(cls.__init__)
    # name/params 由 __post_init__ 维护，不接受外部传入
    return {n for n in sig.parameters if n not in {"self", "name", "params"}}


def _item_params(item: Mapping[str, Any]) -> dict[str, Any]:
    raw = item.get("params")
    if raw is not None and not isinstance(raw, Mapping):
        raise ValueError("factor params must be a dict")
    params = dict(raw or {})
    # 允许 params 外平铺参数，不覆盖 params 内同名键
    for k, v in item.items():
        if k not in _RESERVED_KEYS and k not in params:
            params[k] = v
    return params


def build_factors(items: Iterable[Mapping[str, Any]] | None) -> list[Factor]:
    """从配置构建因子列表。

    支持形态：
    - [{name: "ma", params: {period: 20}}, ...]
    - [{type: "ma", period: 20}, ...]   # 参数平铺
    """
    if items is None:
        return []
    if isinstance(items, Mapping) or isinstance(items, (str, bytes)):
        raise ValueError("factors config must be a list")

    factors: list[Factor] = []
    for item in items:
        if not isinstance(item, Mapping):
            raise ValueError("factor item must be a dict")
        name = str(item.get("name") or item.get("type") or "")
        if not name:
            raise ValueError("factor item missing name")
        cls = get_factor_cls(name)
        params = _item_params(item)
        unknown = sorted(set(params) - _init_params(cls))
        if unknown:
            raise ValueError(f"Unknown params for factor '{name}': {unknown}")
        try:
            factors.append(cls(**params))
        except TypeError as exc:
            raise ValueError(f"Invalid params for factor '{name}': {params}") from exc
    return factors


def apply_factors(df: pd.DataFrame, factors: Iterable[Factor]) -> pd.DataFrame:
    for f in factors:
        df = f.compute(df)
    return df


# 默认注册
register_factor("ma", MAFactor)
register_factor("ema", EMAFactor)
register_factor("rsi", RSIFactor)
register_factor("atr", ATRFactor)
register_factor("bollinger", BollingerFactor)
register_factor("vwap", VWAPFactor)
