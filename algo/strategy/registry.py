"""策略注册表：字符串 -> Strategy 实现。"""

from __future__ import annotations

import inspect
from typing import Any, Mapping

from algo.strategy.atr_breakout import ATRBreakoutStrategy
from algo.strategy.base import Strategy
from algo.strategy.bollinger import BollingerBandsStrategy
from algo.strategy.dual_ma import DualMAStrategy
from algo.strategy.ema import EMAStrategy
from algo.strategy.macd import MACDStrategy
from algo.strategy.rsi import RSIStrategy
from algo.strategy.sma import SMAStrategy
from algo.strategy.stochastic import StochasticStrategy
from algo.strategy.vwap import VWAPStrategy
from algo.strategy.zscore import ZScoreStrategy
from shared.utils.logging import setup_logger

_LOGGER = setup_logger("strategy-registry")

_REGISTRY: dict[str, type[Strategy]] = {}


def register_strategy(name: str, cls: type[Strategy]) -> None:
    _REGISTRY[name] = cls


def get_strategy_cls(name: str) -> type[Strategy]:
    if name not in _REGISTRY:
        raise ValueError(f"Unknown strategy: {name}")
    return _REGISTRY[name]


def strategy_names() -> list[str]:
    """按注册顺序返回全部策略族名称。"""
    return list(_REGISTRY.keys())


def _filter_init_kwargs(cls: type, params: Mapping[str, Any]) -> dict[str, Any]:
    """过滤出 __init__ 支持的参数，避免配置里多字段导致报错。"""
    try:
        sig = inspect.signature(cls.__init__)
    except (TypeError, ValueError):
        return dict(params)

    if any(p.kind == inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values()):
        return dict(params)

    allowed = {name for name in sig.parameters.keys() if name != "self"}
    dropped = sorted(k for k in params if k not in allowed)
    if dropped:
        _LOGGER.warning("%s 忽略未知参数: %s", cls.__name__, ", ".join(dropped))
    return {k: v for k, v in params.items() if k in allowed}


def build_strategy(name: str | Mapping[str, Any], params: Mapping[str, Any] | None = None) -> Strategy:
    """构建一个全新的策略实例。

    支持：
    - build_strategy("sma", {"period": 20})
    - build_strategy({"type": "sma", "period": 20})
    """
    if isinstance(name, Mapping):
        cfg = dict(name)
        strat_name = str(cfg.pop("type", "") or "")
        merged = {**cfg, **dict(params or {})}
    else:
        strat_name = str(name)
        merged = dict(params or {})

    cls = get_strategy_cls(strat_name)
    kwargs = _filter_init_kwargs(cls, merged)
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise ValueError(f"Invalid params for strategy '{strat_name}': {merged}") from exc


# 默认注册（顺序即 sweep 的默认执行顺序）
register_strategy("sma", SMAStrategy)
register_strategy("ema", EMAStrategy)
register_strategy("dual_ma", DualMAStrategy)
register_strategy("rsi", RSIStrategy)
register_strategy("macd", MACDStrategy)
register_strategy("stochastic", StochasticStrategy)
register_strategy("bollinger", BollingerBandsStrategy)
register_strategy("atr_breakout", ATRBreakoutStrategy)
register_strategy("zscore", ZScoreStrategy)
register_strategy("vwap", VWAPStrategy)
