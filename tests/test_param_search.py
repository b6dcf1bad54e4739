from __future__ import annotations

import pytest

from algo.strategy.registry import strategy_names
from utils.param_search import DEFAULT_GRID, expand_grid, grid_size, resolve_grid


def test_default_grid_has_58_combinations():
    assert grid_size(DEFAULT_GRID) == 58
    assert set(DEFAULT_GRID) == set(strategy_names())
    counts = {k: len(v) for k, v in DEFAULT_GRID.items()}
    assert counts == {
        "sma": 6,
        "ema": 5,
        "dual_ma": 3,
        "rsi": 9,
        "macd": 3,
        "stochastic": 4,
        "bollinger": 9,
        "atr_breakout": 9,
        "zscore": 9,
        "vwap": 1,
    }
    assert all(c["smooth_k"] == 3 and c["smooth_d"] == 3 for c in DEFAULT_GRID["stochastic"])
    assert DEFAULT_GRID["rsi"][1] == {"period": 7, "oversold": 30, "overbought": 70}


def test_expand_grid_product_keeps_key_order():
    combos = expand_grid("bollinger", {"params": {"period": [10, 20], "num_std": [1.5, 2.0]}})
    assert combos == [
        {"period": 10, "num_std": 1.5},
        {"period": 10, "num_std": 2.0},
        {"period": 20, "num_std": 1.5},
        {"period": 20, "num_std": 2.0},
    ]


def test_expand_grid_explicit_combos():
    combos = [{"fast_period": 5, "slow_period": 8}]
    assert expand_grid("dual_ma", {"combos": combos}) == combos
    assert expand_grid("dual_ma", combos) == combos


@pytest.mark.parametrize(
    "spec",
    [
        {},
        {"params": {"period": [1]}, "combos": [{"period": 1}]},
        {"params": {"period": []}},
        {"params": {"period": 5}},
        "sma",
    ],
)
def test_expand_grid_rejects_bad_specs(spec):
    with pytest.raises(ValueError):
        expand_grid("sma", spec)


def test_resolve_grid_replaces_only_overridden_family():
    grid = resolve_grid({"sma": {"params": {"period": [3]}}})
    assert grid["sma"] == [{"period": 3}]
    assert grid["ema"] == DEFAULT_GRID["ema"]
    assert len(DEFAULT_GRID["sma"]) == 6
