from __future__ import annotations

import pytest

from shared.models.models import StrategyResult, Tick, Trade
from utils.metrics import analyze_trades, compute_max_drawdown, compute_sharpe, rank_results


def _trade(entry: float, exit_: float, i: int = 0) -> Trade:
    return Trade.close(i * 10, entry, Tick(ts=i * 10 + 5, price=exit_))


def test_trade_close_computes_pl():
    t = _trade(11.0, 9.0)
    assert t.profit_loss == pytest.approx(-2.0)
    assert t.profit_loss_pct == pytest.approx(-18.1818, abs=1e-4)
    assert t.entry_ts <= t.exit_ts


def test_analyze_empty_ledger_is_all_zero():
    res = analyze_trades("SMA(20)", [])
    assert res == StrategyResult(strategy_name="SMA(20)")
    assert res.total_trades == 0
    assert res.sharpe_ratio == 0.0
    assert res.max_drawdown == 0.0


def test_analyze_mixed_ledger():
    trades = [_trade(100, 102, 0), _trade(100, 99, 1), _trade(100, 103, 2)]
    res = analyze_trades("X", trades)

    assert res.total_trades == 3
    assert res.profitable_trades == 2
    assert res.win_rate == pytest.approx(66.6667, abs=1e-4)
    assert res.total_pl == pytest.approx(4.0)
    assert res.avg_pl == pytest.approx(4.0 / 3)
    assert res.largest_win == pytest.approx(3.0)
    assert res.largest_loss == pytest.approx(-1.0)
    assert res.sharpe_ratio == pytest.approx(0.784465, rel=1e-5)
    assert res.max_drawdown == pytest.approx(-1.0)


def test_sharpe_zero_when_returns_constant():
    assert compute_sharpe([]) == 0.0
    assert compute_sharpe([1.5, 1.5, 1.5]) == 0.0


def test_drawdown_from_zero_peak():
    # 一路亏损：峰值停在起点 0
    assert compute_max_drawdown([_trade(10, 9), _trade(10, 8)]) == pytest.approx(-3.0)
    assert compute_max_drawdown([_trade(10, 12), _trade(10, 11)]) == 0.0


def test_analyze_is_pure():
    trades = [_trade(100, 90), _trade(90, 95, 1)]
    assert analyze_trades("A", trades) == analyze_trades("A", trades)
    assert len(trades) == 2


def test_rank_results_is_stable_descending():
    a = StrategyResult("a", total_pl=1.0)
    b = StrategyResult("b", total_pl=5.0)
    c = StrategyResult("c", total_pl=1.0)
    d = StrategyResult("d", total_pl=-2.0)
    assert [r.strategy_name for r in rank_results([a, b, c, d])] == ["b", "a", "c", "d"]
