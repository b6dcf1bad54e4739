from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path

from analysis.reports.report import (
    RESULT_CSV_FIELDS,
    build_master_report,
    export_results_csv,
    export_trades_csv,
    format_strategy_stats,
    write_master_report,
    write_single_report,
)
from market_data.tick_sequence import TickSequence
from shared.models.models import StrategyResult, Tick, Trade, datetime_to_ts

GENERATED = datetime(2024, 1, 2, 3, 4, 5)


def _results() -> list[StrategyResult]:
    return [
        StrategyResult("SMA(20)", total_trades=10, profitable_trades=4, win_rate=40.0, total_pl=-12.5),
        StrategyResult("RSI(14,30/70)", total_trades=5, profitable_trades=4, win_rate=80.0, total_pl=250.0, sharpe_ratio=1.234),
        StrategyResult("VWAP", total_trades=0),
    ]


def _ticks() -> TickSequence:
    return TickSequence.from_ticks(
        [
            Tick(ts=datetime_to_ts(datetime(2021, 1, 1)), price=100.0),
            Tick(ts=datetime_to_ts(datetime(2021, 3, 31)), price=110.0),
        ]
    )


def _trades() -> list[Trade]:
    t0 = datetime_to_ts(datetime(2021, 1, 1, 9, 30))
    return [
        Trade.close(t0, 100.0, Tick(ts=t0 + 60_000_000_000, price=101.5)),
        Trade.close(t0 + 120_000_000_000, 101.0, Tick(ts=t0 + 180_000_000_000, price=100.0)),
    ]


def test_format_strategy_stats():
    text = format_strategy_stats(_results()[1])
    assert "Strategy: RSI(14,30/70)" in text
    assert "Total Trades:      5" in text
    assert "(80.0%)" in text
    assert "$250.00" in text
    assert "Sharpe Ratio:      1.23" in text


def test_master_report_ranks_and_summarises():
    text = build_master_report(_results(), _ticks(), top_n=2, generated_at=GENERATED)
    assert "Generated: 2024-01-02 03:04:05" in text
    assert "Dataset: 2 ticks" in text
    assert "Date Range: 2021-01-01 to 2021-03-31" in text
    assert "Total Strategies Tested: 3" in text
    assert "Profitable: 1 (33.3%)" in text
    assert "Unprofitable: 2 (66.7%)" in text
    assert "TOP 2 BEST PERFORMERS" in text
    assert "Best Strategy: RSI(14,30/70)" in text
    assert "Worst Strategy: SMA(20)" in text
    assert "2/3 (67%) strategies lost money" in text

    top = text.split("TOP 2 BEST PERFORMERS")[1].split("WORST")[0]
    assert top.index("RSI(14,30/70)") < top.index("VWAP")
    assert "SMA(20)" not in top


def test_master_report_handles_empty_inputs():
    text = build_master_report([], TickSequence.from_ticks([]), generated_at=GENERATED)
    assert "Dataset: 0 ticks" in text
    assert "Date Range: n/a" in text
    assert "Total Strategies Tested: 0" in text
    assert "No strategies were tested." in text


def test_write_master_report_creates_directory(tmp_path: Path):
    out = tmp_path / "nested" / "results"
    path = write_master_report(_results(), _ticks(), output_dir=out, generated_at=GENERATED)
    assert path == out / "master_report_20240102_030405.txt"
    assert "OVERALL SUMMARY" in path.read_text(encoding="utf-8")


def test_export_results_csv_sorted_two_decimals(tmp_path: Path):
    path = export_results_csv(_results(), output_dir=tmp_path, generated_at=GENERATED)
    assert path.name == "all_strategies_20240102_030405.csv"

    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        assert reader.fieldnames == RESULT_CSV_FIELDS
        rows = list(reader)
    assert [r["Strategy"] for r in rows] == ["RSI(14,30/70)", "VWAP", "SMA(20)"]
    assert rows[0]["Total P&L"] == "250.00"
    assert rows[0]["Sharpe Ratio"] == "1.23"
    assert rows[2]["Win Rate %"] == "40.00"


def test_single_report_and_trades_csv(tmp_path: Path):
    result = StrategyResult("Bollinger(20,2.0σ)", total_trades=2, profitable_trades=1, win_rate=50.0, total_pl=0.5)
    path = write_single_report(
        result, _trades(), tmp_path, source="btc.csv", sample_trades=1, generated_at=GENERATED
    )
    assert path.name == "backtest_bollinger_20_2_0_20240102_030405.txt"
    text = path.read_text(encoding="utf-8")
    assert "Data Source: btc.csv" in text
    assert "Sample Trades (First 1):" in text
    assert "Entry: 2021-01-01 09:30 @ $100.00" in text
    assert "P&L:   $+1.50" in text
    assert text.count("\nTrade:\n") == 1

    csv_path = export_trades_csv(result.strategy_name, _trades(), tmp_path, generated_at=GENERATED)
    with csv_path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 2
    assert rows[1]["profit_loss"] == "-1.00"
    assert rows[0]["entry_time"].startswith("2021-01-01T09:30:00")
