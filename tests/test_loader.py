from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from market_data.loader import (
    FORMAT_DATE_TIME,
    FORMAT_ISO,
    FORMAT_UNIX_FLOAT,
    FORMAT_UNIX_INT,
    detect_timestamp_format,
    load_ticks_from_csv,
    load_ticks_with_stats,
    parse_row_timestamp,
)
from shared.models.models import datetime_to_ts

NS = 1_000_000_000
T0 = 1_609_459_200  # 2021-01-01 00:00:00 UTC


def _write(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_ohlcv_unix_float_rows(tmp_path: Path):
    csv_path = _write(
        tmp_path / "ticks.csv",
        [
            "timestamp,open,high,low,close,volume",
            f"{T0}.0,1,2,0.5,1.5,0.25",
            f"{T0 + 60}.0,1,2,0.5,1.75,2",
        ],
    )
    seq, stats = load_ticks_with_stats(csv_path)

    assert stats.detected_format == FORMAT_UNIX_FLOAT
    assert stats.loaded == 2 and stats.skipped == 0
    assert stats.columns == ["timestamp", "open", "high", "low", "close", "volume"]
    assert seq.sealed
    first = seq.at(0)
    assert first.ts == T0 * NS
    assert first.price == 1.5
    assert first.volume == 25_000_000
    assert seq.at(1).volume == 200_000_000
    assert first.dt == datetime(2021, 1, 1, tzinfo=timezone.utc)


def test_two_column_file_uses_second_column_and_zero_volume(tmp_path: Path):
    csv_path = _write(
        tmp_path / "ticks.csv",
        ["time,price", "2021-01-01T00:00:00Z,100.5", "2021-01-01T00:00:01,101"],
    )
    seq, stats = load_ticks_with_stats(csv_path)
    assert stats.detected_format == FORMAT_ISO
    assert [t.price for t in seq] == [100.5, 101.0]
    assert [t.volume for t in seq] == [0, 0]
    assert seq.at(1).ts - seq.at(0).ts == NS


def test_single_row_file_loads(tmp_path: Path):
    csv_path = _write(tmp_path / "ticks.csv", ["timestamp,price", f"{T0},42.5"])
    seq, stats = load_ticks_with_stats(csv_path)
    assert stats.loaded == 1
    assert seq.first() == seq.last()
    assert seq.at(0).price == 42.5


def test_invalid_rows_are_skipped_and_counted(tmp_path: Path):
    csv_path = _write(
        tmp_path / "ticks.csv",
        [
            "timestamp,open,high,low,close,volume",
            f"{T0},1,1,1,10,1",
            f"{T0 + 1},1,1,1,0,1",
            f"{T0 + 2},1,1,1,-5,1",
            f"{T0 + 3},1,1,1,nan,1",
            f"{T0 + 4},1,1,1,inf,1",
            f"{T0 + 5},1,1,1,abc,1",
            f"{T0 + 6},1,1",
            "not-a-date,1,1,1,11,1",
            f"{T0 + 8},1,1,1,12,1",
        ],
    )
    seq, stats = load_ticks_with_stats(csv_path, volume_scale=1)
    assert stats.detected_format == FORMAT_UNIX_INT
    assert stats.loaded == 2
    assert stats.skipped == 7
    assert [t.price for t in seq] == [10.0, 12.0]
    assert [t.volume for t in seq] == [1, 1]


def test_millisecond_timestamps(tmp_path: Path):
    csv_path = _write(tmp_path / "ticks.csv", ["ts,price", f"{T0 * 1000},5"])
    seq = load_ticks_from_csv(csv_path)
    assert seq.at(0).ts == T0 * NS


def test_split_date_and_time_columns(tmp_path: Path):
    csv_path = _write(
        tmp_path / "ticks.csv",
        ["date,time,open,high,close,volume", "2021-01-01,12:30:00,1,1,7.5,0.5"],
    )
    seq, stats = load_ticks_with_stats(csv_path)
    assert stats.detected_format == FORMAT_DATE_TIME
    assert seq.at(0).ts == datetime_to_ts(datetime(2021, 1, 1, 12, 30, tzinfo=timezone.utc))
    assert seq.at(0).price == 7.5


def test_detect_timestamp_format():
    assert detect_timestamp_format("1609459200.5") == FORMAT_UNIX_FLOAT
    assert detect_timestamp_format("1609459200") == FORMAT_UNIX_INT
    assert detect_timestamp_format("2021-01-01 00:00:00") == FORMAT_ISO
    assert detect_timestamp_format("2021-01-01", "00:00:00") == FORMAT_DATE_TIME
    assert parse_row_timestamp([f"{T0}.9", "1"]) == T0 * NS


def test_missing_file_and_empty_inputs(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_ticks_from_csv(tmp_path / "missing.csv")

    empty = _write(tmp_path / "empty.csv", [""])
    with pytest.raises(ValueError):
        load_ticks_from_csv(empty)

    header_only = _write(tmp_path / "header.csv", ["timestamp,price"])
    with pytest.raises(ValueError):
        load_ticks_from_csv(header_only)

    all_bad = _write(tmp_path / "bad.csv", ["timestamp,price", f"{T0},0", f"{T0},-1"])
    with pytest.raises(ValueError):
        load_ticks_from_csv(all_bad)
