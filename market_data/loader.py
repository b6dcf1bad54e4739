"""历史数据加载。

从 CSV 读取 Tick 序列：自动识别时间戳格式、统一换算为 UTC 纳秒时间戳，
并跳过价格非法（<=0 / NaN / inf）或无法解析的行。
"""

from __future__ import annotations

import csv
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from market_data.tick_sequence import TickSequence
from shared.models.models import Tick, datetime_to_ts, ts_to_datetime
from shared.utils.logging import setup_logger

_LOGGER = setup_logger("loader")

# 成交量通常为小数（如 BTC），乘以该系数后取整保存
DEFAULT_VOLUME_SCALE = 100_000_000
PROGRESS_EVERY = 1_000_000

FORMAT_UNIX_FLOAT = "Unix Timestamp (Float)"
FORMAT_UNIX_INT = "Unix Timestamp (Integer)"
FORMAT_ISO = "ISO DateTime String"
FORMAT_DATE_TIME = "Date/Time Separate Columns"


@dataclass
class LoadStats:
    """一次加载的统计信息。"""
    path: str
    detected_format: str = "Unknown"
    columns: list[str] | None = None
    loaded: int = 0
    skipped: int = 0
    elapsed_secs: float = 0.0

    @property
    def rows_per_sec(self) -> float:
        return self.loaded / self.elapsed_secs if self.elapsed_secs > 0 else 0.0


def _is_float_literal(val: str) -> bool:
    try:
        float(val)
    except ValueError:
        return False
    return True


def _is_int_literal(val: str) -> bool:
    try:
        int(val)
    except ValueError:
        return False
    return True


def _parse_iso(val: str) -> datetime:
    dt = datetime.fromisoformat(val.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _is_iso_literal(val: str) -> bool:
    try:
        _parse_iso(val)
    except ValueError:
        return False
    return True


def _is_split_date_time(first: str, second: str) -> bool:
    # 首列只有日期、次列是时间
    return ":" not in first and ":" in second


def detect_timestamp_format(first_value: str, second_value: str = "") -> str:
    """根据首列（必要时加次列）取值判断时间戳格式。"""
    val = first_value.strip()
    if "." in val and _is_float_literal(val):
        return FORMAT_UNIX_FLOAT
    if _is_int_literal(val):
        return FORMAT_UNIX_INT
    if _is_split_date_time(val, second_value.strip()):
        return FORMAT_DATE_TIME
    if _is_iso_literal(val):
        return FORMAT_ISO
    return FORMAT_DATE_TIME


def _unix_seconds_to_ts(seconds: int) -> int:
    # 超过 1e12 视为毫秒
    if abs(seconds) > 1e12:
        return seconds * 1_000_000
    return seconds * 1_000_000_000


def parse_row_timestamp(row: list[str]) -> int:
    """解析一行的时间戳为 UTC 纳秒；逐行判断格式，兼容混合格式文件。"""
    first = row[0].strip()
    if "." in first and _is_float_literal(first):
        return _unix_seconds_to_ts(int(float(first)))
    if _is_int_literal(first):
        return _unix_seconds_to_ts(int(first))
    if len(row) > 1 and _is_split_date_time(first, row[1].strip()):
        return datetime_to_ts(_parse_iso(f"{first} {row[1].strip()}"))
    return datetime_to_ts(_parse_iso(first))


def load_ticks_with_stats(
    path: str | Path,
    *,
    volume_scale: float = DEFAULT_VOLUME_SCALE,
    initial_capacity: int = 1024,
) -> tuple[TickSequence, LoadStats]:
    """从 CSV 读取 Tick 序列，并返回加载统计。

    Parameters
    ----------
    path:
        CSV 路径，首行必须为表头。
    volume_scale:
        成交量换算系数（第 6 列存在时生效）。
    initial_capacity:
        TickSequence 初始容量。

    Returns
    -------
    tuple[TickSequence, LoadStats]
        已冻结的 Tick 序列与统计信息。

    Raises
    ------
    FileNotFoundError
        文件不存在。
    ValueError
        文件为空或没有任何有效行。
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"File not found: {csv_path}")

    stats = LoadStats(path=str(csv_path))
    seq = TickSequence(initial_capacity=initial_capacity)
    started = time.perf_counter()

    with csv_path.open("r", newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if not header:
            raise ValueError(f"CSV has no header: {csv_path}")
        stats.columns = [h.strip() for h in header]
        n_cols = len(header)
        _LOGGER.info("CSV 表头: %s", ", ".join(stats.columns))

        for row in reader:
            if not row:
                continue
            if stats.detected_format == "Unknown":
                stats.detected_format = detect_timestamp_format(row[0], row[1] if len(row) > 1 else "")
                _LOGGER.info("识别到时间格式: %s", stats.detected_format)

            try:
                ts = parse_row_timestamp(row)
                close = float(row[4] if n_cols >= 5 else row[1])
                volume = int(float(row[5]) * volume_scale) if n_cols >= 6 else 0
            except (ValueError, IndexError, OverflowError):
                stats.skipped += 1
                continue

            if not math.isfinite(close) or close <= 0:
                stats.skipped += 1
                continue

            seq.append(Tick(ts=ts, price=close, volume=volume))
            stats.loaded += 1
            if stats.loaded % PROGRESS_EVERY == 0:
                _LOGGER.info(
                    "已加载 %s 行 (%.1fs)", f"{stats.loaded:,}", time.perf_counter() - started
                )

    stats.elapsed_secs = time.perf_counter() - started
    seq.seal()

    _LOGGER.info(
        "CSV 加载完成: format=%s loaded=%s skipped=%s time=%.0fms speed=%s rows/sec",
        stats.detected_format,
        f"{stats.loaded:,}",
        f"{stats.skipped:,}",
        stats.elapsed_secs * 1000,
        f"{stats.rows_per_sec:,.0f}",
    )
    if stats.loaded == 0:
        raise ValueError(f"No valid data loaded! All {stats.skipped:,} rows were skipped.")

    first, last = seq.at(0), seq.at(len(seq) - 1)
    _LOGGER.info(
        "日期范围: %s -> %s | 价格: %.2f -> %.2f",
        ts_to_datetime(first.ts).strftime("%Y-%m-%d"),
        ts_to_datetime(last.ts).strftime("%Y-%m-%d"),
        first.price,
        last.price,
    )
    return seq, stats


def load_ticks_from_csv(
    path: str | Path,
    *,
    volume_scale: float = DEFAULT_VOLUME_SCALE,
    initial_capacity: int = 1024,
) -> TickSequence:
    """从 CSV 读取 Tick 序列（见 `load_ticks_with_stats`）。"""
    seq, _ = load_ticks_with_stats(path, volume_scale=volume_scale, initial_capacity=initial_capacity)
    return seq
