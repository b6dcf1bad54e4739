"""核心数据结构：Tick/Trade/StrategyResult。"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Tick:
    """市场 Tick（时间戳 + 价格 + 成交量）。

    `ts` 为 UTC 纳秒时间戳（整数），由数据加载层统一换算。
    """
    ts: int
    price: float
    volume: int = 0

    @property
    def dt(self) -> datetime:
        return ts_to_datetime(self.ts)


@dataclass(frozen=True)
class Trade:
    """一次完整的多头往返交易（开仓 -> 平仓）。"""
    entry_ts: int
    entry_price: float
    exit_ts: int
    exit_price: float
    profit_loss: float
    profit_loss_pct: float

    @classmethod
    def close(cls, entry_ts: int, entry_price: float, exit_tick: Tick) -> "Trade":
        pl = exit_tick.price - entry_price
        return cls(
            entry_ts=entry_ts,
            entry_price=entry_price,
            exit_ts=exit_tick.ts,
            exit_price=exit_tick.price,
            profit_loss=pl,
            profit_loss_pct=(pl / entry_price) * 100,
        )

    @property
    def entry_dt(self) -> datetime:
        return ts_to_datetime(self.entry_ts)

    @property
    def exit_dt(self) -> datetime:
        return ts_to_datetime(self.exit_ts)


@dataclass(frozen=True)
class StrategyResult:
    """单个策略实例的绩效汇总。"""
    strategy_name: str
    total_trades: int = 0
    profitable_trades: int = 0
    win_rate: float = 0.0
    total_pl: float = 0.0
    avg_pl: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0


def ts_to_datetime(ts: int) -> datetime:
    """纳秒时间戳 -> UTC datetime（微秒精度）。"""
    return _EPOCH + timedelta(microseconds=ts // 1000)


def datetime_to_ts(dt: datetime) -> int:
    """datetime -> UTC 纳秒时间戳；naive datetime 视为 UTC。"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000
