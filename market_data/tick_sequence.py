"""Tick 序列：只追加、可索引、可重复遍历的连续存储。

Notes
-----
底层使用 numpy 结构化数组（ts:int64 / price:float64 / volume:int64），
容量不足时按 2 倍扩容，保证 append 均摊 O(1)。
加载完成后调用 `seal()` 冻结，之后多个策略实例只读共享同一份序列。
"""

from __future__ import annotations

from typing import Iterable, Iterator

import numpy as np
import pandas as pd

from shared.models.models import Tick

TICK_DTYPE = np.dtype([("ts", np.int64), ("price", np.float64), ("volume", np.int64)])

# iterate() 每次物化成 Python 对象的行数
ITER_CHUNK = 65_536


class TickSequence:
    """有序 Tick 容器。

    Parameters
    ----------
    initial_capacity:
        初始容量（条数），至少为 1。
    """

    def __init__(self, initial_capacity: int = 1024):
        if initial_capacity <= 0:
            raise ValueError("initial_capacity must be > 0")
        self._buf = np.zeros(int(initial_capacity), dtype=TICK_DTYPE)
        self._count = 0
        self._sealed = False

    @classmethod
    def from_ticks(cls, ticks: Iterable[Tick], *, seal: bool = True) -> "TickSequence":
        seq = cls()
        for t in ticks:
            seq.append(t)
        if seal:
            seq.seal()
        return seq

    @property
    def capacity(self) -> int:
        return int(self._buf.shape[0])

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """冻结序列：此后不再接受 append。"""
        self._sealed = True

    def append(self, tick: Tick) -> None:
        if self._sealed:
            raise RuntimeError("TickSequence is sealed")
        if self._count >= self._buf.shape[0]:
            grown = np.zeros(self._buf.shape[0] * 2, dtype=TICK_DTYPE)
            grown[: self._count] = self._buf[: self._count]
            self._buf = grown
        self._buf[self._count] = (tick.ts, tick.price, tick.volume)
        self._count += 1

    def __len__(self) -> int:
        return self._count

    def at(self, index: int) -> Tick:
        if index < 0 or index >= self._count:
            raise IndexError(f"tick index out of range: {index} (len={self._count})")
        ts, price, volume = self._buf[index].tolist()
        return Tick(ts=ts, price=price, volume=volume)

    def __getitem__(self, index: int) -> Tick:
        """只接受整数下标；切片请用 `view()`。"""
        if not isinstance(index, (int, np.integer)):
            raise TypeError(f"TickSequence indices must be integers, not {type(index).__name__}")
        return self.at(int(index))

    def first(self) -> Tick | None:
        return self.at(0) if self._count else None

    def last(self) -> Tick | None:
        return self.at(self._count - 1) if self._count else None

    def view(self) -> np.ndarray:
        """返回只读视图（长度 = 已写入条数）。"""
        v = self._buf[: self._count]
        v = v.view()
        v.flags.writeable = False
        return v

    def iterate(self) -> Iterator[tuple[Tick, int]]:
        """按插入顺序产出 `(tick, index)`；每次调用都从头开始。"""
        i = 0
        for start in range(0, self._count, ITER_CHUNK):
            for ts, price, volume in self._buf[start : min(start + ITER_CHUNK, self._count)].tolist():
                yield Tick(ts=ts, price=price, volume=volume), i
                i += 1

    def __iter__(self) -> Iterator[Tick]:
        for tick, _ in self.iterate():
            yield tick

    def to_frame(self) -> pd.DataFrame:
        """转成 DataFrame（列：ts/price/volume），供向量化因子使用。"""
        v = self._buf[: self._count]
        return pd.DataFrame(
            {
                "ts": v["ts"].copy(),
                "price": v["price"].copy(),
                "volume": v["volume"].copy(),
            }
        )

    def __getstate__(self) -> dict:
        # 进程池传输时只携带有效部分
        return {"buf": self._buf[: self._count].copy(), "count": self._count, "sealed": self._sealed}

    def __setstate__(self, state: dict) -> None:
        buf = state["buf"]
        self._buf = buf if buf.shape[0] else np.zeros(1, dtype=TICK_DTYPE)
        self._count = int(state["count"])
        self._sealed = bool(state["sealed"])

    def __repr__(self) -> str:
        return f"TickSequence(len={self._count}, sealed={self._sealed})"
