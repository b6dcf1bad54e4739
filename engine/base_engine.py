"""引擎基类。

所有引擎都围绕同一份只读 TickSequence 工作，并以 `run() -> EngineResult` 对外输出：
summary 是可直接打印/序列化的字典，artifacts 放结果对象与成交账本等大对象。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from market_data.tick_sequence import TickSequence


@dataclass(frozen=True)
class EngineResult:
    summary: dict[str, Any]
    artifacts: dict[str, Any] = field(default_factory=dict)


class BaseEngine(ABC):
    """持有 Tick 序列的引擎基类；子类只负责 `run()`。"""

    def __init__(self, ticks: TickSequence):
        if not ticks.sealed:
            # 回放期间序列不允许再增长
            ticks.seal()
        self.ticks = ticks

    @property
    def tick_count(self) -> int:
        return len(self.ticks)

    @abstractmethod
    def run(self) -> EngineResult:
        ...
