"""行情数据模块（market_data）。

该包聚合：
- Tick 序列容器（连续存储、只读共享、可重复遍历）
- 历史数据加载（CSV -> TickSequence，自动识别时间格式并跳过坏行）
"""

from market_data.loader import load_ticks_from_csv
from market_data.tick_sequence import TickSequence

__all__ = ["TickSequence", "load_ticks_from_csv"]
