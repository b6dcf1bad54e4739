"""回放引擎层（engine）。

- `BacktestEngine`：单个策略实例对整段 Tick 序列的一次完整回放；
- `SweepEngine`：按参数网格批量回放，可选进程池并行，结果顺序确定。
"""
