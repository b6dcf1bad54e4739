"""批量回测与参数扫描入口。

每个 (策略族, 参数组合) 都是独立任务：新建策略实例 -> 完整回放 -> 汇总。
任务之间只共享只读的 TickSequence，因此可以放进进程池并行；
无论并行与否，结果都按任务顺序（策略族顺序 + 网格顺序）返回。
"""

from __future__ import annotations

import time
from typing import Any, Iterable, List, Mapping

from algo.strategy.registry import build_strategy, get_strategy_cls, strategy_names
from engine.backtest_engine import run_strategy
from engine.base_engine import BaseEngine, EngineResult
from market_data.tick_sequence import TickSequence
from shared.utils.logging import setup_logger
from utils.metrics import rank_results
from utils.param_search import DEFAULT_GRID, ParamGrid, SweepResult, grid_size
from utils.parallel import parallel_map

_LOGGER = setup_logger("sweep")

Job = tuple[str, dict]

# 进程池 worker 内共享的 Tick 序列（由 initializer 注入一次）
_WORKER_TICKS: TickSequence | None = None


def _init_worker(ticks: TickSequence) -> None:
    global _WORKER_TICKS
    _WORKER_TICKS = ticks


def run_job(ticks: TickSequence, family: str, params: Mapping[str, Any]) -> SweepResult:
    """跑一个参数组合：全新实例 + 完整回放。"""
    strategy = build_strategy(family, params)
    result, trades = run_strategy(ticks, strategy)
    return SweepResult(family=family, params=dict(params), result=result, trades=trades)


def _run_job_in_worker(job: Job) -> SweepResult:
    if _WORKER_TICKS is None:
        raise RuntimeError("worker tick sequence not initialized")
    family, params = job
    return run_job(_WORKER_TICKS, family, params)


def build_jobs(grid: ParamGrid, families: Iterable[str] | None = None) -> List[Job]:
    """按注册顺序展开任务列表；families 为空表示全部。"""
    selected = list(families) if families else None
    if selected:
        for name in selected:
            get_strategy_cls(name)
            if name not in grid:
                raise ValueError(f"No parameter grid for strategy: {name}")
    else:
        selected = [name for name in strategy_names() if name in grid]
        # 只在网格里出现、未注册的名字也要报错
        for name in grid:
            get_strategy_cls(name)

    order = {name: i for i, name in enumerate(strategy_names())}
    jobs: List[Job] = []
    for name in sorted(set(selected), key=lambda n: order[n]):
        for params in grid[name]:
            jobs.append((name, dict(params)))
    return jobs


class SweepEngine(BaseEngine):
    """参数扫描引擎。

    Parameters
    ----------
    ticks:
        只读共享的 Tick 序列。
    grid:
        策略族 -> 参数组合列表；None 时使用 `DEFAULT_GRID`。
    families:
        只跑这些策略族；None/空表示全部。
    workers:
        进程数；1 为顺序执行，<=0 为自动（CPU 数 - 1）。
    """

    def __init__(
        self,
        ticks: TickSequence,
        grid: ParamGrid | None = None,
        families: Iterable[str] | None = None,
        workers: int = 1,
    ):
        super().__init__(ticks)
        self.grid = grid if grid is not None else DEFAULT_GRID
        self.families = list(families) if families else None
        self.workers = int(workers)

    def run_all(self) -> List[SweepResult]:
        jobs = build_jobs(self.grid, self.families)
        _LOGGER.info("开始扫描: %s 个参数组合, 数据 %s ticks", len(jobs), f"{self.tick_count:,}")
        started = time.perf_counter()

        if self.workers == 1:
            results = self._run_sequential(jobs)
        else:
            results = parallel_map(
                jobs,
                _run_job_in_worker,
                n_jobs=self.workers,
                initializer=_init_worker,
                initargs=(self.ticks,),
            )

        _LOGGER.info(
            "扫描完成: %s 个策略变体, 耗时 %.2fs", len(results), time.perf_counter() - started
        )
        return results

    def _run_sequential(self, jobs: List[Job]) -> List[SweepResult]:
        results: List[SweepResult] = []
        current: str | None = None
        for family, params in jobs:
            if family != current:
                current = family
                _LOGGER.info("测试策略族: %s", family)
            results.append(run_job(self.ticks, family, params))
        return results

    def run(self) -> EngineResult:
        results = self.run_all()
        ranked = rank_results(r.result for r in results)
        summary = {
            "ticks": self.tick_count,
            "combos": len(results),
            "grid_size": grid_size(self.grid),
            "profitable": sum(1 for r in ranked if r.total_pl > 0),
            "best": ranked[0].strategy_name if ranked else None,
        }
        return EngineResult(summary=summary, artifacts={"results": results, "ranked": ranked})


def run_all_strategies(
    ticks: TickSequence,
    grid: ParamGrid | None = None,
    families: Iterable[str] | None = None,
    workers: int = 1,
) -> List[SweepResult]:
    """函数式入口：返回按任务顺序排列的 SweepResult 列表。"""
    return SweepEngine(ticks, grid=grid, families=families, workers=workers).run_all()
