from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Callable, Iterable, List, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def default_n_jobs(n_jobs: int | None = None) -> int:
    """Return sensible default number of worker processes."""
    if n_jobs is None or n_jobs <= 0:
        return max(1, (os.cpu_count() or 2) - 1)
    return int(max(1, n_jobs))


def parallel_map(
    items: Iterable[T],
    fn: Callable[[T], R],
    n_jobs: int | None = None,
    initializer: Callable[..., Any] | None = None,
    initargs: Sequence[Any] = (),
) -> List[R]:
    """Evaluate fn over items using a process pool; results keep input order."""
    items = list(items)
    n_jobs = default_n_jobs(n_jobs)

    if n_jobs == 1 or len(items) <= 1:
        if initializer is not None:
            initializer(*initargs)
        return [fn(x) for x in items]

    with ProcessPoolExecutor(max_workers=n_jobs, initializer=initializer, initargs=tuple(initargs)) as ex:
        return list(ex.map(fn, items))
