from __future__ import annotations

import os
import queue
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from .blame_merge import merge_author_maps
from .config import ConfigError
from .models import AuthorMap, FilePath, PoolResult, Stop, WorkItem
from .paths import PathFilter

# (file path, private accumulator) -> None
AttributeFn = Callable[[str, AuthorMap], None]


def resolve_jobs(jobs: int) -> int:
    if isinstance(jobs, bool) or not isinstance(jobs, int):
        raise ConfigError(f"--jobs must be an integer, got {jobs!r}")
    if jobs < 0:
        raise ConfigError(f"--jobs must be >= 0, got {jobs}")
    if jobs == 0:
        return max(1, os.cpu_count() or 1)
    return jobs


def produce(
    paths: Iterable[str],
    work: "queue.Queue[WorkItem]",
    workers: int,
    path_filter: PathFilter,
) -> tuple[int, int]:
    enqueued = 0
    excluded = 0
    try:
        for path in paths:
            if path_filter.excludes(path):
                excluded += 1
                continue
            work.put(FilePath(path))
            enqueued += 1
    finally:
        # One stop per worker, even when enumeration fails, so every worker exits.
        for _ in range(workers):
            work.put(Stop())
    return enqueued, excluded


def consume(work: "queue.Queue[WorkItem]", attribute: AttributeFn) -> tuple[AuthorMap, int]:
    acc: AuthorMap = {}
    files = 0
    while True:
        item = work.get()
        if isinstance(item, Stop):
            return acc, files
        attribute(item.path, acc)
        files += 1


def run_pool(
    paths: Iterable[str],
    *,
    jobs: int,
    attribute: AttributeFn,
    path_filter: Optional[PathFilter] = None,
) -> PoolResult:
    """
    Fan `paths` out to `jobs` workers over one unbounded queue.

    Each worker fills its own AuthorMap; nothing is shared between workers
    except the queue. All futures are awaited before any result is used, and
    the first failure (producer or worker) is re-raised instead of returning
    a partial result.
    """
    workers = resolve_jobs(jobs)
    flt = path_filter or PathFilter()
    work: "queue.Queue[WorkItem]" = queue.Queue()

    with ThreadPoolExecutor(max_workers=workers + 1, thread_name_prefix="ownership") as ex:
        producer = ex.submit(produce, paths, work, workers, flt)
        worker_futs = [ex.submit(consume, work, attribute) for _ in range(workers)]

        errors: list[BaseException] = []
        maps: list[AuthorMap] = []
        files_attributed = 0
        excluded = 0
        try:
            _enqueued, excluded = producer.result()
        except Exception as e:
            errors.append(e)
        for fut in worker_futs:
            try:
                acc, files = fut.result()
            except Exception as e:
                errors.append(e)
                continue
            maps.append(acc)
            files_attributed += files

    if errors:
        raise errors[0]
    return PoolResult(maps=maps, files_attributed=files_attributed, files_excluded=excluded)


def attribute_all(
    paths: Iterable[str],
    *,
    jobs: int,
    attribute: AttributeFn,
    path_filter: Optional[PathFilter] = None,
) -> tuple[AuthorMap, PoolResult]:
    pooled = run_pool(paths, jobs=jobs, attribute=attribute, path_filter=path_filter)
    return merge_author_maps(pooled.maps), pooled
