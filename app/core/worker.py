from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import TypeVar

from app.core.config import settings

T = TypeVar("T")
R = TypeVar("R")


class BoundedPool:
    """Runs independent per-item jobs on a bounded thread pool.

    Results keep input order. The first failure cancels every job that has
    not started yet and is re-raised to the caller.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max(1, max_workers or settings.fetch_workers)

    def map_ordered(self, fn: Callable[[T], R], items: Sequence[T]) -> list[R]:
        if not items:
            return []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(items))) as executor:
            futures: list[Future[R]] = [executor.submit(fn, item) for item in items]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = next((fut for fut in futures if fut in done and fut.exception() is not None), None)
            if failed is not None:
                for fut in pending:
                    fut.cancel()
                raise failed.exception()  # type: ignore[misc]
            return [fut.result() for fut in futures]
