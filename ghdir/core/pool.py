"""
Bounded-concurrency task pool.
"""

import asyncio
from typing import Any, Awaitable, Callable, Iterable, List, TypeVar


T = TypeVar("T")


class TaskPool:
    """
    Runs one task per item, at most ``concurrency`` of them at a time.

    Tasks are created, and acquire their slot, in item order. Results come
    back in item order with exceptions (cancellation included) in place of
    the results of the tasks that raised them.
    """

    def __init__(self, concurrency: int = 10):
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        self.concurrency = concurrency
        self._semaphore = asyncio.Semaphore(concurrency)
        self._tasks: List[asyncio.Task] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def map(
        self,
        worker: Callable[[T], Awaitable[Any]],
        items: Iterable[T]
    ) -> List[Any]:
        self._tasks = [asyncio.create_task(self._run(worker, item)) for item in items]
        try:
            return await asyncio.gather(*self._tasks, return_exceptions=True)
        finally:
            self._tasks = []

    async def _run(self, worker: Callable[[T], Awaitable[Any]], item: T) -> Any:
        async with self._semaphore:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                return await worker(item)
            finally:
                self.in_flight -= 1

    def cancel(self) -> int:
        """Cancel every unfinished task; returns how many were cancelled."""

        cancelled = 0
        for task in self._tasks:
            if not task.done():
                task.cancel()
                cancelled += 1
        return cancelled


__all__ = [
    "TaskPool",
]
