from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

Task = Callable[[], Awaitable[None]]


class TaskScheduler:
    """Runs async tasks once immediately, then every ``interval_s`` seconds.

    Each task gets its own loop on the running event loop: a task is never
    re-entered while its previous invocation is still pending, but a slow task
    does not hold back the others. Ticks are fixed-rate; an overrunning task
    is re-run as soon as it settles.

    ``stop()`` only prevents future ticks; in-flight invocations finish.
    """

    def __init__(
        self,
        interval_s: float,
        *tasks: Task,
        logger: logging.Logger | None = None,
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")
        self.interval_s = interval_s
        self._tasks: list[Task] = list(tasks)
        self._loops: list[asyncio.Task[None]] = []
        self._stopped: asyncio.Event | None = None
        self._log = logger or logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._stopped is not None and not self._stopped.is_set()

    async def start(self) -> None:
        if self.running:
            return
        stopped = asyncio.Event()
        self._stopped = stopped
        self._loops = [t for t in self._loops if not t.done()]

        await self.execute()

        for task in self._tasks:
            self._spawn(task, stopped)

    def stop(self) -> None:
        if self._stopped is not None:
            self._stopped.set()

    async def execute(self) -> None:
        await asyncio.gather(*(self._run_once(task) for task in self._tasks))

    def add_tasks(self, *tasks: Task) -> None:
        self._tasks.extend(tasks)
        stopped = self._stopped
        if stopped is not None and not stopped.is_set():
            for task in tasks:
                self._spawn(task, stopped)

    async def wait_stopped(self) -> None:
        """Wait until every loop has exited after ``stop()``."""

        await asyncio.gather(*self._loops, return_exceptions=True)

    def _spawn(self, task: Task, stopped: asyncio.Event) -> None:
        self._loops.append(asyncio.create_task(self._run_periodically(task, stopped)))

    async def _run_once(self, task: Task) -> None:
        try:
            await task()
        except Exception:
            self._log.exception("Scheduled task %s failed", _task_name(task))

    async def _run_periodically(self, task: Task, stopped: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self.interval_s
        while True:
            try:
                await asyncio.wait_for(
                    stopped.wait(), timeout=max(0.0, next_at - loop.time())
                )
                return
            except asyncio.TimeoutError:
                pass

            await self._run_once(task)

            next_at += self.interval_s
            if next_at < loop.time():
                next_at = loop.time()


def _task_name(task: Task) -> str:
    return getattr(task, "__qualname__", None) or repr(task)
