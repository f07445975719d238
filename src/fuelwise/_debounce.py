"""Keyed debouncing of coroutine work."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Hashable

_logger = logging.getLogger(__name__)


class Debouncer:
    """Run at most one pending job per key, after a quiet period.

    ``schedule(key, factory)`` cancels whatever task is pending for *key*,
    whether it is still waiting out the delay or already awaiting the
    factory's coroutine, and starts a new one. Only the most recently
    scheduled job for a key can complete.
    """

    def __init__(self, delay: float) -> None:
        self._delay = delay
        self._tasks: dict[Hashable, asyncio.Task[None]] = {}

    @property
    def delay(self) -> float:
        return self._delay

    def schedule(
        self,
        key: Hashable,
        factory: Callable[[], Awaitable[None]],
        *,
        delay: float | None = None,
    ) -> asyncio.Task[None]:
        self.cancel(key)
        wait = self._delay if delay is None else delay
        task = asyncio.get_running_loop().create_task(self._run(key, wait, factory))
        self._tasks[key] = task
        return task

    async def _run(self, key: Hashable, wait: float, factory: Callable[[], Awaitable[None]]) -> None:
        try:
            if wait > 0:
                await asyncio.sleep(wait)
            await factory()
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.exception("Debounced job for %r failed", key)
        finally:
            if self._tasks.get(key) is asyncio.current_task():
                del self._tasks[key]

    def pending(self, key: Hashable) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    def cancel(self, key: Hashable) -> None:
        task = self._tasks.pop(key, None)
        if task is not None and not task.done():
            task.cancel()

    def cancel_all(self) -> None:
        for key in list(self._tasks):
            self.cancel(key)

    def active_tasks(self) -> list[asyncio.Task[None]]:
        return [task for task in self._tasks.values() if not task.done()]

    async def aclose(self) -> None:
        tasks = list(self._tasks.values())
        self.cancel_all()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
