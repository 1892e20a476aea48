"""Supervision of detached background coroutines."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Optional

LOGGER = logging.getLogger(__name__)


class TaskSupervisor:
    """Owns fire-and-forget tasks so they are neither collected early nor lost.

    Each spawned task is referenced until it finishes; a failure is logged
    with its traceback and never propagated to the spawner.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: Optional[str] = None) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            LOGGER.debug("Background task %s cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error(
                "Background task %s failed",
                task.get_name(),
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every task spawned so far (and any they spawn) finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self, *, timeout: float = 5.0) -> None:
        if not self._tasks:
            return
        _, still_running = await asyncio.wait(list(self._tasks), timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)


__all__ = ["TaskSupervisor"]
