"""
Fire-and-forget dispatch

Side effects such as notification e-mails are scheduled here and never
awaited by the caller. A failing task is logged and discarded; it cannot
affect the operation that dispatched it.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from anyio.abc import TaskGroup

from src.platform.logging.loguru_io import Logger


class BackgroundTaskDispatcher:
    def __init__(self, *, task_group: TaskGroup | None = None) -> None:
        self.task_group = task_group
        self._pending: set[asyncio.Task[None]] = set()

    async def _run_safely(
        self, func: Callable[..., Awaitable[Any]], args: tuple[Any, ...], name: str
    ) -> None:
        try:
            await func(*args)
            Logger.base.debug(f'📨 [TASK] {name} done')
        except Exception as e:
            Logger.base.warning(f'⚠️ [TASK] {name} failed and was dropped: {type(e).__name__}: {e}')

    def dispatch(self, func: Callable[..., Awaitable[Any]], *args: Any, name: str = '') -> None:
        """
        Schedule `func(*args)` without waiting for it

        Uses the injected anyio task group when one is running, otherwise a
        loop task whose reference is kept until it finishes.
        """
        name = name or getattr(func, '__qualname__', 'background task')
        if self.task_group is not None:
            self.task_group.start_soon(self._run_safely, func, args, name, name=name)
            return

        task = asyncio.get_running_loop().create_task(self._run_safely(func, args, name), name=name)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every loop task dispatched so far (shutdown and tests)"""
        while self._pending:
            await asyncio.gather(*list(self._pending))
