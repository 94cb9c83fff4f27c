"""Fire-and-forget task tracking."""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field

_logger = logging.getLogger(__name__)


@dataclass
class BackgroundTasks:
    """Run side-effect coroutines without awaiting them.

    References are held until each task finishes; failures are logged.
    """

    _tasks: set[asyncio.Task] = field(default_factory=set)

    def spawn(self, coro: Coroutine[object, object, object], action: str) -> None:
        """Start a coroutine on the running loop."""
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(lambda done: self._finished(done, action))

    async def drain(self) -> None:
        """Wait for every task spawned so far, including ones they spawn."""
        while pending := [task for task in self._tasks if not task.done()]:
            await asyncio.gather(*pending, return_exceptions=True)
        await asyncio.sleep(0)

    def _finished(self, task: asyncio.Task, action: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.warning("Background %s failed: %s", action, exc)

    def __len__(self) -> int:
        return len(self._tasks)
