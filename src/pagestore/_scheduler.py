"""Timer and task seam used by items to debounce and persist edits.

Items never touch the event loop directly: they ask a :class:`Scheduler`
to run a callback later or to run a save coroutine in the background.
Production code uses :class:`LoopScheduler`; tests pass a manual clock.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Structural scheduler interface used by :class:`pagestore.state.item.Item`."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...

    def spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Future[None]: ...


class LoopScheduler:
    """Schedule timers and save tasks on an asyncio event loop.

    When no loop is given, the running loop is looked up on each call, so
    the store can be created before the loop starts as long as edits
    happen inside it.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._tasks: set[asyncio.Future[None]] = set()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._get_loop().call_later(delay, callback)

    def spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Future[None]:
        task = self._get_loop().create_task(coro)
        # The loop only keeps weak references to tasks.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
