from __future__ import annotations

import asyncio
import copy
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import Any

import pytest

from pagestore.config import StoreConfig
from pagestore.state.store import ContentStore

CLIENT_ID = "client-1"


@dataclass
class _Timer:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by an explicit clock; save tasks run on the test loop."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[_Timer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Timer:
        timer = _Timer(due=self.now + delay, callback=callback)
        self._timers.append(timer)
        return timer

    def spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Future[None]:
        return asyncio.get_running_loop().create_task(coro)

    @property
    def active(self) -> list[_Timer]:
        return [t for t in self._timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.active if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self._timers.remove(timer)
            self.now = timer.due
            timer.callback()
        self.now = target


class FakeGateway:
    """Records save calls. With ``manual=True`` each call waits for :meth:`complete`."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.error: Exception | None = None
        self.manual = False
        self.waiters: list[asyncio.Future[None]] = []

    async def save_path(self, resource_path: str, data: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((resource_path, copy.deepcopy(dict(data))))
        if self.manual:
            fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            self.waiters.append(fut)
            await fut
        if self.error is not None:
            raise self.error
        return {"ok": True}

    def complete(self, index: int, exc: Exception | None = None) -> None:
        fut = self.waiters[index]
        if exc is None:
            fut.set_result(None)
        else:
            fut.set_exception(exc)


async def _settle() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


@pytest.fixture
def settle() -> Callable[[], Awaitable[None]]:
    return _settle


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def config() -> StoreConfig:
    return StoreConfig(slug="about", debounce_delay=2.0, cooldown_delay=5.0)


@pytest.fixture
def store(config: StoreConfig, gateway: FakeGateway, scheduler: ManualScheduler) -> ContentStore:
    return ContentStore(config, gateway, client_id=CLIENT_ID, scheduler=scheduler)
