"""Read-only view over items that are not yet confirmed persisted.

A navigation guard uses this view to decide whether leaving the page
would lose work. Nothing here mutates the store.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field

from pagestore.state.item import Item

DEFAULT_LEAVE_MESSAGE = "Some changes have not been saved yet. Leave the page anyway?"


class PendingItems:
    """Live view of pending items; re-evaluated on every access."""

    def __init__(self, items: Callable[[], Iterable[Item]]) -> None:
        self._items = items

    def __iter__(self) -> Iterator[Item]:
        return (item for item in self._items() if item.pending)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return any(True for _ in self)

    def keys(self) -> list[str]:
        return [item.key for item in self]


class LeaveCheck(BaseModel):
    """Outcome of asking whether the page can be left right now."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    pending_keys: list[str] = Field(default_factory=list)
    message: str | None = None


class LeaveGuard:
    """Decide whether to warn the user before navigating away."""

    def __init__(self, pending: PendingItems, *, message: str = DEFAULT_LEAVE_MESSAGE) -> None:
        self._pending = pending
        self._message = message

    def check(self) -> LeaveCheck:
        keys = self._pending.keys()
        if not keys:
            return LeaveCheck(allowed=True)
        return LeaveCheck(allowed=False, pending_keys=keys, message=self._message)
