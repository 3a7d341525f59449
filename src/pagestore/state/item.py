"""A single cached content node and its flush discipline.

Status transitions::

    NORMAL/FLUSHING --local write--> STALE
    STALE --debounce elapsed--> FLUSHING        (gateway called)
    FLUSHING --save ok, same generation--> NORMAL  (cool-down armed)
    NORMAL --cool-down elapsed--> NORMAL, dirty cleared

A failed save leaves the item FLUSHING and dirty; only a new local write
moves it on. Items whose persistence is disabled stay NORMAL forever.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pagestore._redact import summarize_for_log
from pagestore._scheduler import Cancellable
from pagestore.models.records import NodeMeta, split_meta
from pagestore.state.policy import is_own_echo, resource_path_for, should_persist
from pagestore.state.status import ItemStatus

if TYPE_CHECKING:
    from pagestore.state.store import ContentStore

_logger = logging.getLogger(__name__)


class Item:
    """Cached content node.

    ``data`` is only changed through :meth:`update`. Whether the item ever
    persists is decided once, here in the constructor.
    """

    def __init__(
        self,
        store: ContentStore,
        key: str,
        initial_data: Mapping[str, Any] | None = None,
        save: bool = True,
    ) -> None:
        self.key = key
        self.data: dict[str, Any] = {}
        self.meta: NodeMeta | None = None
        self.dirty = False
        self.status = ItemStatus.NORMAL
        self._store = store
        self._generation = 0
        self._debounce: Cancellable | None = None
        self._cooldown: Cancellable | None = None
        self._inflight: asyncio.Future[None] | None = None

        self.resource_path = resource_path_for(key, store.config, store.slug)
        self.persists = should_persist(
            self.resource_path,
            save_enabled=store.config.save_enabled,
            is_transient=store.is_transient,
        )
        if not self.persists:
            _logger.debug("Persistence disabled for %s (%s)", key, self.resource_path)

        self.update(initial_data or {}, save)

    def __repr__(self) -> str:
        return f"Item(key={self.key!r}, status={self.status.value}, dirty={self.dirty})"

    @property
    def generation(self) -> int:
        """Number of accepted local writes so far."""
        return self._generation

    @property
    def pending(self) -> bool:
        """Whether navigating away now could lose or race this item's data."""
        if self.status is not ItemStatus.NORMAL:
            return True
        return self.persists and self._cooldown is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update(self, data: Mapping[str, Any] | None = None, save: bool = True) -> bool:
        """Apply *data* to this item.

        A local edit (``save=True``) always wins. An incoming refresh
        (``save=False``) is dropped while the item is dirty. Either way, a
        payload stamped with our own client id is an echo and is dropped.

        Returns ``True`` when ``data`` was replaced.
        """
        payload, meta = split_meta(data or {})
        if is_own_echo(meta, self._store.client_id):
            _logger.debug("Ignoring echo of own write for %s", self.key)
            return False

        if not save and self.dirty:
            _logger.debug("Keeping local edit for %s; refresh discarded", self.key)
            return False

        self.meta = meta
        self.data = payload
        if save:
            self._mark_stale()
        return True

    def _mark_stale(self) -> None:
        self.dirty = True
        self._generation += 1
        self._cancel_cooldown()
        if not self.persists:
            return
        self.status = ItemStatus.STALE
        self._cancel_debounce()
        self._debounce = self._store.scheduler.call_later(
            self._store.config.debounce_delay, self._on_debounce
        )

    # ------------------------------------------------------------------
    # Flush
    # ------------------------------------------------------------------

    def flush_now(self) -> asyncio.Future[None] | None:
        """Send a debounced edit immediately.

        Returns the in-flight save, if any, so callers can await it.
        """
        if self._debounce is not None:
            self._cancel_debounce()
            self._on_debounce()
        return self._inflight

    def _on_debounce(self) -> None:
        self._debounce = None
        if self.status is not ItemStatus.STALE:
            return
        generation = self._generation
        # Capture the data as it is now, not as it was at write time.
        snapshot = copy.deepcopy(self.data)
        self.status = ItemStatus.FLUSHING
        self._inflight = self._store.scheduler.spawn(self._flush(generation, snapshot))

    async def _flush(self, generation: int, data: dict[str, Any]) -> None:
        _logger.debug("Saving %s to %s: %s", self.key, self.resource_path, summarize_for_log(data))
        try:
            await self._store.gateway.save_path(self.resource_path, data)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            # Stays FLUSHING/dirty so the pending-items query reports it.
            _logger.warning("Saving %s failed: %s", self.resource_path, exc)
            _logger.debug("Save failure details for %s", self.key, exc_info=True)
            return
        self._on_saved(generation)

    def _on_saved(self, generation: int) -> None:
        if self.status is not ItemStatus.FLUSHING or generation != self._generation:
            _logger.debug(
                "Save of %s (generation %d) superseded by generation %d",
                self.key,
                generation,
                self._generation,
            )
            return
        self.status = ItemStatus.NORMAL
        self._cancel_cooldown()
        self._cooldown = self._store.scheduler.call_later(
            self._store.config.cooldown_delay, self._on_cooldown
        )

    def _on_cooldown(self) -> None:
        self._cooldown = None
        if self.status is ItemStatus.NORMAL:
            self.dirty = False

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _cancel_debounce(self) -> None:
        if self._debounce is not None:
            self._debounce.cancel()
            self._debounce = None

    def _cancel_cooldown(self) -> None:
        if self._cooldown is not None:
            self._cooldown.cancel()
            self._cooldown = None

    def cancel_timers(self) -> None:
        """Drop scheduled timers without sending anything."""
        self._cancel_debounce()
        self._cancel_cooldown()
