"""In-memory content store backing the page editor.

This is the only component that creates items. Everything the page
reads or writes goes through :meth:`ContentStore.get_node` and
:meth:`ContentStore.set_node`.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from pagestore._scheduler import LoopScheduler, Scheduler
from pagestore._transport import Gateway
from pagestore.config import StoreConfig
from pagestore.ingestion.bulk import iter_snapshot, join_key
from pagestore.models.records import split_meta
from pagestore.state.item import Item
from pagestore.state.pending import LeaveGuard, PendingItems
from pagestore.state.policy import TransientPredicate, is_preview_template_path

_logger = logging.getLogger(__name__)

KeyPath = str | Sequence[str]


def new_client_id() -> str:
    """Generate a process-lifetime client id for echo suppression."""
    return str(uuid.uuid1())


def _canonical(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)


class ContentStore:
    """Keyed collection of content items.

    Usage::

        store = ContentStore(config, gateway, client_id=client_id)
        store.bulk_load(page_data)
        store.set_node(["Page", "title"], {"text": "Hello"})

    Parameters
    ----------
    config
        Store configuration; ``config.slug`` is the initial page slug.
    gateway
        Persistence gateway; only success or failure of a save matters.
    client_id
        Identifier stamped on this client's writes by the backend. Payloads
        carrying it are echoes and are ignored.
    scheduler
        Timer/task seam. Defaults to the running asyncio loop.
    is_transient
        Rule for resource paths that must never be written.
    """

    def __init__(
        self,
        config: StoreConfig,
        gateway: Gateway,
        *,
        client_id: str,
        scheduler: Scheduler | None = None,
        is_transient: TransientPredicate = is_preview_template_path,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.client_id = client_id
        self.scheduler: Scheduler = scheduler or LoopScheduler()
        self.is_transient = is_transient
        self.slug = config.slug
        self.snapshot: dict[str, dict[str, Any]] = {}
        self._items: dict[str, Item] = {}
        self.pending = PendingItems(self._items.values)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ContentStore:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Send outstanding edits, wait for them, then stop all timers."""
        await self.flush()
        for item in self._items.values():
            item.cancel_timers()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def set_slug(self, slug: str | None) -> None:
        """Switch to another page. Only items created afterwards use it."""
        self.slug = slug

    def bulk_load(self, snapshot_by_source: Mapping[str, Any] | None) -> int:
        """Ingest a bulk snapshot delivered at page render time.

        Records whose payload matches the existing item are skipped.
        Everything else is upserted as an incoming refresh, which dirty
        items ignore. Returns the number of keys upserted.
        """
        # The loader passes None when the page has no query data.
        if snapshot_by_source is None:
            return 0

        snapshot: dict[str, dict[str, Any]] = {}
        upserted = 0
        for key, payload in iter_snapshot(snapshot_by_source):
            visible, _meta = split_meta(payload)
            snapshot[key] = visible
            existing = self._items.get(key)
            if existing is not None and _canonical(existing.data) == _canonical(visible):
                continue
            self.set_node(key, payload, save=False)
            upserted += 1

        self.snapshot = snapshot
        _logger.debug("Bulk load: %d records, %d upserted", len(snapshot), upserted)
        return upserted

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    def get_keys(self) -> list[str]:
        return list(self._items.keys())

    def get_item(self, key_path: KeyPath) -> Item | None:
        return self._items.get(join_key(key_path))

    def get_node(self, key_path: KeyPath) -> dict[str, Any]:
        """Return a copy of the node's data.

        Falls back to the last bulk snapshot, then to an empty record.
        """
        key = join_key(key_path)
        item = self._items.get(key)
        if item is not None:
            return copy.deepcopy(item.data)
        return copy.deepcopy(self.snapshot.get(key, {}))

    def set_node(self, key_path: KeyPath, value: Mapping[str, Any] | None = None, save: bool = True) -> None:
        """Save or update a node.

        ``save=True`` is a local edit and will be persisted;
        ``save=False`` is a refresh from the content source.
        """
        key = join_key(key_path)
        item = self._items.get(key)
        if item is not None:
            item.update(value or {}, save)
        else:
            self._items[key] = Item(self, key, value or {}, save)

    def pending_items(self) -> list[Item]:
        return list(self.pending)

    def has_pending_items(self) -> bool:
        return bool(self.pending)

    def leave_guard(self, **kwargs: Any) -> LeaveGuard:
        return LeaveGuard(self.pending, **kwargs)

    async def flush(self) -> None:
        """Send every debounced edit now and wait for in-flight saves."""
        saves = [save for item in self._items.values() if (save := item.flush_now()) is not None]
        if saves:
            await asyncio.gather(*saves)
