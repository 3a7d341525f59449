from __future__ import annotations

import json
from collections.abc import Awaitable, Callable

import pytest

from pagestore.config import StoreConfig
from pagestore.exceptions import GatewayError
from pagestore.state.status import ItemStatus
from pagestore.state.store import ContentStore

Settle = Callable[[], Awaitable[None]]


def _item(store: ContentStore, key: str):  # noqa: ANN202
    item = store.get_item(key)
    assert item is not None
    return item


@pytest.mark.asyncio
async def test_edit_is_saved_after_debounce_and_clears_after_cooldown(
    store: ContentStore, gateway, scheduler, settle: Settle
) -> None:
    store.bulk_load({"Page": [{"name": "home", "content": json.dumps({"title": "A"})}]})
    assert store.get_node(["Page", "home"]) == {"title": "A"}
    assert store.pending_items() == []

    store.set_node(["Page", "home"], {"title": "B"}, True)
    item = _item(store, "Page$home")
    assert item.status == ItemStatus.STALE
    assert item.dirty is True
    assert store.pending_items() == [item]

    scheduler.advance(1.5)
    await settle()
    assert gateway.calls == []

    scheduler.advance(0.5)
    await settle()
    assert gateway.calls == [("pages/about/home", {"title": "B"})]
    assert item.status == ItemStatus.NORMAL
    assert item.dirty is True
    assert store.pending_items() == [item]

    scheduler.advance(4.5)
    assert store.pending_items() == [item]

    scheduler.advance(0.5)
    assert item.dirty is False
    assert store.pending_items() == []


@pytest.mark.asyncio
async def test_rapid_writes_produce_single_save_with_latest_payload(
    store: ContentStore, gateway, scheduler, settle: Settle
) -> None:
    store.set_node(["Site", "footer"], {"text": "first"})
    scheduler.advance(1.0)
    store.set_node(["Site", "footer"], {"text": "second"})

    scheduler.advance(1.5)
    await settle()
    assert gateway.calls == []

    scheduler.advance(0.5)
    await settle()
    assert gateway.calls == [("site/footer", {"text": "second"})]


@pytest.mark.asyncio
async def test_late_success_does_not_clobber_newer_edit(
    store: ContentStore, gateway, scheduler, settle: Settle
) -> None:
    gateway.manual = True
    store.set_node(["Page", "home"], {"title": "v1"})
    item = _item(store, "Page$home")

    scheduler.advance(2.0)
    await settle()
    assert item.status == ItemStatus.FLUSHING

    store.set_node(["Page", "home"], {"title": "v2"})
    assert item.status == ItemStatus.STALE

    gateway.complete(0)
    await settle()
    assert item.status == ItemStatus.STALE
    assert item.dirty is True
    assert scheduler.active  # debounce for v2 still armed

    scheduler.advance(2.0)
    await settle()
    assert [data for _, data in gateway.calls] == [{"title": "v1"}, {"title": "v2"}]
    gateway.complete(1)
    await settle()
    assert item.status == ItemStatus.NORMAL


@pytest.mark.asyncio
async def test_older_flush_completing_during_newer_flush_is_ignored(
    store: ContentStore, gateway, scheduler, settle: Settle
) -> None:
    gateway.manual = True
    store.set_node(["Page", "home"], {"title": "v1"})
    item = _item(store, "Page$home")
    scheduler.advance(2.0)
    await settle()

    store.set_node(["Page", "home"], {"title": "v2"})
    scheduler.advance(2.0)
    await settle()
    assert item.status == ItemStatus.FLUSHING
    assert len(gateway.waiters) == 2

    # The v1 save finishes while v2 is in flight.
    gateway.complete(0)
    await settle()
    assert item.status == ItemStatus.FLUSHING
    assert not scheduler.active

    gateway.complete(1)
    await settle()
    assert item.status == ItemStatus.NORMAL
    assert len(scheduler.active) == 1


@pytest.mark.asyncio
async def test_write_during_cooldown_keeps_item_dirty(
    store: ContentStore, gateway, scheduler, settle: Settle
) -> None:
    store.set_node(["Page", "home"], {"title": "v1"})
    item = _item(store, "Page$home")
    scheduler.advance(2.0)
    await settle()
    assert item.status == ItemStatus.NORMAL

    scheduler.advance(3.0)
    store.set_node(["Page", "home"], {"title": "v2"})
    scheduler.advance(2.5)
    await settle()

    # Cool-down from the first save was cancelled by the second write.
    assert item.dirty is True
    assert len(gateway.calls) == 2
    assert store.pending_items() == [item]

    scheduler.advance(5.0)
    assert item.dirty is False


@pytest.mark.asyncio
async def test_refresh_during_cooldown_is_discarded(
    store: ContentStore, gateway, scheduler, settle: Settle
) -> None:
    store.set_node(["Page", "home"], {"title": "mine"})
    scheduler.advance(2.0)
    await settle()

    store.set_node(["Page", "home"], {"title": "old server copy"}, False)
    assert store.get_node(["Page", "home"]) == {"title": "mine"}

    scheduler.advance(5.0)
    store.set_node(["Page", "home"], {"title": "server"}, False)
    assert store.get_node(["Page", "home"]) == {"title": "server"}


@pytest.mark.asyncio
async def test_failed_save_leaves_item_pending(
    store: ContentStore, gateway, scheduler, settle: Settle, caplog: pytest.LogCaptureFixture
) -> None:
    gateway.error = GatewayError("HTTP 500", status_code=500, path="pages/about/home")
    store.set_node(["Page", "home"], {"title": "lost?"})
    item = _item(store, "Page$home")

    scheduler.advance(2.0)
    await settle()

    assert item.status == ItemStatus.FLUSHING
    assert item.dirty is True
    assert store.pending_items() == [item]
    assert store.leave_guard().check().allowed is False
    assert "Saving pages/about/home failed" in caplog.text

    scheduler.advance(60.0)
    await settle()
    assert len(gateway.calls) == 1


@pytest.mark.asyncio
async def test_write_after_failed_save_retries(
    store: ContentStore, gateway, scheduler, settle: Settle
) -> None:
    gateway.error = RuntimeError("network down")
    store.set_node(["Page", "home"], {"title": "v1"})
    scheduler.advance(2.0)
    await settle()

    gateway.error = None
    store.set_node(["Page", "home"], {"title": "v2"})
    scheduler.advance(2.0)
    await settle()
    scheduler.advance(5.0)

    assert [data for _, data in gateway.calls] == [{"title": "v1"}, {"title": "v2"}]
    assert store.pending_items() == []


@pytest.mark.asyncio
async def test_items_flush_independently(store: ContentStore, gateway, scheduler, settle: Settle) -> None:
    gateway.manual = True
    store.set_node(["Page", "a"], {"v": 1})
    scheduler.advance(1.0)
    store.set_node(["Page", "b"], {"v": 2})

    scheduler.advance(1.0)
    await settle()
    assert [path for path, _ in gateway.calls] == ["pages/about/a"]

    scheduler.advance(1.0)
    await settle()
    assert [path for path, _ in gateway.calls] == ["pages/about/a", "pages/about/b"]
    assert len(store.pending_items()) == 2

    gateway.complete(1)
    await settle()
    assert _item(store, "Page$a").status == ItemStatus.FLUSHING
    assert _item(store, "Page$b").status == ItemStatus.NORMAL


@pytest.mark.asyncio
async def test_disabled_persistence_never_calls_gateway(gateway, scheduler, settle: Settle) -> None:
    store = ContentStore(StoreConfig(slug="about", save_enabled=False), gateway, client_id="c", scheduler=scheduler)

    store.set_node(["Page", "home"], {"title": "local"})
    scheduler.advance(10.0)
    await settle()

    item = _item(store, "Page$home")
    assert item.persists is False
    assert item.status == ItemStatus.NORMAL
    assert store.get_node(["Page", "home"]) == {"title": "local"}
    assert gateway.calls == []
    assert store.pending_items() == []

    # Local edits still win over refreshes.
    store.set_node(["Page", "home"], {"title": "server"}, False)
    assert store.get_node(["Page", "home"]) == {"title": "local"}


@pytest.mark.asyncio
async def test_template_preview_page_is_never_saved(gateway, scheduler, settle: Settle) -> None:
    store = ContentStore(StoreConfig(slug="___templates/landing"), gateway, client_id="c", scheduler=scheduler)

    store.set_node(["Page", "hero"], {"title": "preview"})
    store.set_node(["Site", "footer"], {"text": "saved"})
    scheduler.advance(2.0)
    await settle()

    assert _item(store, "Page$hero").persists is False
    assert gateway.calls == [("site/footer", {"text": "saved"})]


@pytest.mark.asyncio
async def test_custom_transient_predicate(gateway, scheduler, settle: Settle) -> None:
    store = ContentStore(
        StoreConfig(slug="about"),
        gateway,
        client_id="c",
        scheduler=scheduler,
        is_transient=lambda path: path.startswith("site/"),
    )

    store.set_node(["Site", "footer"], {"text": "x"})
    scheduler.advance(2.0)
    await settle()

    assert gateway.calls == []


@pytest.mark.asyncio
async def test_flush_sends_debounced_edits_immediately(store: ContentStore, gateway, scheduler) -> None:
    store.set_node(["Page", "home"], {"title": "now"})
    store.set_node(["Site", "footer"], {"text": "now"})

    await store.flush()

    assert sorted(path for path, _ in gateway.calls) == ["pages/about/home", "site/footer"]
    assert all(item.status == ItemStatus.NORMAL for item in store.pending_items())
    # Debounce timers were consumed; only cool-downs remain.
    assert len(scheduler.active) == 2


@pytest.mark.asyncio
async def test_aclose_flushes_and_stops_timers(store: ContentStore, gateway, scheduler) -> None:
    async with store:
        store.set_node(["Page", "home"], {"title": "bye"})

    assert gateway.calls == [("pages/about/home", {"title": "bye"})]
    assert scheduler.active == []


@pytest.mark.asyncio
async def test_set_slug_applies_to_new_items(store: ContentStore, gateway, scheduler, settle: Settle) -> None:
    store.set_node(["Page", "intro"], {"v": 1})
    store.set_slug("contact")
    store.set_node(["Page", "form"], {"v": 2})
    store.set_node(["Page", "intro"], {"v": 3})

    scheduler.advance(2.0)
    await settle()

    assert sorted(path for path, _ in gateway.calls) == ["pages/about/intro", "pages/contact/form"]
