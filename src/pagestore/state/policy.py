"""Deterministic acceptance and persistence policy.

This module contains *no* timers or I/O. Items consult it once at
construction (where to save, whether to save at all) and on every
incoming payload (whether it is an echo of our own write).
"""

from __future__ import annotations

import posixpath
from collections.abc import Callable

from pagestore._constants import NODE_CHILD_DELIMITER, PAGES_ROOT, TEMPLATES_DIR
from pagestore.config import StoreConfig
from pagestore.models.records import NodeMeta

TransientPredicate = Callable[[str], bool]


def is_own_echo(meta: NodeMeta | None, client_id: str) -> bool:
    """Return ``True`` when *meta* stamps the payload as written by this client."""
    return meta is not None and meta.author is not None and meta.author == client_id


def resource_path_for(key: str, config: StoreConfig, slug: str | None) -> str:
    """Map a compound key to the backend resource path.

    The leftmost key segment names the source. Page-scoped sources are
    stored per page slug; everything else is site-wide.
    """
    collection, _, file_name = key.partition(NODE_CHILD_DELIMITER)
    if collection == config.page_collection:
        return posixpath.join(config.pages_root, slug or "", file_name)
    return posixpath.join(config.site_root, file_name)


def is_preview_template_path(resource_path: str) -> bool:
    """Default transient-path rule: pages rendered only for template preview."""
    return posixpath.join(PAGES_ROOT, TEMPLATES_DIR) in resource_path


def should_persist(
    resource_path: str,
    *,
    save_enabled: bool,
    is_transient: TransientPredicate = is_preview_template_path,
) -> bool:
    return save_enabled and not is_transient(resource_path)
