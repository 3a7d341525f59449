"""Store configuration for pagestore."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pagestore._constants import (
    BACKEND_PREFIX,
    BACKEND_URL,
    DEFAULT_COOLDOWN_DELAY,
    DEFAULT_DEBOUNCE_DELAY,
    PAGE_COLLECTION,
    PAGES_ROOT,
    SITE_ROOT,
)
from pagestore.exceptions import PageStoreConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_seconds(name: str, value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as exc:
        raise PageStoreConfigError(f"{name} must be a number of seconds, got {value!r}") from exc
    return seconds


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """Store configuration.

    Parameters
    ----------
    slug : str or None
        Slug of the page currently displayed. Page-scoped content is
        persisted under ``{pages_root}/{slug}/...``.
    save_enabled : bool
        Master switch for persistence. When off, items keep local edits
        but never call the gateway. Read once per item at construction.
    debounce_delay : float
        Quiet period in seconds after the last local write before an item
        is sent to the gateway.
    cooldown_delay : float
        Seconds after a successful save before the item's dirty flag is
        cleared and incoming refreshes are accepted again.
    backend_url : str
        Base URL of the content backend used by :class:`HttpGateway`.
    backend_prefix : str
        Path prefix of the backend API.
    page_collection : str
        Source name whose records are page-scoped.
    pages_root : str
        Root directory for page-scoped resources.
    site_root : str
        Root directory for site-wide resources.
    """

    slug: str | None = None
    save_enabled: bool = True
    debounce_delay: float = DEFAULT_DEBOUNCE_DELAY
    cooldown_delay: float = DEFAULT_COOLDOWN_DELAY
    backend_url: str = BACKEND_URL
    backend_prefix: str = BACKEND_PREFIX
    page_collection: str = PAGE_COLLECTION
    pages_root: str = PAGES_ROOT
    site_root: str = SITE_ROOT

    def __post_init__(self) -> None:
        if self.debounce_delay < 0:
            raise PageStoreConfigError(f"debounce_delay must be >= 0, got {self.debounce_delay}")
        if self.cooldown_delay < 0:
            raise PageStoreConfigError(f"cooldown_delay must be >= 0, got {self.cooldown_delay}")

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Create configuration from environment variables.

        Reads optional ``PAGESTORE_*`` variables. Explicit keyword
        arguments override environment values.

        Raises
        ------
        PageStoreConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "PAGESTORE_SLUG": "slug",
            "PAGESTORE_BACKEND_URL": "backend_url",
            "PAGESTORE_BACKEND_PREFIX": "backend_prefix",
            "PAGESTORE_PAGE_COLLECTION": "page_collection",
            "PAGESTORE_PAGES_ROOT": "pages_root",
            "PAGESTORE_SITE_ROOT": "site_root",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        if "save_enabled" not in overrides:
            config_kwargs["save_enabled"] = _env_bool(env.get("PAGESTORE_SAVE_ENABLED"), True)

        for env_key, field_name in (
            ("PAGESTORE_DEBOUNCE_DELAY", "debounce_delay"),
            ("PAGESTORE_COOLDOWN_DELAY", "cooldown_delay"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_seconds(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
