"""Per-item sync status."""

from __future__ import annotations

from enum import StrEnum


class ItemStatus(StrEnum):
    NORMAL = "normal"
    STALE = "stale"
    FLUSHING = "flushing"
