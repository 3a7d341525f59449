"""Helpers for compact debug logging of content payloads.

Editable nodes can carry large rich-text blobs and, occasionally, form
values a site owner would not want in a log file. Payloads are passed
through :func:`summarize_for_log` before being emitted at DEBUG level.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_MASKED_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "secret",
        "token",
        "apikey",
        "authorization",
        "cookie",
    }
)


def summarize_for_log(
    value: Any,
    *,
    max_string: int = 120,
    max_items: int = 20,
    _depth: int = 0,
) -> Any:
    """Return a shortened, masked copy of *value* suitable for debug logs."""
    if _depth > 8:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<{len(value)} chars>"
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        summary: dict[str, Any] = {}
        for index, (k, v) in enumerate(value.items()):
            if index >= max_items:
                summary["…"] = f"<{len(value) - max_items} more keys>"
                break
            key = str(k)
            if key.lower().replace("_", "") in _MASKED_KEYS:
                summary[key] = "<masked>"
            else:
                summary[key] = summarize_for_log(
                    v, max_string=max_string, max_items=max_items, _depth=_depth + 1
                )
        return summary

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        items = [
            summarize_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
            for v in list(value)[:max_items]
        ]
        if len(value) > max_items:
            items.append(f"<{len(value) - max_items} more items>")
        return items

    return repr(value)
