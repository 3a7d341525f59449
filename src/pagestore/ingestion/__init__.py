"""Ingestion layer.

This package contains adapters that turn bulk snapshots delivered by the
page data loader into normalized ``(key, payload)`` pairs for the store.
"""

__all__: list[str] = []
