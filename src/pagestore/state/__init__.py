"""State/store layer.

This package is the single source of truth for editable content on the
page: it merges bulk snapshots and local edits into per-node items and
decides when each item is persisted.
"""
