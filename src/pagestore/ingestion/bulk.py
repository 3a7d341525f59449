"""Bulk snapshot normalization.

The bulk loader delivers ``{source: records}`` where *records* is either a
plain list of ``{name, content}`` records or the GraphQL connection shape
``{"edges": [{"node": {name, content}}]}``. Both are flattened here into
``(key, payload)`` pairs; the store never sees the transport shape.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from pagestore._constants import NODE_CHILD_DELIMITER
from pagestore.exceptions import MalformedRecordError
from pagestore.models.records import NodeRecord, parse_node_content

_logger = logging.getLogger(__name__)


def join_key(key_path: Any) -> str:
    """Join path segments into a compound key.

    A plain string is taken as an already-joined key.
    """
    if isinstance(key_path, str):
        return key_path
    return NODE_CHILD_DELIMITER.join(str(segment) for segment in key_path)


def _source_records(records: Any) -> list[Any]:
    if records is None:
        return []
    if isinstance(records, Mapping):
        edges = records.get("edges")
        return list(edges) if isinstance(edges, list) else []
    if isinstance(records, (list, tuple)):
        return list(records)
    return []


def to_node_record(raw: Any) -> NodeRecord:
    """Coerce one raw record (or connection edge) into a :class:`NodeRecord`.

    Raises
    ------
    MalformedRecordError
        If the record lacks a usable ``name``/``content`` pair.
    """
    if isinstance(raw, NodeRecord):
        return raw
    if isinstance(raw, Mapping) and isinstance(raw.get("node"), Mapping):
        raw = raw["node"]
    if not isinstance(raw, Mapping):
        raise MalformedRecordError(f"Record must be a mapping, got {type(raw).__name__}")
    try:
        return NodeRecord.model_validate(dict(raw))
    except ValidationError as exc:
        raise MalformedRecordError(
            f"Invalid record: {exc.error_count()} validation error(s)",
            name=str(raw.get("name", "")),
        ) from exc


def iter_snapshot(snapshot_by_source: Mapping[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
    """Yield ``(key, payload)`` for every parsable record in the snapshot.

    Malformed records are logged and skipped; one bad record never aborts
    the rest of the batch. Payloads still carry the reserved meta field.
    """
    for source, records in snapshot_by_source.items():
        for raw in _source_records(records):
            try:
                record = to_node_record(raw)
                payload = parse_node_content(record.content, name=record.name)
            except MalformedRecordError as exc:
                _logger.debug("Skipping malformed record in %s: %s", source, exc)
                continue
            yield join_key((source, record.name)), payload
