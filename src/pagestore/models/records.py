"""Content node records and the origin stamp they carry."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import Field, ValidationError, field_validator

from pagestore._constants import META_KEY
from pagestore.exceptions import MalformedRecordError
from pagestore.models._base import PageStoreBaseModel


class NodeMeta(PageStoreBaseModel):
    """Origin stamp stored under the reserved ``___meta`` field."""

    author: str | None = Field(default=None, description="Client id of the last remote writer")


class NodeRecord(PageStoreBaseModel):
    """A single record delivered by the bulk loader."""

    name: str
    content: str = Field(..., description="Serialized (JSON) node payload")

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value:
            raise ValueError("name must be non-empty")
        return value


def split_meta(data: Mapping[str, Any]) -> tuple[dict[str, Any], NodeMeta | None]:
    """Separate the origin stamp from the user-visible fields of *data*."""
    payload = {k: v for k, v in data.items() if k != META_KEY}
    raw_meta = data.get(META_KEY)
    if not isinstance(raw_meta, Mapping):
        return payload, None
    try:
        return payload, NodeMeta.model_validate(dict(raw_meta))
    except ValidationError:
        # An unreadable stamp cannot match our client id; keep the data.
        return payload, None


def parse_node_content(content: str, *, name: str = "") -> dict[str, Any]:
    """Decode serialized node content into a mapping.

    The reserved meta field is kept; callers split it with :func:`split_meta`.

    Raises
    ------
    MalformedRecordError
        If *content* is not a JSON object.
    """
    try:
        decoded = json.loads(content)
    except (TypeError, ValueError) as exc:
        raise MalformedRecordError(f"Node {name!r} content is not JSON: {exc}", name=name) from exc
    if not isinstance(decoded, dict):
        raise MalformedRecordError(
            f"Node {name!r} content must be a JSON object, got {type(decoded).__name__}",
            name=name,
        )
    return decoded
