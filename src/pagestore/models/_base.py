"""Base model for records exchanged with the content source.

Every record model inherits from :class:`PageStoreBaseModel` which is
frozen (records are snapshots, never edited in place) and ignores
unknown keys so newer content sources can add fields without breaking
ingestion.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PageStoreBaseModel(BaseModel):
    """Base for pagestore record models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
