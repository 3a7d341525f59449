"""Data models for content node records."""

from pagestore.models._base import PageStoreBaseModel
from pagestore.models.records import NodeMeta, NodeRecord, parse_node_content, split_meta

__all__ = [
    "NodeMeta",
    "NodeRecord",
    "PageStoreBaseModel",
    "parse_node_content",
    "split_meta",
]
