"""pagestore - Async client-side content cache for in-page editing."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pagestore")
except PackageNotFoundError:
    __version__ = "0+local"
from pagestore._scheduler import LoopScheduler, Scheduler
from pagestore._transport import Gateway, HttpGateway
from pagestore.config import StoreConfig
from pagestore.exceptions import (
    GatewayError,
    MalformedRecordError,
    PageStoreConfigError,
    PageStoreError,
)
from pagestore.models import NodeMeta, NodeRecord
from pagestore.state.item import Item
from pagestore.state.pending import LeaveCheck, LeaveGuard, PendingItems
from pagestore.state.status import ItemStatus
from pagestore.state.store import ContentStore, new_client_id

__all__ = [
    "__version__",
    "ContentStore",
    "Gateway",
    "GatewayError",
    "HttpGateway",
    "Item",
    "ItemStatus",
    "LeaveCheck",
    "LeaveGuard",
    "LoopScheduler",
    "MalformedRecordError",
    "NodeMeta",
    "NodeRecord",
    "PageStoreConfigError",
    "PageStoreError",
    "PendingItems",
    "Scheduler",
    "StoreConfig",
    "new_client_id",
]
