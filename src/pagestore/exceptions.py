"""Custom exception hierarchy for pagestore."""

from __future__ import annotations


class PageStoreError(Exception):
    """Base exception for all pagestore errors."""


class PageStoreConfigError(PageStoreError):
    """Invalid or missing configuration."""


class MalformedRecordError(PageStoreError):
    """A bulk-load record could not be parsed.

    Raised by the record parsing helpers; :meth:`ContentStore.bulk_load`
    catches it per record so one bad node never aborts the batch.
    """

    def __init__(self, message: str, *, name: str = "") -> None:
        self.name = name
        super().__init__(message)


class GatewayError(PageStoreError):
    """Persistence gateway failure (network, non-2xx, invalid response)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        path: str = "",
    ) -> None:
        self.status_code = status_code
        self.path = path
        super().__init__(message)
