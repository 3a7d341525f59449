"""Persistence gateway: the single "save path" operation of the backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pagestore._constants import CLIENT_ID_HEADER
from pagestore._redact import summarize_for_log
from pagestore.config import StoreConfig
from pagestore.exceptions import GatewayError

_logger = logging.getLogger(__name__)


class Gateway(Protocol):
    """Structural gateway interface used by items.

    Only success or failure matters to the store; the returned value is
    ignored. Having a protocol here makes it easy to pass test doubles.
    """

    async def save_path(self, resource_path: str, data: Mapping[str, Any]) -> Any:
        ...


class HttpGateway:
    """Gateway that POSTs node data to the content backend over HTTP."""

    def __init__(
        self,
        config: StoreConfig,
        http_session: aiohttp.ClientSession,
        *,
        client_id: str,
    ) -> None:
        self._config = config
        self._http = http_session
        self._client_id = client_id

    def _url(self, resource_path: str) -> str:
        base = self._config.backend_url.rstrip("/")
        prefix = self._config.backend_prefix.rstrip("/")
        return f"{base}{prefix}/content/{resource_path.lstrip('/')}"

    async def save_path(self, resource_path: str, data: Mapping[str, Any]) -> Any:
        """Persist *data* at *resource_path*.

        Returns the decoded JSON acknowledgement, or the raw text when the
        backend does not answer with JSON.

        Raises
        ------
        GatewayError
            On network failure or a non-2xx response.
        """
        url = self._url(resource_path)
        headers = {
            "content-type": "application/json; charset=UTF-8",
            CLIENT_ID_HEADER: self._client_id,
        }
        body = json.dumps(dict(data), separators=(",", ":"))

        _logger.debug("POST %s %s", url, summarize_for_log(data))

        try:
            async with self._http.post(url, data=body, headers=headers) as resp:
                text = await resp.text()
                if resp.status < 200 or resp.status >= 300:
                    raise GatewayError(
                        f"HTTP {resp.status} saving {resource_path}: {text[:200]}",
                        status_code=resp.status,
                        path=resource_path,
                    )
        except GatewayError:
            raise
        except aiohttp.ClientError as exc:
            raise GatewayError(
                f"Saving {resource_path} failed: {exc}",
                path=resource_path,
            ) from exc

        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text
