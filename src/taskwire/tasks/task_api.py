# src/taskwire/tasks/task_api.py

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class TaskApiError(RuntimeError):
    """
    Failure talking to the task store.

    status is the HTTP status code, or None when no response was received
    (missing API key, connection error, timeout).
    """

    def __init__(self, status: int | None, body: Any) -> None:
        self.status = status
        self.body = body
        super().__init__(self._render())

    def _render(self) -> str:
        if self.status is None:
            return str(self.body)
        try:
            body = json.dumps(self.body, ensure_ascii=False)
        except (TypeError, ValueError):
            body = str(self.body)
        return f"API Error ({self.status}): {body}"


class TaskApiClient:
    """
    Authenticated async client for the remote task store.

    One httpx.AsyncClient is created lazily and reused across requests
    (connection pooling); call aclose() on shutdown.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = httpx.Timeout(timeout_seconds, connect=min(5.0, timeout_seconds))
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings) -> TaskApiClient:
        return cls(
            base_url=str(getattr(settings, "api_base_url", "")),
            api_key=getattr(settings, "api_key", None),
            timeout_seconds=float(getattr(settings, "http_timeout_seconds", 30.0)),
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def call(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
    ) -> Any:
        if not self._api_key:
            raise TaskApiError(
                None,
                "API key is not set. Set TASKWIRE_API_KEY (or API_KEY) in your .env.",
            )

        headers = {
            "X-API-Key": self._api_key,
            "Content-Type": "application/json",
        }
        params = {k: v for k, v in (query or {}).items() if v is not None}

        logger.debug("API %s %s params=%s body=%s", method, path, params, body)

        try:
            resp = await self._get_client().request(
                method,
                path,
                headers=headers,
                params=params or None,
                json=body,
            )
        except httpx.HTTPError as e:
            logger.warning("API %s %s transport error: %r", method, path, e)
            raise TaskApiError(None, f"API request failed: {e.__class__.__name__}: {e}") from e

        if resp.is_error:
            logger.warning("API %s %s -> %s", method, path, resp.status_code)
            raise TaskApiError(resp.status_code, _decode_body(resp))

        logger.debug("API %s %s -> %s", method, path, resp.status_code)
        return _decode_body(resp)


def _decode_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return resp.text
