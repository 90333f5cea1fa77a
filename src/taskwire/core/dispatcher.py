# src/taskwire/core/dispatcher.py

from __future__ import annotations

"""
Request dispatcher.

Turns one decoded request object into one response envelope:

    Received -> Classified -> Resolved -> Invoked -> Responded

with ErrorResponded reachable from every step.

Every failure (bad shape, unknown capability, handler exception, timeout) is
converted to {"id": ..., "error": "..."} here. Nothing raised by a handler
reaches the transport loop.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Mapping
from enum import StrEnum
from typing import Any

from .discovery import build_manifest
from .registry import CapabilityKind, CapabilityRegistry, ResourceEntry

logger = logging.getLogger(__name__)

# Payload keys that may never be overwritten by handler output.
_ENVELOPE_KEYS = frozenset({"id", "type", "error"})


class RequestType(StrEnum):
    DISCOVER = "discover"
    RESOURCE = "resource"
    INVOKE = "invoke"
    PROMPT = "prompt"

    @property
    def response_type(self) -> str:
        return f"{self.value}_response"


class DispatchError(Exception):
    """Classification or resolution failure; the message goes on the wire."""


def error_response(request_id: Any, message: str) -> dict[str, Any]:
    return {"id": request_id, "error": message}


def _exc_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class Dispatcher:
    def __init__(
        self,
        registry: CapabilityRegistry,
        *,
        server_info: Mapping[str, Any] | None = None,
        request_timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._server_info = dict(server_info or {})
        # None or <= 0 means "no deadline".
        self._request_timeout = request_timeout if request_timeout and request_timeout > 0 else None

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    async def dispatch(self, request: Any) -> dict[str, Any]:
        """Handle one decoded request. Never raises (except on cancellation)."""
        if not isinstance(request, dict):
            return error_response(None, "Invalid request format")

        request_id = request.get("id")
        t0 = time.monotonic()

        try:
            rtype = self._classify(request)
            payload = await self._resolve_and_invoke(rtype, request)
        except DispatchError as e:
            logger.info("Request id=%r rejected: %s", request_id, e)
            return error_response(request_id, str(e))
        except Exception as e:
            logger.exception("Request id=%r failed", request_id)
            return error_response(request_id, _exc_message(e))

        logger.debug(
            "Request id=%r type=%s done in %.1fms",
            request_id,
            rtype.value,
            (time.monotonic() - t0) * 1000.0,
        )

        response: dict[str, Any] = {"id": request_id, "type": rtype.response_type}
        for key, value in payload.items():
            if key not in _ENVELOPE_KEYS:
                response[key] = value
        return response

    # ---- steps ----

    @staticmethod
    def _classify(request: dict[str, Any]) -> RequestType:
        raw = request.get("type")
        if raw is None or raw == "":
            raise DispatchError("Invalid request format")
        try:
            return RequestType(raw)
        except (TypeError, ValueError):
            raise DispatchError(f"Unsupported request type: {raw}") from None

    async def _resolve_and_invoke(self, rtype: RequestType, request: dict[str, Any]) -> dict[str, Any]:
        if rtype == RequestType.DISCOVER:
            return build_manifest(self._registry, self._server_info)

        params = request.get("parameters")
        if params is None:
            params = {}
        elif not isinstance(params, dict):
            raise DispatchError("Invalid parameters: expected an object")

        if rtype == RequestType.RESOURCE:
            uri = request.get("uri")
            if not isinstance(uri, str) or not uri:
                raise DispatchError("Invalid request: 'uri' must be a non-empty string")
            entry, bound = self._resolve_resource(uri)
            logger.debug("Resource %s matched %s params=%s", uri, entry.uri_template, bound)
            result = await self._run(entry.handler(uri, bound))
            return _normalize_resource(uri, result)

        if rtype == RequestType.INVOKE:
            name = request.get("tool")
            entry = self._registry.lookup(CapabilityKind.TOOL, name) if isinstance(name, str) else None
            if entry is None:
                raise DispatchError(f"Tool not found: {name}")
            result = await self._run(entry.handler(params))
            return _normalize_content(result)

        name = request.get("prompt")
        entry = self._registry.lookup(CapabilityKind.PROMPT, name) if isinstance(name, str) else None
        if entry is None:
            raise DispatchError(f"Prompt not found: {name}")
        result = await self._run(entry.handler(params))
        return _normalize_messages(result)

    def _resolve_resource(self, uri: str) -> tuple[ResourceEntry, dict[str, str]]:
        # First match in registration order wins.
        for entry in self._registry.all(CapabilityKind.RESOURCE):
            if not isinstance(entry, ResourceEntry):
                continue
            bound = entry.uri_template.match(uri)
            if bound is not None:
                return entry, bound
        raise DispatchError(f"No resource handler found for URI: {uri}")

    async def _run(self, aw: Awaitable[Any]) -> Any:
        if self._request_timeout is None:
            return await aw
        try:
            return await asyncio.wait_for(aw, timeout=self._request_timeout)
        except asyncio.TimeoutError:
            logger.warning("Handler exceeded %.3gs deadline, abandoning it", self._request_timeout)
            raise DispatchError(f"Request timed out after {self._request_timeout:g}s") from None


# ---- result normalization ----
# Handlers normally return the wire payload already; plain values are wrapped
# so that every success response keeps its documented shape.


def _normalize_content(result: Any) -> dict[str, Any]:
    if isinstance(result, dict):
        return result
    if isinstance(result, str):
        return {"content": [{"type": "text", "text": result}]}
    return {"content": [{"type": "json", "json": result}]}


def _normalize_resource(uri: str, result: Any) -> dict[str, Any]:
    if isinstance(result, dict):
        return result
    if isinstance(result, str):
        return {"contents": [{"uri": uri, "text": result, "metadata": {}}]}
    return {"contents": [{"uri": uri, "text": "", "metadata": {"value": result}}]}


def _normalize_messages(result: Any) -> dict[str, Any]:
    if isinstance(result, dict):
        return result
    if isinstance(result, str):
        return {"messages": [{"role": "user", "content": [{"type": "text", "text": result}]}]}
    if isinstance(result, list):
        return {"messages": result}
    raise TypeError(f"Prompt handler returned unsupported value of type {type(result).__name__}")
