# tests/test_task_api.py

from __future__ import annotations

import json

import httpx
import pytest

from taskwire.tasks.task_api import TaskApiClient, TaskApiError

BASE = "https://tasks.invalid/api"


def _client(handler, api_key: str | None = "secret") -> TaskApiClient:
    return TaskApiClient(BASE, api_key, timeout_seconds=2.0, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_call_sends_key_and_joins_base_path() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tasks": []})

    client = _client(handler)
    try:
        result = await client.call("GET", "/tasks", query={"status": "done", "priority": None})
    finally:
        await client.aclose()

    assert result == {"tasks": []}
    (req,) = seen
    assert req.url.path == "/api/tasks"
    assert dict(req.url.params) == {"status": "done"}
    assert req.headers["X-API-Key"] == "secret"


@pytest.mark.asyncio
async def test_call_sends_json_body() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"id": 3})

    client = _client(handler)
    try:
        result = await client.call("POST", "/tasks", body={"task": "x", "category": "y"})
    finally:
        await client.aclose()

    assert result == {"id": 3}
    assert bodies == [{"task": "x", "category": "y"}]


@pytest.mark.asyncio
async def test_error_status_raises_with_decoded_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "Task not found"})

    client = _client(handler)
    try:
        with pytest.raises(TaskApiError) as ei:
            await client.call("DELETE", "/tasks/9")
    finally:
        await client.aclose()

    assert ei.value.status == 404
    assert ei.value.body == {"error": "Task not found"}
    assert str(ei.value) == 'API Error (404): {"error": "Task not found"}'


@pytest.mark.asyncio
async def test_empty_and_text_bodies() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(500, text="upstream exploded")

    client = _client(handler)
    try:
        assert await client.call("DELETE", "/tasks/1") == {}
        with pytest.raises(TaskApiError) as ei:
            await client.call("GET", "/tasks")
    finally:
        await client.aclose()

    assert str(ei.value) == 'API Error (500): "upstream exploded"'


@pytest.mark.asyncio
async def test_missing_key_fails_before_any_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    client = _client(handler, api_key=None)
    with pytest.raises(TaskApiError) as ei:
        await client.call("GET", "/tasks")

    assert ei.value.status is None
    assert "API key is not set" in str(ei.value)
    assert seen == []


@pytest.mark.asyncio
async def test_transport_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    try:
        with pytest.raises(TaskApiError) as ei:
            await client.call("GET", "/tasks")
    finally:
        await client.aclose()

    assert ei.value.status is None
    assert str(ei.value).startswith("API request failed: ConnectError")
