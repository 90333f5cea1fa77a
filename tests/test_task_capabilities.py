# tests/test_task_capabilities.py

from __future__ import annotations

import pytest

from taskwire.core.state import AppState
from taskwire.tasks.task_api import TaskApiError

from .fakes import SAMPLE_TASKS, FakeTaskApi


async def _invoke(state: AppState, tool: str, **params) -> dict:
    return await state.dispatcher.dispatch(
        {"id": "t", "type": "invoke", "tool": tool, "parameters": params}
    )


def _texts(resp: dict) -> list[str]:
    return [c["text"] for c in resp["content"] if c["type"] == "text"]


@pytest.mark.asyncio
async def test_tasks_list_resource_renders_every_task(state: AppState) -> None:
    resp = await state.dispatcher.dispatch({"id": 1, "type": "resource", "uri": "tasks://list"})

    contents = resp["contents"]
    assert [c["uri"] for c in contents] == ["tasks://task/1", "tasks://task/42"]
    assert contents[1]["text"].splitlines()[0:2] == ["ID: 42", "Task: Fix login redirect"]
    assert contents[1]["metadata"]["priority"] == "high"


@pytest.mark.asyncio
async def test_single_task_resource(state: AppState) -> None:
    resp = await state.dispatcher.dispatch({"id": "r1", "type": "resource", "uri": "tasks://task/42"})

    (item,) = resp["contents"]
    assert item["uri"] == "tasks://task/42"
    assert "Status: started" in item["text"]
    assert item["metadata"]["id"] == 42


@pytest.mark.asyncio
async def test_single_task_resource_not_found(state: AppState) -> None:
    resp = await state.dispatcher.dispatch({"id": "r2", "type": "resource", "uri": "tasks://task/999"})

    (item,) = resp["contents"]
    assert item["text"] == "Task with ID 999 not found"
    assert item["metadata"] == {"error": "Task not found"}


@pytest.mark.asyncio
async def test_tasks_list_resource_reports_api_failure(state: AppState, fake_api: FakeTaskApi) -> None:
    fake_api.errors[("GET", "/tasks")] = TaskApiError(503, {"detail": "maintenance"})

    resp = await state.dispatcher.dispatch({"id": 1, "type": "resource", "uri": "tasks://list"})

    (item,) = resp["contents"]
    assert item["uri"] == "tasks://error"
    assert item["text"] == 'Error retrieving tasks: API Error (503): {"detail": "maintenance"}'


@pytest.mark.asyncio
async def test_list_tasks_passes_filters_as_query(state: AppState, fake_api: FakeTaskApi) -> None:
    resp = await _invoke(state, "listTasks", status="started", priority="high")

    assert fake_api.calls[-1].query == {"status": "started", "priority": "high"}
    assert _texts(resp) == ["Found 2 tasks with status 'started' and priority 'high'."]
    assert resp["content"][1]["type"] == "json"


@pytest.mark.asyncio
async def test_list_tasks_rejects_unknown_enum_value(state: AppState, fake_api: FakeTaskApi) -> None:
    resp = await _invoke(state, "listTasks", status="finished")

    assert resp["type"] == "invoke_response"
    assert "Invalid value for 'status'" in _texts(resp)[0]
    assert fake_api.calls == []


@pytest.mark.asyncio
async def test_create_task_missing_fields_is_a_successful_response(
    state: AppState, fake_api: FakeTaskApi
) -> None:
    resp = await _invoke(state, "createTask", task="Write docs")

    assert "error" not in resp
    assert _texts(resp) == ["Error creating task: Missing required parameter(s): category"]
    assert fake_api.calls == []


@pytest.mark.asyncio
async def test_create_task_posts_body(state: AppState, fake_api: FakeTaskApi) -> None:
    fake_api.responses[("POST", "/tasks")] = {
        "id": 77,
        "task": "Write docs",
        "category": "Documentation",
        "priority": "high",
        "status": "not_started",
        "create_time": "2024-06-01T00:00:00Z",
    }

    resp = await _invoke(state, "createTask", task="Write docs", category="Documentation", priority="high")

    call = fake_api.calls[-1]
    assert (call.method, call.path) == ("POST", "/tasks")
    assert call.body == {"task": "Write docs", "category": "Documentation", "priority": "high"}
    assert _texts(resp) == ["Task created successfully with ID: 77"]
    assert resp["content"][1]["json"]["id"] == 77


@pytest.mark.asyncio
async def test_update_task_without_changes(state: AppState, fake_api: FakeTaskApi) -> None:
    resp = await _invoke(state, "updateTask", taskId=5)

    assert _texts(resp) == ["No updates provided. Task remains unchanged."]
    assert fake_api.calls == []


@pytest.mark.asyncio
async def test_update_task_patches_selected_fields(state: AppState, fake_api: FakeTaskApi) -> None:
    fake_api.responses[("PATCH", "/tasks/5")] = {"id": 5, "task": "x", "status": "done"}

    resp = await _invoke(state, "updateTask", taskId=5, status="done")

    call = fake_api.calls[-1]
    assert (call.method, call.path, call.body) == ("PATCH", "/tasks/5", {"status": "done"})
    assert _texts(resp) == ["Task 5 updated successfully."]


@pytest.mark.asyncio
@pytest.mark.parametrize("task_id", [0, -3, "abc", True, 1.5, "²"])
async def test_update_task_rejects_bad_ids(state: AppState, fake_api: FakeTaskApi, task_id) -> None:
    resp = await _invoke(state, "updateTask", taskId=task_id, status="done")

    assert _texts(resp) == ["Error updating task: Task ID must be a positive integer"]
    assert fake_api.calls == []


@pytest.mark.asyncio
async def test_delete_task_uses_api_message(state: AppState, fake_api: FakeTaskApi) -> None:
    fake_api.responses[("DELETE", "/tasks/12")] = {"message": "Task 12 removed"}

    resp = await _invoke(state, "deleteTask", taskId=12)
    assert _texts(resp) == ["Task 12 removed"]


@pytest.mark.asyncio
async def test_delete_task_api_error_is_text(state: AppState, fake_api: FakeTaskApi) -> None:
    fake_api.errors[("DELETE", "/tasks/12")] = TaskApiError(404, {"error": "Task not found"})

    resp = await _invoke(state, "deleteTask", taskId=12)
    assert _texts(resp) == ['Error deleting task: API Error (404): {"error": "Task not found"}']


@pytest.mark.asyncio
async def test_prompts_render_user_messages(state: AppState) -> None:
    resp = await state.dispatcher.dispatch(
        {"id": "p", "type": "prompt", "prompt": "createNewTask", "parameters": {"task": "Ship it", "category": "Release", "priority": "high"}}
    )

    assert resp["type"] == "prompt_response"
    (message,) = resp["messages"]
    assert message["role"] == "user"
    text = message["content"][0]["text"]
    assert "Task: Ship it" in text
    assert "Priority: high" in text


@pytest.mark.asyncio
async def test_natural_language_prompt_requires_long_description(state: AppState) -> None:
    resp = await state.dispatcher.dispatch(
        {"id": "p", "type": "prompt", "prompt": "createTaskNaturalLanguage", "parameters": {"description": "short"}}
    )
    text = resp["messages"][0]["content"][0]["text"]
    assert text.startswith("Cannot build prompt")


@pytest.mark.asyncio
async def test_progress_report_scope(state: AppState) -> None:
    resp = await state.dispatcher.dispatch({"id": "p", "type": "prompt", "prompt": "taskProgressReport"})
    text = resp["messages"][0]["content"][0]["text"]
    assert text.startswith("Please provide a progress report on all tasks.")


@pytest.mark.asyncio
async def test_discover_lists_task_capabilities(state: AppState) -> None:
    resp = await state.dispatcher.dispatch({"id": "d", "type": "discover"})

    assert resp["name"] == "Test Server"
    assert [r["uriTemplate"] for r in resp["resources"]] == ["tasks://list", "tasks://task/{taskId}"]
    assert [p["name"] for p in resp["prompts"]] == [
        "listAllTasks",
        "createTaskNaturalLanguage",
        "createNewTask",
        "taskProgressReport",
    ]
    create = next(t for t in resp["tools"] if t["name"] == "createTask")
    assert [p["name"] for p in create["parameters"] if p["required"]] == ["task", "category"]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_id", ["²", "0", "abc"])
async def test_single_task_resource_unusable_id_is_not_found(state: AppState, raw_id: str) -> None:
    uri = f"tasks://task/{raw_id}"
    resp = await state.dispatcher.dispatch({"id": "r", "type": "resource", "uri": uri})

    assert "error" not in resp
    (item,) = resp["contents"]
    assert item["text"] == f"Task with ID {raw_id} not found"


@pytest.mark.asyncio
async def test_delete_task_rejects_superscript_id(state: AppState, fake_api: FakeTaskApi) -> None:
    resp = await _invoke(state, "deleteTask", taskId="²")

    assert _texts(resp) == ["Error deleting task: Task ID must be a positive integer"]
    assert fake_api.calls == []


@pytest.mark.asyncio
async def test_tasks_list_resource_skips_rows_without_usable_id(
    state: AppState, fake_api: FakeTaskApi
) -> None:
    fake_api.responses[("GET", "/tasks")] = {
        "tasks": [{"id": None, "task": "orphan"}, {"id": "n/a"}, SAMPLE_TASKS[1]]
    }

    resp = await state.dispatcher.dispatch({"id": 1, "type": "resource", "uri": "tasks://list"})

    assert resp["type"] == "resource_response"
    assert [c["uri"] for c in resp["contents"]] == ["tasks://task/42"]
