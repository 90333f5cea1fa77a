# src/taskwire/tasks/capabilities.py

"""
Task capabilities: resources, tools and prompts over the remote task store.

Handlers translate domain failures (API errors, missing fields, unknown ids)
into normal payloads with text content, so the agent sees a readable message
instead of a protocol error. Only programming errors escape to the dispatcher.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..core import schema as s
from ..core.ports import Params, TaskApi
from ..core.registry import CapabilityRegistry
from .task_api import TaskApiError
from .task_models import PRIORITY_VALUES, STATUS_VALUES, Task, parse_task_id

logger = logging.getLogger(__name__)


# ---- small payload helpers ----


def _text(text: str) -> dict[str, Any]:
    return {"type": "text", "text": text}


def _json(value: Any) -> dict[str, Any]:
    return {"type": "json", "json": value}


def _user_message(text: str) -> dict[str, Any]:
    return {"messages": [{"role": "user", "content": [_text(text)]}]}


def _extract_tasks(payload: Any) -> list[dict[str, Any]]:
    """The store answers GET /tasks with {"tasks": [...]}; tolerate a bare list."""
    if isinstance(payload, dict):
        raw = payload.get("tasks") or []
    elif isinstance(payload, list):
        raw = payload
    else:
        raw = []
    return [t for t in raw if isinstance(t, dict)]


def _validation_error(schema: s.Schema, params: Params) -> str | None:
    missing = s.missing_required(schema, params)
    if missing:
        return "Missing required parameter(s): " + ", ".join(missing)
    bad = s.invalid_enum_values(schema, params)
    if bad:
        name, value = next(iter(bad.items()))
        allowed = ", ".join(schema[name].enum_values)
        return f"Invalid value for '{name}': {value!r} (expected one of: {allowed})"
    return None


# ---- schemas ----

LIST_TASKS_SCHEMA: dict[str, s.ParamSpec] = {
    "status": s.enum(STATUS_VALUES, "Filter tasks by status (optional)"),
    "priority": s.enum(PRIORITY_VALUES, "Filter tasks by priority level (optional)"),
}

CREATE_TASK_SCHEMA: dict[str, s.ParamSpec] = {
    "task": s.string("The task description or title", required=True),
    "category": s.string("Task category (e.g., 'Development', 'Documentation')", required=True),
    "priority": s.enum(
        PRIORITY_VALUES, "Task priority level (defaults to 'medium' if not specified)"
    ),
    "status": s.enum(
        STATUS_VALUES, "Initial task status (defaults to 'not_started' if not specified)"
    ),
}

UPDATE_TASK_SCHEMA: dict[str, s.ParamSpec] = {
    "taskId": s.number("The unique ID of the task to update", required=True),
    "task": s.string("New task description/title (if you want to change it)"),
    "category": s.string("New task category (if you want to change it)"),
    "priority": s.enum(PRIORITY_VALUES, "New task priority (if you want to change it)"),
    "status": s.enum(STATUS_VALUES, "New task status (if you want to change it)"),
}

DELETE_TASK_SCHEMA: dict[str, s.ParamSpec] = {
    "taskId": s.number("The unique ID of the task to delete", required=True),
}

TASK_RESOURCE_SCHEMA: dict[str, s.ParamSpec] = {
    "taskId": s.string("The unique ID of the task", required=True),
}


def register_task_capabilities(registry: CapabilityRegistry, api: TaskApi) -> None:
    """Register every task resource, tool and prompt against `api`."""
    _register_resources(registry, api)
    _register_tools(registry, api)
    _register_prompts(registry)


# ---- resources ----


def _register_resources(registry: CapabilityRegistry, api: TaskApi) -> None:
    @registry.resource(
        "tasks",
        "tasks://list",
        description="Retrieves a list of all tasks in the system with their details",
    )
    async def tasks_list(uri: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            payload = await api.call("GET", "/tasks")
        except TaskApiError as e:
            logger.warning("Error fetching tasks: %s", e)
            return {
                "contents": [
                    {
                        "uri": "tasks://error",
                        "text": f"Error retrieving tasks: {e}",
                        "metadata": {"error": str(e)},
                    }
                ]
            }

        contents = []
        for raw in _extract_tasks(payload):
            if parse_task_id(raw.get("id")) is None:
                logger.warning("Skipping task row without a usable id: %r", raw.get("id"))
                continue
            task = Task.from_api(raw)
            contents.append(
                {
                    "uri": f"tasks://task/{task.id}",
                    "text": task.render_text(),
                    "metadata": task.to_dict(),
                }
            )
        return {"contents": contents}

    @registry.resource(
        "task",
        "tasks://task/{taskId}",
        description="Retrieves details of a specific task by its ID",
        schema=TASK_RESOURCE_SCHEMA,
    )
    async def task_detail(uri: str, params: dict[str, str]) -> dict[str, Any]:
        raw_id = params.get("taskId", "")
        task_id = parse_task_id(raw_id)

        try:
            payload = await api.call("GET", "/tasks")
        except TaskApiError as e:
            return {
                "contents": [
                    {
                        "uri": uri,
                        "text": f"Error retrieving task {raw_id}: {e}",
                        "metadata": {"error": str(e)},
                    }
                ]
            }

        # The store has no single-task endpoint; filter the full listing.
        found = None
        if task_id is not None:
            for raw in _extract_tasks(payload):
                if parse_task_id(raw.get("id")) == task_id:
                    found = raw
                    break

        if found is None:
            return {
                "contents": [
                    {
                        "uri": uri,
                        "text": f"Task with ID {raw_id} not found",
                        "metadata": {"error": "Task not found"},
                    }
                ]
            }

        return {
            "contents": [
                {
                    "uri": uri,
                    "text": Task.from_api(found).render_text(),
                    "metadata": found,
                }
            ]
        }


# ---- tools ----


def _register_tools(registry: CapabilityRegistry, api: TaskApi) -> None:
    @registry.tool(
        "listTasks",
        description="Lists all tasks in the system, optionally filtered by status and/or priority",
        schema=LIST_TASKS_SCHEMA,
        usage=[
            {"description": "List all tasks", "params": {}},
            {"description": "List all high priority tasks", "params": {"priority": "high"}},
            {"description": "List all completed tasks", "params": {"status": "done"}},
        ],
    )
    async def list_tasks(params: Params) -> dict[str, Any]:
        err = _validation_error(LIST_TASKS_SCHEMA, params)
        if err:
            return {"content": [_text(err)]}

        status = params.get("status")
        priority = params.get("priority")
        try:
            payload = await api.call("GET", "/tasks", query={"status": status, "priority": priority})
        except TaskApiError as e:
            return {"content": [_text(f"Error listing tasks: {e}")]}

        tasks = _extract_tasks(payload)
        summary = f"Found {len(tasks)} tasks"
        if status:
            summary += f" with status '{status}'"
        if priority:
            summary += f" and priority '{priority}'" if status else f" with priority '{priority}'"
        return {"content": [_text(summary + "."), _json(tasks)]}

    @registry.tool(
        "createTask",
        description="Creates a new task with the specified details",
        schema=CREATE_TASK_SCHEMA,
        usage=[
            {
                "description": "Create a basic task",
                "params": {"task": "Implement login page", "category": "Development"},
            },
            {
                "description": "Create a high priority task",
                "params": {
                    "task": "Fix critical security bug",
                    "category": "Security",
                    "priority": "high",
                },
            },
        ],
    )
    async def create_task(params: Params) -> dict[str, Any]:
        err = _validation_error(CREATE_TASK_SCHEMA, params)
        if err:
            return {"content": [_text(f"Error creating task: {err}")]}

        body: dict[str, Any] = {"task": params["task"], "category": params["category"]}
        for key in ("priority", "status"):
            if params.get(key):
                body[key] = params[key]

        try:
            created = await api.call("POST", "/tasks", body=body)
        except TaskApiError as e:
            return {"content": [_text(f"Error creating task: {e}")]}

        created = created if isinstance(created, dict) else {}
        logger.info("Created task id=%s", created.get("id"))
        return {
            "content": [
                _text(f"Task created successfully with ID: {created.get('id')}"),
                _json(
                    {
                        "id": created.get("id"),
                        "task": created.get("task") or body["task"],
                        "category": created.get("category") or body["category"],
                        "priority": created.get("priority") or body.get("priority") or "medium",
                        "status": created.get("status") or body.get("status") or "not_started",
                        "create_time": created.get("create_time")
                        or datetime.now(timezone.utc).isoformat(),
                    }
                ),
            ]
        }

    @registry.tool(
        "updateTask",
        description="Updates an existing task with new values for one or more fields",
        schema=UPDATE_TASK_SCHEMA,
        usage=[
            {"description": "Mark a task as completed", "params": {"taskId": 5, "status": "done"}},
            {"description": "Change task priority", "params": {"taskId": 3, "priority": "high"}},
            {"description": "Rename a task", "params": {"taskId": 7, "task": "Implement OAuth login"}},
        ],
    )
    async def update_task(params: Params) -> dict[str, Any]:
        err = _validation_error(UPDATE_TASK_SCHEMA, params)
        if err:
            return {"content": [_text(f"Error updating task: {err}")]}

        task_id = parse_task_id(params.get("taskId"))
        if task_id is None:
            return {"content": [_text("Error updating task: Task ID must be a positive integer")]}

        body = {
            key: params[key]
            for key in ("task", "category", "priority", "status")
            if params.get(key)
        }
        if not body:
            return {"content": [_text("No updates provided. Task remains unchanged.")]}

        try:
            updated = await api.call("PATCH", f"/tasks/{task_id}", body=body)
        except TaskApiError as e:
            return {"content": [_text(f"Error updating task: {e}")]}

        updated = updated if isinstance(updated, dict) else {}
        return {
            "content": [
                _text(f"Task {task_id} updated successfully."),
                _json(
                    {
                        "id": updated.get("id", task_id),
                        "task": updated.get("task"),
                        "category": updated.get("category"),
                        "priority": updated.get("priority"),
                        "status": updated.get("status"),
                        "create_time": updated.get("create_time"),
                    }
                ),
            ]
        }

    @registry.tool(
        "deleteTask",
        description="Permanently deletes a task from the system",
        schema=DELETE_TASK_SCHEMA,
        usage=[{"description": "Delete a specific task", "params": {"taskId": 12}}],
    )
    async def delete_task(params: Params) -> dict[str, Any]:
        err = _validation_error(DELETE_TASK_SCHEMA, params)
        if err:
            return {"content": [_text(f"Error deleting task: {err}")]}

        task_id = parse_task_id(params.get("taskId"))
        if task_id is None:
            return {"content": [_text("Error deleting task: Task ID must be a positive integer")]}

        try:
            resp = await api.call("DELETE", f"/tasks/{task_id}")
        except TaskApiError as e:
            return {"content": [_text(f"Error deleting task: {e}")]}

        message = resp.get("message") if isinstance(resp, dict) else None
        logger.info("Deleted task id=%s", task_id)
        return {"content": [_text(message or f"Task {task_id} deleted successfully.")]}


# ---- prompts ----

NL_TASK_SCHEMA: dict[str, s.ParamSpec] = {
    "description": s.string(
        "A natural language description of the task to create", required=True
    ),
}

NEW_TASK_SCHEMA: dict[str, s.ParamSpec] = {
    "task": s.string("The task description or title", required=True),
    "category": s.string("Task category", required=True),
    "priority": s.enum(PRIORITY_VALUES, "Task priority level"),
}

PROGRESS_SCHEMA: dict[str, s.ParamSpec] = {
    "status": s.enum(STATUS_VALUES, "Filter by task status"),
}

# Shortest description createTaskNaturalLanguage accepts.
MIN_NL_DESCRIPTION = 10


def _register_prompts(registry: CapabilityRegistry) -> None:
    @registry.prompt(
        "listAllTasks",
        description="Lists all tasks grouped by category with priority summary",
        usage="Use this prompt when you want to see all tasks organized by category "
        "with priority distribution",
    )
    async def list_all_tasks(params: Params) -> dict[str, Any]:
        return _user_message(
            "Please list all tasks in my task management system. Group them by category "
            "and summarize the priorities for each category."
        )

    @registry.prompt(
        "createTaskNaturalLanguage",
        description="Creates a task from a natural language description by extracting key details",
        schema=NL_TASK_SCHEMA,
        usage="Use this when you have a detailed task description and want the AI to "
        "determine the best category and priority",
    )
    async def create_task_nl(params: Params) -> dict[str, Any]:
        err = _validation_error(NL_TASK_SCHEMA, params)
        if err:
            return _user_message(f"Cannot build prompt: {err}")
        description = str(params["description"])
        if len(description) < MIN_NL_DESCRIPTION:
            return _user_message(
                f"Cannot build prompt: task description must be at least "
                f"{MIN_NL_DESCRIPTION} characters"
            )
        return _user_message(
            "Please analyze this task description and create an appropriate task:\n\n"
            f'"{description}"\n\n'
            "Extract the most suitable category, determine an appropriate priority level, "
            "and create the task with the right parameters."
        )

    @registry.prompt(
        "createNewTask",
        description="Creates a new task with specific title, category and optional priority",
        schema=NEW_TASK_SCHEMA,
        usage="Use this when you have specific task details to create",
    )
    async def create_new_task(params: Params) -> dict[str, Any]:
        err = _validation_error(NEW_TASK_SCHEMA, params)
        if err:
            return _user_message(f"Cannot build prompt: {err}")
        priority = params.get("priority")
        return _user_message(
            "Please create a new task in my task management system with the following details:\n\n"
            f"Task: {params['task']}\n"
            f"Category: {params['category']}\n"
            f"{f'Priority: {priority}' if priority else ''}\n\n"
            "Please confirm once the task is created and provide the task ID for reference."
        )

    @registry.prompt(
        "taskProgressReport",
        description="Generates a progress report on tasks with key statistics and insights",
        schema=PROGRESS_SCHEMA,
        usage="Use this when you need an overview of task progress and areas needing attention",
    )
    async def task_progress_report(params: Params) -> dict[str, Any]:
        status = params.get("status")
        scope = f"all {status} tasks" if status else "all tasks"
        return _user_message(
            f"Please provide a progress report on {scope}.\n\n"
            "Include:\n"
            "1. How many tasks are in each status category\n"
            "2. Which high priority tasks need attention\n"
            "3. Any categories with a high concentration of incomplete tasks"
        )
