# src/taskwire/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- builds the capability registry and registers the task capabilities,
- wires the task store client and the dispatcher into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.dispatcher import Dispatcher
from ..core.ports import TaskApi
from ..core.registry import CapabilityRegistry
from ..core.state import AppState
from ..tasks.capabilities import register_task_capabilities
from ..tasks.task_api import TaskApiClient

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None, task_api: TaskApi | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Settings and the task API are injectable so tests can run without env
    reads or network access. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if task_api is None:
        task_api = TaskApiClient.from_settings(settings)
        if not getattr(settings, "api_key", None):
            # Not fatal: discovery and prompts still work, tools report the problem.
            logger.warning("No task store API key configured; task requests will fail.")

    registry = CapabilityRegistry()
    register_task_capabilities(registry, task_api)

    server_info_fn = getattr(settings, "server_info", None)
    server_info = server_info_fn() if callable(server_info_fn) else {}

    dispatcher = Dispatcher(
        registry,
        server_info=server_info,
        request_timeout=float(getattr(settings, "request_timeout_seconds", 0.0) or 0.0),
    )

    return AppState(
        settings=settings,
        registry=registry,
        dispatcher=dispatcher,
        task_api=task_api,
    )
