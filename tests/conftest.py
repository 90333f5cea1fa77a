# tests/conftest.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from taskwire.cli.bootstrap import create_initial_state
from taskwire.core.state import AppState

from .fakes import FakeTaskApi


@pytest.fixture()
def settings() -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="taskwire-test",
        api_base_url="https://tasks.invalid/api",
        api_key="test-key",
        http_timeout_seconds=5.0,
        request_timeout_seconds=0.0,
        server_info=lambda: {"name": "Test Server", "version": "0.0.1"},
    )


@pytest.fixture()
def fake_api() -> FakeTaskApi:
    return FakeTaskApi()


@pytest.fixture()
def state(settings: SimpleNamespace, fake_api: FakeTaskApi) -> AppState:
    """AppState wired with the real registry/dispatcher and a fake task store."""
    return create_initial_state(settings=settings, task_api=fake_api)
