# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskwire import config
from taskwire.config import DEFAULT_API_BASE_URL, Settings

_VARS = (
    "TASKWIRE_API_BASE_URL",
    "API_BASE_URL",
    "TASKWIRE_API_KEY",
    "API_KEY",
    "TASKWIRE_HTTP_TIMEOUT_SECONDS",
    "TASKWIRE_REQUEST_TIMEOUT_SECONDS",
    "TASKWIRE_LOG_TO_FILE",
    "TASKWIRE_DATA_DIR",
    "TASKWIRE_SERVER_NAME",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep a developer's local .env out of these tests.
    monkeypatch.setattr(config, "load_dotenv", lambda **kwargs: False)
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings.from_env()

    assert s.api_base_url == DEFAULT_API_BASE_URL
    assert s.api_key is None
    assert s.http_timeout_seconds == 30.0
    assert s.request_timeout_seconds == 0.0
    assert s.log_to_file is False
    assert s.data_dir == Path(".local/taskwire")
    assert s.server_info()["name"] == "Task Management API Server"


def test_prefixed_names_win_over_legacy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_KEY", "legacy")
    monkeypatch.setenv("TASKWIRE_API_KEY", "  prefixed  ")
    monkeypatch.setenv("API_BASE_URL", "https://legacy.invalid/api")
    monkeypatch.setenv("TASKWIRE_API_BASE_URL", "https://tasks.invalid/api/")

    s = Settings.from_env()
    assert s.api_key == "prefixed"
    assert s.api_base_url == "https://tasks.invalid/api"


def test_legacy_names_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_KEY", "legacy")
    monkeypatch.setenv("API_BASE_URL", "https://legacy.invalid/api")

    s = Settings.from_env()
    assert s.api_key == "legacy"
    assert s.api_base_url == "https://legacy.invalid/api"


def test_numeric_values_are_clamped_or_defaulted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKWIRE_HTTP_TIMEOUT_SECONDS", "0.2")
    monkeypatch.setenv("TASKWIRE_REQUEST_TIMEOUT_SECONDS", "not-a-number")

    s = Settings.from_env()
    assert s.http_timeout_seconds == 1.0
    assert s.request_timeout_seconds == 0.0


def test_switches_and_identity(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKWIRE_LOG_TO_FILE", "yes")
    monkeypatch.setenv("TASKWIRE_SERVER_NAME", "Staging Tasks")

    s = Settings.from_env()
    assert s.log_to_file is True
    assert s.server_info()["name"] == "Staging Tasks"
