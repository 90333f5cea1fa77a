# src/taskwire/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time: the API key is checked on first request.
- Legacy unprefixed names (API_BASE_URL / API_KEY) are still accepted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKWIRE"

DEFAULT_API_BASE_URL = "https://task-master-pro-mikaelwestoo.replit.app/api"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_to_file: bool
    data_dir: Path

    # ---- Task store API ----
    api_base_url: str
    api_key: str | None
    http_timeout_seconds: float

    # ---- Dispatcher ----
    # 0 disables the per-request deadline.
    request_timeout_seconds: float

    # ---- Server identity (reported by discover) ----
    server_name: str
    server_version: str
    server_description: str
    server_publisher: str

    @staticmethod
    def from_env() -> "Settings":
        load_dotenv(override=False)

        app_name = _env(_k("APP_NAME"), "taskwire")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_to_file = _env_bool(_k("LOG_TO_FILE"), False)
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskwire"))

        api_base_url = (
            _first_env(_k("API_BASE_URL"), "API_BASE_URL", default=DEFAULT_API_BASE_URL)
            or DEFAULT_API_BASE_URL
        ).strip().rstrip("/")
        api_key = _first_env(_k("API_KEY"), "API_KEY", default=None)
        http_timeout_seconds = max(1.0, _env_float(_k("HTTP_TIMEOUT_SECONDS"), 30.0))

        request_timeout_seconds = max(0.0, _env_float(_k("REQUEST_TIMEOUT_SECONDS"), 0.0))

        server_name = _env(_k("SERVER_NAME"), "Task Management API Server")
        server_version = _env(_k("SERVER_VERSION"), "1.0.0")
        server_description = _env(
            _k("SERVER_DESCRIPTION"),
            "Task Management API that provides CRUD operations for tasks "
            "with categories, priorities, and statuses",
        )
        server_publisher = _env(_k("SERVER_PUBLISHER"), "TaskMaster API")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_to_file=log_to_file,
            data_dir=data_dir,
            api_base_url=api_base_url,
            api_key=api_key.strip() if api_key else None,
            http_timeout_seconds=http_timeout_seconds,
            request_timeout_seconds=request_timeout_seconds,
            server_name=server_name,
            server_version=server_version,
            server_description=server_description,
            server_publisher=server_publisher,
        )

    def server_info(self) -> dict[str, str]:
        return {
            "name": self.server_name,
            "version": self.server_version,
            "description": self.server_description,
            "publisher": self.server_publisher,
        }


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
