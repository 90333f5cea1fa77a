# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep the API key in .env (gitignored).
"""

ENV_VARS = {
    # App / logging
    "TASKWIRE_APP_NAME": "App name used in log lines (default: taskwire).",
    "TASKWIRE_LOG_LEVEL": "Console logging level on stderr (default: INFO).",
    "TASKWIRE_LOG_TO_FILE": "Also write DEBUG logs to <data_dir>/taskwire.log (true/false).",
    "TASKWIRE_DATA_DIR": "Local data directory (default: .local/taskwire).",
    # Task store
    "TASKWIRE_API_BASE_URL": (
        "Task store base URL (default: https://task-master-pro-mikaelwestoo.replit.app/api). "
        "Legacy name API_BASE_URL is also read."
    ),
    "TASKWIRE_API_KEY": "Task store API key, sent as X-API-Key. Legacy name API_KEY is also read.",
    "TASKWIRE_HTTP_TIMEOUT_SECONDS": "Per-call HTTP timeout for the task store (default: 30, minimum 1).",
    # Dispatcher
    "TASKWIRE_REQUEST_TIMEOUT_SECONDS": "Deadline for a single request handler; 0 disables it (default: 0).",
    # Server identity (returned by discover)
    "TASKWIRE_SERVER_NAME": "Server name (default: Task Management API Server).",
    "TASKWIRE_SERVER_VERSION": "Server version (default: 1.0.0).",
    "TASKWIRE_SERVER_DESCRIPTION": "Server description.",
    "TASKWIRE_SERVER_PUBLISHER": "Server publisher (default: TaskMaster API).",
}
