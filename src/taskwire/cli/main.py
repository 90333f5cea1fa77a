# src/taskwire/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then serves the line protocol on
stdin/stdout until EOF or a termination signal.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.stdio_connector import run_stdio
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    aclose = getattr(state.task_api, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception:
        logger.debug("Task API client close failed.", exc_info=True)


async def _serve(state: AppState) -> None:
    loop = asyncio.get_running_loop()
    serve_task = asyncio.create_task(run_stdio(state))

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        serve_task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not supported on every platform (e.g. Windows event loops).
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, _handle_signal, sig)

    try:
        await serve_task
    except asyncio.CancelledError:
        pass
    finally:
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = settings.data_dir if settings.log_to_file else None
    setup_logging(log_dir=log_dir, console_level=console_level)

    # keep noisy libs readable
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(_serve(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")

    logger.info("Bye.")


if __name__ == "__main__":
    main()
