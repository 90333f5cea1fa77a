# src/taskwire/connectors/stdio_connector.py

from __future__ import annotations

import asyncio
import json
import logging
import sys
import time
from typing import Any, TextIO

from ..core.dispatcher import Dispatcher, error_response
from ..core.ports import LineWriter
from ..core.state import AppState

logger = logging.getLogger(__name__)

# Longest accepted request line (bytes).
MAX_LINE_BYTES = 16 * 1024 * 1024


def synthetic_id() -> str:
    """Correlation id for lines that could not be decoded at all."""
    return f"error_{int(time.time() * 1000)}"


class TextStreamWriter:
    """LineWriter over a text stream (sys.stdout in production)."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    async def write_line(self, line: str) -> None:
        self._stream.write(line + "\n")
        self._stream.flush()


class StdioConnector:
    """
    Line transport: one JSON request per input line, one JSON response per output line.

    Each decoded line is dispatched in its own asyncio task, and the reader goes
    straight back to the next line. Responses are written in completion order;
    callers correlate by "id". Writes are serialized so lines never interleave.
    """

    def __init__(self, dispatcher: Dispatcher, writer: LineWriter) -> None:
        self._dispatcher = dispatcher
        self._writer = writer
        self._write_lock = asyncio.Lock()
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    async def handle_line(self, raw: str | bytes) -> None:
        """Decode one line and start its dispatch. Returns without awaiting the handler."""
        line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        line = line.strip()
        if not line:
            return

        try:
            request = json.loads(line)
        except (ValueError, RecursionError) as e:
            # Parse details go to the log only. Deeply nested input raises RecursionError.
            logger.warning("Undecodable request line (%d chars): %s", len(line), e)
            await self._send(error_response(synthetic_id(), "Failed to process request: invalid JSON"))
            return

        task = asyncio.create_task(self._dispatch_and_send(request))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _dispatch_and_send(self, request: Any) -> None:
        try:
            response = await self._dispatcher.dispatch(request)
            await self._send(response)
        except Exception:
            logger.exception("Failed to deliver response")

    async def _send(self, response: dict[str, Any]) -> None:
        try:
            line = json.dumps(response, ensure_ascii=False)
        except (TypeError, ValueError, RecursionError) as e:
            logger.error("Response for id=%r is not JSON-serializable: %s", response.get("id"), e)
            line = json.dumps(
                error_response(response.get("id"), f"Failed to encode response: {e}"),
                ensure_ascii=False,
            )

        async with self._write_lock:
            await self._writer.write_line(line)

    async def drain(self) -> None:
        """Wait for every in-flight request to finish writing its response."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def serve(self, reader: asyncio.StreamReader) -> None:
        """Read until EOF, then wait for outstanding responses."""
        while True:
            raw = await _read_line(reader)
            if raw is None:
                logger.warning("Request line rejected: longer than the reader limit")
                await self._send(error_response(synthetic_id(), "Failed to process request: line too long"))
                continue

            if not raw:
                logger.info("Input closed (EOF).")
                break

            await self.handle_line(raw)

        await self.drain()


async def _read_line(reader: asyncio.StreamReader) -> bytes | None:
    """
    Next input line (newline included).

    Returns b"" at EOF, or None when the line exceeded the reader limit. In that
    case the whole line has been consumed, up to and including its newline.
    """
    try:
        return await reader.readuntil(b"\n")
    except asyncio.IncompleteReadError as e:
        # EOF: the last line may lack its newline.
        return e.partial
    except asyncio.LimitOverrunError as e:
        consumed = e.consumed

    # readuntil() leaves the buffer untouched on overrun; drop it chunk by chunk.
    while True:
        await reader.readexactly(consumed)
        try:
            await reader.readuntil(b"\n")
            return None
        except asyncio.IncompleteReadError:
            return None
        except asyncio.LimitOverrunError as e:
            consumed = e.consumed


async def _open_stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader


async def run_stdio(state: AppState) -> None:
    logger.info(
        "Stdio connector started (%d capabilities registered).",
        len(state.registry),
    )
    reader = await _open_stdin_reader()
    connector = StdioConnector(state.dispatcher, TextStreamWriter(sys.stdout))
    await connector.serve(reader)
    logger.info("Stdio connector finished.")
