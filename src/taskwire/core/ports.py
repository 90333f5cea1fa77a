# src/taskwire/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The dispatcher and the capability factories depend on these Protocols instead
of concrete implementations, so the task store client can be swapped for a
fake in tests.
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

JsonObject = dict[str, Any]
Params = Mapping[str, Any]

# Handler shapes, one per capability kind.
ResourceHandler = Callable[[str, dict[str, str]], Awaitable[Any]]
ToolHandler = Callable[[Params], Awaitable[Any]]
PromptHandler = Callable[[Params], Awaitable[Any]]


class TaskApi(Protocol):
    """Authenticated request function for the remote task store."""

    async def call(
            self,
            method: str,
            path: str,
            body: JsonObject | None = None,
            query: Mapping[str, Any] | None = None,
    ) -> Any: ...


class LineWriter(Protocol):
    """Output side of the line transport (one call = one complete line)."""

    async def write_line(self, line: str) -> None: ...
