# src/taskwire/core/registry.py

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeVar

from .ports import PromptHandler, ResourceHandler, ToolHandler
from .schema import ParamSpec
from .uri_template import UriTemplate

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class CapabilityKind(StrEnum):
    RESOURCE = "resource"
    TOOL = "tool"
    PROMPT = "prompt"


@dataclass(frozen=True, slots=True)
class ResourceEntry:
    name: str
    uri_template: UriTemplate
    handler: ResourceHandler
    description: str = ""
    schema: Mapping[str, ParamSpec] = field(default_factory=dict)

    kind = CapabilityKind.RESOURCE


@dataclass(frozen=True, slots=True)
class ToolEntry:
    name: str
    handler: ToolHandler
    description: str = ""
    schema: Mapping[str, ParamSpec] = field(default_factory=dict)
    usage: Any = None

    kind = CapabilityKind.TOOL


@dataclass(frozen=True, slots=True)
class PromptEntry:
    name: str
    handler: PromptHandler
    description: str = ""
    schema: Mapping[str, ParamSpec] = field(default_factory=dict)
    usage: Any = None

    kind = CapabilityKind.PROMPT


CapabilityEntry = ResourceEntry | ToolEntry | PromptEntry


class CapabilityRegistry:
    """
    Three independent name -> entry maps (resources, tools, prompts).

    Registration happens once at startup, before the transport starts reading.
    A later registration under an existing name replaces the entry
    (last write wins). Nothing here is locked: configure before serving.
    """

    def __init__(self) -> None:
        self._entries: dict[CapabilityKind, dict[str, CapabilityEntry]] = {
            kind: {} for kind in CapabilityKind
        }

    def register(self, entry: CapabilityEntry) -> CapabilityEntry:
        bucket = self._entries[entry.kind]
        if entry.name in bucket:
            logger.warning("Replacing %s registration: %s", entry.kind.value, entry.name)
        bucket[entry.name] = entry
        return entry

    def lookup(self, kind: CapabilityKind, name: str) -> CapabilityEntry | None:
        return self._entries[kind].get(name)

    def all(self, kind: CapabilityKind) -> tuple[CapabilityEntry, ...]:
        """Snapshot in registration order."""
        return tuple(self._entries[kind].values())

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._entries.values())

    # ---- convenience registrars (decorators) ----

    def resource(
        self,
        name: str,
        uri_template: str,
        *,
        description: str = "",
        schema: Mapping[str, ParamSpec] | None = None,
    ) -> Callable[[F], F]:
        template = UriTemplate.parse(uri_template)

        def decorator(fn: F) -> F:
            self.register(
                ResourceEntry(
                    name=name,
                    uri_template=template,
                    handler=fn,
                    description=description,
                    schema=dict(schema or {}),
                )
            )
            return fn

        return decorator

    def tool(
        self,
        name: str,
        *,
        description: str = "",
        schema: Mapping[str, ParamSpec] | None = None,
        usage: Any = None,
    ) -> Callable[[F], F]:
        def decorator(fn: F) -> F:
            self.register(
                ToolEntry(
                    name=name,
                    handler=fn,
                    description=description,
                    schema=dict(schema or {}),
                    usage=usage,
                )
            )
            return fn

        return decorator

    def prompt(
        self,
        name: str,
        *,
        description: str = "",
        schema: Mapping[str, ParamSpec] | None = None,
        usage: Any = None,
    ) -> Callable[[F], F]:
        def decorator(fn: F) -> F:
            self.register(
                PromptEntry(
                    name=name,
                    handler=fn,
                    description=description,
                    schema=dict(schema or {}),
                    usage=usage,
                )
            )
            return fn

        return decorator
