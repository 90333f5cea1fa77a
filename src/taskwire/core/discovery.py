# src/taskwire/core/discovery.py

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from .registry import CapabilityKind, CapabilityRegistry, PromptEntry, ResourceEntry, ToolEntry
from .schema import ParamKind, ParamSpec


def describe_parameters(schema: Mapping[str, ParamSpec]) -> list[dict[str, Any]]:
    """Flatten a declared schema into the manifest's parameter list."""
    out: list[dict[str, Any]] = []
    for name, spec in schema.items():
        item: dict[str, Any] = {
            "name": name,
            "description": spec.description,
            "type": spec.kind.value,
            "required": spec.required,
        }
        if spec.kind == ParamKind.ENUM:
            item["values"] = list(spec.enum_values)
        out.append(item)
    return out


def _describe_callable(entry: ToolEntry | PromptEntry, label: str) -> dict[str, Any]:
    return {
        "name": entry.name,
        "description": entry.description or f"{label}: {entry.name}",
        "parameters": describe_parameters(entry.schema),
        "usage": copy.deepcopy(entry.usage) if entry.usage is not None else [],
    }


def _describe_resource(entry: ResourceEntry) -> dict[str, Any]:
    if entry.schema:
        parameters = describe_parameters(entry.schema)
    else:
        # Undeclared: every placeholder is a required string.
        parameters = [
            {"name": name, "description": "", "type": ParamKind.STRING.value, "required": True}
            for name in entry.uri_template.placeholders
        ]
    return {
        "name": entry.name,
        "description": entry.description or f"Resource: {entry.name}",
        "uriTemplate": entry.uri_template.pattern,
        "parameters": parameters,
    }


def build_manifest(
    registry: CapabilityRegistry,
    server_info: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Describe every registered tool, resource and prompt.

    Output is rebuilt from the registry on each call and follows registration
    order within each kind, so two calls without re-registration in between
    are structurally identical.
    """
    manifest: dict[str, Any] = dict(server_info or {})
    manifest["tools"] = [
        _describe_callable(e, "Tool")
        for e in registry.all(CapabilityKind.TOOL)
        if isinstance(e, ToolEntry)
    ]
    manifest["resources"] = [
        _describe_resource(e)
        for e in registry.all(CapabilityKind.RESOURCE)
        if isinstance(e, ResourceEntry)
    ]
    manifest["prompts"] = [
        _describe_callable(e, "Prompt")
        for e in registry.all(CapabilityKind.PROMPT)
        if isinstance(e, PromptEntry)
    ]
    return manifest
