# src/taskwire/core/schema.py

from __future__ import annotations

"""
Parameter schemas for capabilities.

Schemas are declared data: an ordered mapping of parameter name -> ParamSpec.
They drive the discovery manifest and the small "required field" checks that
handlers run before calling the task store. No runtime reflection on handler
signatures or on request values is used to infer them.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ParamKind(StrEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ENUM = "enum"


@dataclass(frozen=True, slots=True)
class ParamSpec:
    kind: ParamKind
    required: bool = False
    enum_values: tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        if self.kind == ParamKind.ENUM and not self.enum_values:
            raise ValueError("enum parameter requires at least one value")
        if self.kind != ParamKind.ENUM and self.enum_values:
            raise ValueError(f"enum_values given for non-enum parameter kind {self.kind}")


Schema = Mapping[str, ParamSpec]


def string(description: str = "", *, required: bool = False) -> ParamSpec:
    return ParamSpec(ParamKind.STRING, required=required, description=description)


def number(description: str = "", *, required: bool = False) -> ParamSpec:
    return ParamSpec(ParamKind.NUMBER, required=required, description=description)


def boolean(description: str = "", *, required: bool = False) -> ParamSpec:
    return ParamSpec(ParamKind.BOOLEAN, required=required, description=description)


def array(description: str = "", *, required: bool = False) -> ParamSpec:
    return ParamSpec(ParamKind.ARRAY, required=required, description=description)


def obj(description: str = "", *, required: bool = False) -> ParamSpec:
    return ParamSpec(ParamKind.OBJECT, required=required, description=description)


def enum(values: Iterable[str], description: str = "", *, required: bool = False) -> ParamSpec:
    return ParamSpec(
        ParamKind.ENUM,
        required=required,
        enum_values=tuple(values),
        description=description,
    )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def missing_required(schema: Schema, params: Mapping[str, Any]) -> list[str]:
    """Names of required parameters that are absent, null or blank strings."""
    return [name for name, spec in schema.items() if spec.required and _is_blank(params.get(name))]


def invalid_enum_values(schema: Schema, params: Mapping[str, Any]) -> dict[str, Any]:
    """Enum parameters whose supplied value is not one of the declared values."""
    out: dict[str, Any] = {}
    for name, spec in schema.items():
        if spec.kind != ParamKind.ENUM:
            continue
        value = params.get(name)
        if value is None:
            continue
        if value not in spec.enum_values:
            out[name] = value
    return out
