# src/taskwire/core/uri_template.py

"""
Resource address templates for custom schemes (tasks://task/{taskId}).

Custom schemes have no authority/host part, so this module works on plain
split strings and never goes through urllib.parse.

Matching rules:
- the scheme (text before "://") must be byte-equal
- the rest is split on "/" and compared segment by segment
- literal segments must be equal (case-sensitive)
- a {name} segment binds the raw URI segment, which must be non-empty
- segment counts must be equal
"""

from __future__ import annotations

from dataclasses import dataclass

SCHEME_SEP = "://"


@dataclass(frozen=True, slots=True)
class Segment:
    value: str
    is_placeholder: bool = False


@dataclass(frozen=True, slots=True)
class UriTemplate:
    pattern: str
    scheme: str
    segments: tuple[Segment, ...]

    @classmethod
    def parse(cls, pattern: str) -> UriTemplate:
        scheme, sep, rest = pattern.partition(SCHEME_SEP)
        if not sep or not scheme:
            raise ValueError(f"URI template must start with '<scheme>://': {pattern!r}")

        segments: list[Segment] = []
        names: set[str] = set()
        for raw in rest.split("/"):
            if raw.startswith("{") and raw.endswith("}"):
                name = raw[1:-1]
                if not name or "{" in name or "}" in name:
                    raise ValueError(f"Malformed placeholder {raw!r} in template {pattern!r}")
                if name in names:
                    raise ValueError(f"Duplicate placeholder {{{name}}} in template {pattern!r}")
                names.add(name)
                segments.append(Segment(name, is_placeholder=True))
            elif "{" in raw or "}" in raw:
                # Partial placeholders ("task-{id}") are not supported.
                raise ValueError(f"Malformed placeholder {raw!r} in template {pattern!r}")
            else:
                segments.append(Segment(raw))

        return cls(pattern=pattern, scheme=scheme, segments=tuple(segments))

    @property
    def placeholders(self) -> list[str]:
        return [s.value for s in self.segments if s.is_placeholder]

    def match(self, uri: str) -> dict[str, str] | None:
        return match(uri, self)

    def __str__(self) -> str:
        return self.pattern


def match(uri: str, template: UriTemplate) -> dict[str, str] | None:
    """Return the bound placeholders if `uri` matches `template`, else None."""
    scheme, sep, rest = uri.partition(SCHEME_SEP)
    if not sep or scheme != template.scheme:
        return None

    parts = rest.split("/")
    if len(parts) != len(template.segments):
        return None

    params: dict[str, str] = {}
    for seg, part in zip(template.segments, parts):
        if seg.is_placeholder:
            if part == "":
                return None
            params[seg.value] = part
        elif seg.value != part:
            return None

    return params
