# tests/test_registry.py

from __future__ import annotations

from taskwire.core import schema as s
from taskwire.core.registry import CapabilityKind, CapabilityRegistry, ToolEntry


async def _noop(params):
    return {"content": []}


def test_lookup_returns_registered_entry_or_none() -> None:
    reg = CapabilityRegistry()
    reg.register(ToolEntry(name="listTasks", handler=_noop))

    entry = reg.lookup(CapabilityKind.TOOL, "listTasks")
    assert entry is not None
    assert entry.name == "listTasks"
    assert reg.lookup(CapabilityKind.TOOL, "listtasks") is None
    # Kinds are independent maps.
    assert reg.lookup(CapabilityKind.PROMPT, "listTasks") is None


def test_last_registration_wins_and_keeps_position() -> None:
    reg = CapabilityRegistry()
    reg.register(ToolEntry(name="a", handler=_noop, description="first"))
    reg.register(ToolEntry(name="b", handler=_noop))
    reg.register(ToolEntry(name="a", handler=_noop, description="second"))

    names = [e.name for e in reg.all(CapabilityKind.TOOL)]
    assert names == ["a", "b"]
    assert reg.lookup(CapabilityKind.TOOL, "a").description == "second"
    assert len(reg) == 2


def test_decorators_register_without_calling_handlers() -> None:
    reg = CapabilityRegistry()
    called = []

    @reg.tool("createTask", schema={"task": s.string(required=True)})
    async def create(params):
        called.append(params)
        return {}

    @reg.resource("task", "tasks://task/{taskId}")
    async def task(uri, params):
        called.append(uri)
        return {}

    @reg.prompt("report")
    async def report(params):
        called.append(params)
        return {}

    assert called == []
    assert reg.lookup(CapabilityKind.TOOL, "createTask").handler is create
    assert reg.lookup(CapabilityKind.RESOURCE, "task").uri_template.placeholders == ["taskId"]
    assert reg.lookup(CapabilityKind.PROMPT, "report").kind == CapabilityKind.PROMPT


def test_all_returns_snapshot() -> None:
    reg = CapabilityRegistry()
    reg.register(ToolEntry(name="a", handler=_noop))
    snapshot = reg.all(CapabilityKind.TOOL)
    reg.register(ToolEntry(name="b", handler=_noop))
    assert [e.name for e in snapshot] == ["a"]
