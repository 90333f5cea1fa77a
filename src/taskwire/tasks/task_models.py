# src/taskwire/tasks/task_models.py

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """Task lifecycle status as reported by the task store."""

    NOT_STARTED = "not_started"
    STARTED = "started"
    DONE = "done"


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


STATUS_VALUES: tuple[str, ...] = tuple(s.value for s in TaskStatus)
PRIORITY_VALUES: tuple[str, ...] = tuple(p.value for p in TaskPriority)


def parse_task_id(value: Any) -> int | None:
    """Positive integer id from an int or an ASCII digit string; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        text = value.strip()
        # str.isdigit() alone admits superscripts like "²" that int() rejects.
        if text.isascii() and text.isdigit():
            n = int(text)
            return n if n > 0 else None
    return None


@dataclass(slots=True)
class Task:
    id: int
    task: str
    category: str
    priority: str
    status: str
    create_time: str

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> Task:
        """
        Build a Task from a task-store JSON object.

        The store is not under our control, so missing fields fall back to
        empty strings / defaults instead of failing the whole listing.
        """
        return cls(
            id=parse_task_id(raw.get("id")) or 0,
            task=str(raw.get("task") or ""),
            category=str(raw.get("category") or ""),
            priority=str(raw.get("priority") or TaskPriority.MEDIUM.value),
            status=str(raw.get("status") or TaskStatus.NOT_STARTED.value),
            create_time=str(raw.get("create_time") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def render_text(self) -> str:
        return (
            f"ID: {self.id}\n"
            f"Task: {self.task}\n"
            f"Category: {self.category}\n"
            f"Priority: {self.priority}\n"
            f"Status: {self.status}\n"
            f"Created: {self.create_time}"
        )
