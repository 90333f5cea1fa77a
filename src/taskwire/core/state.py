# src/taskwire/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .dispatcher import Dispatcher
from .ports import TaskApi
from .registry import CapabilityRegistry


@dataclass(slots=True)
class AppState:
    """
    Process-wide context built once by the composition root (cli/bootstrap.py)
    and passed explicitly to the transport and to capability factories.
    """

    settings: object
    registry: CapabilityRegistry
    dispatcher: Dispatcher
    task_api: TaskApi
