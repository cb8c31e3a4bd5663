"""Task lifecycle, memory and event primitives shared by every unit."""

from .events import (
    Communication,
    ContextChanged,
    EventBus,
    LifecycleEvent,
    StatusChanged,
    TaskCompleted,
    TaskFailed,
)
from .manager import ContextKey, TaskLifecycle, UnitMetrics, UnitStatus
from .memory import LOG_CAPACITY, MemoryEntry, MemoryStore

__all__ = [
    "Communication",
    "ContextChanged",
    "ContextKey",
    "EventBus",
    "LOG_CAPACITY",
    "LifecycleEvent",
    "MemoryEntry",
    "MemoryStore",
    "StatusChanged",
    "TaskCompleted",
    "TaskFailed",
    "TaskLifecycle",
    "UnitMetrics",
    "UnitStatus",
]
