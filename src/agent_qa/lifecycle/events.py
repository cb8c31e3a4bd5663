"""Lifecycle events and the publish/subscribe bus that delivers them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Literal, Union

logger = logging.getLogger(__name__)

EventKind = Literal["statusChanged", "taskCompleted", "taskFailed", "contextChanged", "communication"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class StatusChanged:
    old: str
    new: str
    timestamp: datetime = field(default_factory=_utcnow)
    kind: Literal["statusChanged"] = "statusChanged"


@dataclass(frozen=True, slots=True)
class TaskCompleted:
    task_id: str
    name: str
    result: Any
    elapsed: float
    kind: Literal["taskCompleted"] = "taskCompleted"


@dataclass(frozen=True, slots=True)
class TaskFailed:
    task_id: str
    name: str
    error: BaseException
    elapsed: float
    kind: Literal["taskFailed"] = "taskFailed"


@dataclass(frozen=True, slots=True)
class ContextChanged:
    key: str
    value: Any
    kind: Literal["contextChanged"] = "contextChanged"


@dataclass(frozen=True, slots=True)
class Communication:
    sender: str
    recipient: str
    message: str
    data: dict[str, Any]
    timestamp: datetime = field(default_factory=_utcnow)
    kind: Literal["communication"] = "communication"


LifecycleEvent = Union[StatusChanged, TaskCompleted, TaskFailed, ContextChanged, Communication]
Listener = Callable[[LifecycleEvent], None]


class EventBus:
    """Synchronous fan-out of lifecycle events to registered listeners."""

    def __init__(self) -> None:
        self._listeners: list[tuple[EventKind | None, Listener]] = []

    def subscribe(self, listener: Listener, kind: EventKind | None = None) -> Callable[[], None]:
        """Register ``listener`` for ``kind`` (all kinds when ``None``); returns an unsubscribe callable."""

        registration = (kind, listener)
        self._listeners.append(registration)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(registration)
            except ValueError:
                pass

        return _unsubscribe

    def publish(self, event: LifecycleEvent) -> None:
        for kind, listener in list(self._listeners):
            if kind is not None and kind != event.kind:
                continue
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener failed", extra={"event_kind": event.kind})

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)


__all__ = [
    "Communication",
    "ContextChanged",
    "EventBus",
    "EventKind",
    "LifecycleEvent",
    "Listener",
    "StatusChanged",
    "TaskCompleted",
    "TaskFailed",
]
