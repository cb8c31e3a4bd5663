"""Task lifecycle capability embedded by every checking unit.

A :class:`TaskLifecycle` owns a unit's identity, status, metrics, memory and
context. Units compose one and route each unit of work through
:meth:`TaskLifecycle.execute`, which handles status transitions, timing,
metrics, event publication and logging.
"""

from __future__ import annotations

import inspect
import logging
import time
import traceback
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar
from uuid import uuid4

from ..ai import AIProvider
from ..errors import AgentQAError, ConfigurationError, TaskExecutionError
from .events import (
    Communication,
    ContextChanged,
    EventBus,
    EventKind,
    Listener,
    StatusChanged,
    TaskCompleted,
    TaskFailed,
)
from .memory import MemoryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DETAILED_METRICS_KEY = "detailed_metrics"


class UnitStatus(str, Enum):
    INITIALIZED = "initialized"
    IDLE = "idle"
    EXECUTING = "executing"
    TERMINATED = "terminated"


class ContextKey(str, Enum):
    TARGET_URL = "target_url"
    PROJECT = "project"
    TEST_PLAN = "test_plan"
    LAST_REPORT = "last_report"
    SUITE = "suite"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class UnitMetrics:
    tasks_completed: int = 0
    tasks_succeeded: int = 0
    tasks_failed: int = 0
    average_execution_time: float = 0.0
    last_activity: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["last_activity"] = self.last_activity.isoformat()
        return payload


@dataclass(slots=True)
class TaskRecord:
    """Ephemeral bookkeeping for one execution."""

    id: str
    name: str
    started_at: float
    elapsed: float = 0.0
    succeeded: bool | None = None


class TaskLifecycle:
    """Status, metrics, memory and context for one checking unit."""

    def __init__(
        self,
        name: str,
        *,
        log_level: str | int = "INFO",
        ai_provider: AIProvider | None = None,
        timer: Callable[[], float] | None = None,
        memory_clock: Callable[[], float] | None = None,
    ) -> None:
        self.name = name
        self.log_level = (
            log_level if isinstance(log_level, int) else logging.getLevelName(log_level.upper())
        )
        if not isinstance(self.log_level, int):
            raise ConfigurationError(f"Unknown log level: {log_level}")
        self.ai_provider = ai_provider
        self.events = EventBus()
        self._timer = timer or time.perf_counter
        self._memory_clock = memory_clock
        self._reset_state()
        self._transition(UnitStatus.IDLE)
        self.log(logging.INFO, f"{self.name} unit initialized with ID: {self.id}")

    def _reset_state(self) -> None:
        self.id = str(uuid4())
        self.status = UnitStatus.INITIALIZED
        self.memory = MemoryStore(clock=self._memory_clock)
        self.metrics = UnitMetrics()
        self.context: dict[ContextKey, Any] = {}
        self._started = self._timer()
        self._active = 0
        self._finished = 0

    # -- logging -------------------------------------------------------

    def log(self, level: int, message: str, /, **data: Any) -> None:
        """Log through the module logger and mirror the record into the unit's ring buffer."""

        logger.log(
            level,
            "[%s] %s",
            self.name,
            message,
            extra={"unit": self.name, "unit_id": self.id, "data": data},
        )
        if level >= self.log_level:
            self.memory.append_log(
                {
                    "timestamp": _utcnow().isoformat(),
                    "unit": self.name,
                    "id": self.id,
                    "level": logging.getLevelName(level).lower(),
                    "message": message,
                    "data": data or None,
                }
            )

    def log_error(self, message: str, error: BaseException) -> None:
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        logger.error(
            "[%s] %s: %s",
            self.name,
            message,
            error,
            exc_info=(type(error), error, error.__traceback__),
            extra={"unit": self.name, "unit_id": self.id},
        )
        if logging.ERROR >= self.log_level:
            self.memory.append_log(
                {
                    "timestamp": _utcnow().isoformat(),
                    "unit": self.name,
                    "id": self.id,
                    "level": "error",
                    "message": message,
                    "data": {"error": str(error), "stack": stack},
                }
            )

    # -- events --------------------------------------------------------

    def subscribe(self, listener: Listener, kind: EventKind | None = None) -> Callable[[], None]:
        return self.events.subscribe(listener, kind)

    def _transition(self, new_status: UnitStatus) -> None:
        if self.status is UnitStatus.TERMINATED:
            raise TaskExecutionError(
                self.name, f"unit is terminated; cannot move to {new_status.value}"
            )
        old_status = self.status
        self.status = new_status
        self.log(logging.DEBUG, f"Status changed: {old_status.value} -> {new_status.value}")
        self.events.publish(StatusChanged(old=old_status.value, new=new_status.value))

    # -- task execution ------------------------------------------------

    async def execute(
        self,
        name: str,
        fn: Callable[..., Awaitable[T] | T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run ``fn`` as a tracked task and return its result.

        Failures are logged, counted and re-raised: domain errors unchanged,
        anything else wrapped in :class:`TaskExecutionError`.
        """

        if self.status is UnitStatus.TERMINATED:
            raise TaskExecutionError(name, f"unit {self.name} is terminated")

        record = TaskRecord(id=str(uuid4()), name=name, started_at=self._timer())
        self.log(logging.INFO, f"Starting task: {name}", task_id=record.id)
        if self._active == 0:
            self._transition(UnitStatus.EXECUTING)
        self._active += 1
        self.metrics.tasks_completed += 1

        try:
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            record.elapsed = self._elapsed_since(record.started_at)
            record.succeeded = False
            self.metrics.tasks_failed += 1
            self._record_duration("task_failed", record.elapsed)
            self.log_error(f"Task failed: {name}", exc)
            self.events.publish(
                TaskFailed(task_id=record.id, name=name, error=exc, elapsed=record.elapsed)
            )
            if isinstance(exc, AgentQAError):
                raise
            raise TaskExecutionError(name, str(exc) or type(exc).__name__) from exc
        else:
            record.elapsed = self._elapsed_since(record.started_at)
            record.succeeded = True
            self.metrics.tasks_succeeded += 1
            self._record_duration("task_success", record.elapsed)
            self.log(
                logging.INFO,
                f"Task completed: {name}",
                task_id=record.id,
                execution_time_ms=round(record.elapsed, 3),
            )
            self.events.publish(
                TaskCompleted(task_id=record.id, name=name, result=result, elapsed=record.elapsed)
            )
            return result
        finally:
            self._active -= 1
            if self._active == 0 and self.status is not UnitStatus.TERMINATED:
                self._transition(UnitStatus.IDLE)
            self.metrics.last_activity = _utcnow()

    def _elapsed_since(self, started_at: float) -> float:
        return (self._timer() - started_at) * 1000.0

    def _record_duration(self, kind: str, elapsed: float) -> None:
        # Mean over finished tasks; equals the tasks_completed-based mean when tasks don't overlap.
        self._finished += 1
        n = self._finished
        average = self.metrics.average_execution_time
        self.metrics.average_execution_time = (average * (n - 1) + elapsed) / n
        self._record_detailed(kind, elapsed)

    def _record_detailed(self, kind: str, elapsed: float) -> None:
        detailed = self.memory.recall(DETAILED_METRICS_KEY)
        if detailed is None:
            detailed = {}
            self.memory.remember(DETAILED_METRICS_KEY, detailed)
        bucket = detailed.setdefault(kind, {"count": 0, "total_time": 0.0, "avg_time": 0.0})
        bucket["count"] += 1
        bucket["total_time"] += elapsed
        bucket["avg_time"] = bucket["total_time"] / bucket["count"]

    async def call_ai(self, prompt: str) -> str:
        """Send ``prompt`` to the configured AI provider, tracking call metrics."""

        if self.ai_provider is None:
            raise ConfigurationError(f"{self.name} has no AI provider configured")
        started = self._timer()
        self.log(logging.DEBUG, "Calling AI model", prompt=prompt[:100] + "...")
        try:
            response = await self.ai_provider.complete(prompt)
        except Exception as exc:
            self._record_detailed("ai_call_failed", self._elapsed_since(started))
            self.log_error("AI call failed", exc)
            raise
        self._record_detailed("ai_call_success", self._elapsed_since(started))
        return response

    # -- context & communication ----------------------------------------

    def set_context(self, key: ContextKey | str, value: Any) -> None:
        resolved = ContextKey(key)
        self.context[resolved] = value
        self.log(logging.DEBUG, f"Context updated: {resolved.value}")
        self.events.publish(ContextChanged(key=resolved.value, value=value))

    def get_context(self, key: ContextKey | str, default: Any = None) -> Any:
        return self.context.get(ContextKey(key), default)

    def communicate_with(
        self, unit_id: str, message: str, data: dict[str, Any] | None = None
    ) -> Communication:
        self.log(logging.INFO, f"Communicating with unit: {unit_id}", message=message)
        communication = Communication(
            sender=self.id, recipient=unit_id, message=message, data=dict(data or {})
        )
        self.events.publish(communication)
        return communication

    # -- reporting -----------------------------------------------------

    @property
    def uptime_ms(self) -> float:
        return (self._timer() - self._started) * 1000.0

    def status_snapshot(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "uptime_ms": round(self.uptime_ms),
            "metrics": self.metrics.to_dict(),
            "memory_size": len(self.memory),
            "context_keys": [key.value for key in self.context],
            "last_logs": self.memory.recent_logs(5),
        }

    def performance_summary(self) -> dict[str, Any]:
        uptime = self.uptime_ms
        completed = self.metrics.tasks_completed
        success_rate = (self.metrics.tasks_succeeded / completed) * 100 if completed else 0.0
        average = self.metrics.average_execution_time
        minutes = uptime / 60000
        return {
            "uptime_s": round(uptime / 1000),
            "success_rate": round(success_rate, 2),
            "total_tasks": completed,
            "average_execution_time_ms": round(average, 2),
            "tasks_per_minute": completed / minutes if minutes > 0 else 0.0,
            "detailed_metrics": self.memory.recall(DETAILED_METRICS_KEY, {}),
            "recommendations": self._performance_advice(success_rate, average),
        }

    def _performance_advice(self, success_rate: float, average: float) -> list[str]:
        advice = []
        if success_rate < 90:
            advice.append("Consider improving error handling and retry logic")
        if average > 5000:
            advice.append("Optimize task execution time - consider caching or parallel processing")
        if len(self.memory) > 1000:
            advice.append("Consider implementing memory cleanup to prevent memory leaks")
        return advice or ["Performance is optimal"]

    # -- teardown ------------------------------------------------------

    def cleanup(self) -> None:
        """Drop listeners and memory, then enter the terminal status."""

        if self.status is UnitStatus.TERMINATED:
            return
        self.log(logging.INFO, "Starting cleanup process")
        self.events.clear()
        self.memory.clear()
        self._transition(UnitStatus.TERMINATED)

    def restart(self) -> None:
        """Discard all state and come back up as a fresh idle unit."""

        self.log(logging.INFO, "Restarting unit")
        self.cleanup()
        self._reset_state()
        self._transition(UnitStatus.IDLE)
        self.log(logging.INFO, f"Unit restarted with new ID: {self.id}")


__all__ = ["ContextKey", "TaskLifecycle", "TaskRecord", "UnitMetrics", "UnitStatus"]
