"""Error taxonomy shared by every Agent.QA unit."""

from __future__ import annotations

from typing import Sequence


class AgentQAError(RuntimeError):
    """Base class for Agent.QA errors."""


class ConfigurationError(AgentQAError):
    """Raised when an option, provider or collaborator is unsupported or missing."""


class NavigationError(AgentQAError):
    """Raised when a browser session cannot reach its target."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Navigation to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class QATimeoutError(AgentQAError, TimeoutError):
    """Raised when a browser operation exceeds its configured timeout."""

    def __init__(self, operation: str, timeout: float) -> None:
        super().__init__(f"{operation} exceeded timeout of {timeout:g}s")
        self.operation = operation
        self.timeout = timeout


class TaskExecutionError(AgentQAError):
    """Wraps a failure raised by a unit of work run through a task lifecycle."""

    def __init__(self, task_name: str, message: str) -> None:
        super().__init__(f"Task '{task_name}' failed: {message}")
        self.task_name = task_name


class AggregationError(AgentQAError):
    """Raised when any leg of a concurrent quality assessment fails."""

    def __init__(self, failed_legs: Sequence[str], message: str) -> None:
        legs = ", ".join(failed_legs)
        super().__init__(f"Assessment aborted, failed legs [{legs}]: {message}")
        self.failed_legs = tuple(failed_legs)


class ProjectLoadError(AgentQAError):
    """Raised when one or more project descriptor files cannot be parsed."""


__all__ = [
    "AgentQAError",
    "AggregationError",
    "ConfigurationError",
    "NavigationError",
    "ProjectLoadError",
    "QATimeoutError",
    "TaskExecutionError",
]
