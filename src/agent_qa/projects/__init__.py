"""Project descriptor models and loader exports."""

from .loader import Project, ProjectLoadError, ProjectLoader
from .models import Complexity, Priority, ProjectType, TestPlan

__all__ = [
    "Complexity",
    "Priority",
    "Project",
    "ProjectLoadError",
    "ProjectLoader",
    "ProjectType",
    "TestPlan",
]
