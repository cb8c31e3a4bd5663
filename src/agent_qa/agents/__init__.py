"""Checking units run as legs of a quality assessment."""

from .compliance import ComplianceGuardianAgent
from .functional import TestAutomationAgent
from .issues import BugHunterAgent
from .models import (
    ComplianceFinding,
    ComplianceReport,
    FunctionalReport,
    Issue,
    IssueScanReport,
    PerformanceReport,
)
from .performance import PerformanceAnalystAgent

__all__ = [
    "BugHunterAgent",
    "ComplianceFinding",
    "ComplianceGuardianAgent",
    "ComplianceReport",
    "FunctionalReport",
    "Issue",
    "IssueScanReport",
    "PerformanceAnalystAgent",
    "PerformanceReport",
    "TestAutomationAgent",
]
