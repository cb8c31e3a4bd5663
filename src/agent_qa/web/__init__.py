"""Website test runner, suites and result models."""

from .models import (
    PageInspection,
    PerformanceMetrics,
    PerformanceResult,
    ScreenshotResult,
    SuiteResult,
    SuiteSummary,
    TestResult,
)
from .runner import WebTester
from .suites import BUILTIN_SUITES, TestDescriptor, TestOutcome, TestSuite, resolve_suite

__all__ = [
    "BUILTIN_SUITES",
    "PageInspection",
    "PerformanceMetrics",
    "PerformanceResult",
    "ScreenshotResult",
    "SuiteResult",
    "SuiteSummary",
    "TestDescriptor",
    "TestOutcome",
    "TestResult",
    "TestSuite",
    "WebTester",
    "resolve_suite",
]
