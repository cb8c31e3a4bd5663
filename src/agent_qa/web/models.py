"""Result models produced by the website test runner."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, Field

TestStatus = Literal["passed", "failed", "skipped"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TestResult(BaseModel):
    """Outcome of a single test within a suite run."""

    __test__: ClassVar[bool] = False

    name: str
    description: str = ""
    status: TestStatus
    message: str = ""
    details: dict[str, Any] = Field(default_factory=dict)
    duration: float = Field(default=0.0, description="Wall-clock duration in milliseconds.")


class SuiteSummary(BaseModel):
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    def record(self, status: TestStatus) -> None:
        self.total += 1
        if status == "passed":
            self.passed += 1
        elif status == "failed":
            self.failed += 1
        else:
            self.skipped += 1

    @property
    def quality_score(self) -> int:
        if self.total == 0:
            return 0
        return round_half_up(100 * self.passed / self.total)


class SuiteResult(BaseModel):
    url: str
    suite: str
    timestamp: datetime = Field(default_factory=_utcnow)
    tests: list[TestResult] = Field(default_factory=list)
    summary: SuiteSummary = Field(default_factory=SuiteSummary)
    quality_score: int = 0


class ScreenshotResult(BaseModel):
    url: str
    timestamp: datetime = Field(default_factory=_utcnow)
    image_type: str = "png"
    screenshot: str = Field(..., description="Base64-encoded image payload.")
    size: int


class PerformanceMetrics(BaseModel):
    """Navigation timing in milliseconds; absent entries are reported as 0."""

    load_time: float = 0.0
    dom_content_loaded: float = 0.0
    first_paint: float = 0.0
    first_contentful_paint: float = 0.0


class PerformanceResult(BaseModel):
    url: str
    timestamp: datetime = Field(default_factory=_utcnow)
    metrics: PerformanceMetrics


class PageInspection(BaseModel):
    """A DOM probe result plus the console errors seen while the page was observed."""

    url: str
    probe: Any = None
    console_errors: list[str] = Field(default_factory=list)


def round_half_up(value: float) -> int:
    """Round like a score: halves go up, not to the nearest even integer."""

    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


__all__ = [
    "PageInspection",
    "PerformanceMetrics",
    "PerformanceResult",
    "ScreenshotResult",
    "SuiteResult",
    "SuiteSummary",
    "TestResult",
    "TestStatus",
    "round_half_up",
]
