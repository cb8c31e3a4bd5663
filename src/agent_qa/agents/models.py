"""Raw outputs of the four checking units."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from ..web.models import PerformanceMetrics, SuiteResult, SuiteSummary

Severity = Literal["CRITICAL", "HIGH", "MEDIUM", "LOW"]
IssueCategory = Literal["security", "maintainability"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FunctionalReport(BaseModel):
    project: str
    timestamp: datetime = Field(default_factory=_utcnow)
    suites: list[SuiteResult] = Field(default_factory=list)
    summary: SuiteSummary = Field(default_factory=SuiteSummary)
    quality_score: int = 0

    @property
    def failed_tests(self) -> list[str]:
        return [
            f"{suite.suite}:{test.name}"
            for suite in self.suites
            for test in suite.tests
            if test.status == "failed"
        ]


class Issue(BaseModel):
    category: IssueCategory
    severity: Severity
    title: str
    detail: str
    url: str


class IssueScanReport(BaseModel):
    project: str
    url: str
    timestamp: datetime = Field(default_factory=_utcnow)
    issues: list[Issue] = Field(default_factory=list)
    probe: dict[str, Any] = Field(default_factory=dict)
    console_errors: list[str] = Field(default_factory=list)

    def by_category(self, category: IssueCategory) -> list[Issue]:
        return [issue for issue in self.issues if issue.category == category]


class PerformanceReport(BaseModel):
    project: str
    url: str
    timestamp: datetime = Field(default_factory=_utcnow)
    samples: list[PerformanceMetrics] = Field(default_factory=list)
    metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    budgets: dict[str, float] = Field(default_factory=dict)
    over_budget: list[str] = Field(default_factory=list)


class ComplianceFinding(BaseModel):
    rule: str
    passed: bool
    detail: str


class ComplianceReport(BaseModel):
    project: str
    url: str
    timestamp: datetime = Field(default_factory=_utcnow)
    accessibility: SuiteResult
    findings: list[ComplianceFinding] = Field(default_factory=list)

    @property
    def failed_findings(self) -> list[ComplianceFinding]:
        return [finding for finding in self.findings if not finding.passed]


__all__ = [
    "ComplianceFinding",
    "ComplianceReport",
    "FunctionalReport",
    "Issue",
    "IssueCategory",
    "IssueScanReport",
    "PerformanceReport",
    "Severity",
]
