"""Report, recommendation and risk models produced by the quality orchestrator."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from ..agents.models import ComplianceReport, FunctionalReport, IssueScanReport, PerformanceReport
from ..projects import TestPlan

Category = Literal["functionality", "performance", "security", "accessibility", "maintainability"]
RiskSeverity = Literal["CRITICAL", "HIGH"]
RiskLevel = Literal["CRITICAL", "HIGH", "LOW"]
Trend = Literal["baseline", "improving", "declining", "stable"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QualityReport(BaseModel):
    overall_score: int = Field(..., ge=0, le=100)
    breakdown: dict[str, int]
    trend: Trend = "baseline"
    benchmarks: dict[str, float] = Field(
        default_factory=dict, description="Score minus threshold per category."
    )


class Recommendation(BaseModel):
    area: str
    current_score: int
    target_score: float
    priority: float = Field(..., description="Higher is more urgent.")
    actions: list[str] = Field(default_factory=list)
    estimated_impact: str
    timeframe: str


class Risk(BaseModel):
    type: str
    severity: RiskSeverity
    description: str
    impact: str
    mitigation: str


class RiskAssessment(BaseModel):
    total_risks: int = 0
    risk_level: RiskLevel = "LOW"
    risks: list[Risk] = Field(default_factory=list)


class LegResults(BaseModel):
    """Raw outputs of the four concurrent legs."""

    functional: FunctionalReport
    issues: IssueScanReport
    performance: PerformanceReport
    compliance: ComplianceReport


class Assessment(BaseModel):
    timestamp: datetime = Field(default_factory=_utcnow)
    project: str
    quality_score: int
    breakdown: dict[str, int]
    report: QualityReport
    test_plan: TestPlan
    recommendations: list[Recommendation] = Field(default_factory=list)
    risk_assessment: RiskAssessment = Field(default_factory=RiskAssessment)
    detailed_results: LegResults


class QuickReport(BaseModel):
    """Outcome of the cheaper monitoring subset; legs that failed are listed, not fatal."""

    timestamp: datetime = Field(default_factory=_utcnow)
    project: str
    quality_score: int
    breakdown: dict[str, int] = Field(default_factory=dict)
    critical_issues: list[str] = Field(default_factory=list)
    quick_fixes: list[str] = Field(default_factory=list)
    failed_legs: list[str] = Field(default_factory=list)


class TrendPrediction(BaseModel):
    current_trend: str
    projected_score: float
    risk_factors: list[Any] = Field(default_factory=list)
    recommendations: list[Any] = Field(default_factory=list)
    confidence: float = Field(..., ge=0, le=1)
    samples: int = 0


__all__ = [
    "Assessment",
    "Category",
    "LegResults",
    "QualityReport",
    "QuickReport",
    "Recommendation",
    "Risk",
    "RiskAssessment",
    "RiskLevel",
    "RiskSeverity",
    "Trend",
    "TrendPrediction",
]
