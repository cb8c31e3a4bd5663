"""Category scoring, weighted aggregation, recommendations and risk rules.

Every function here is pure: leg reports and thresholds in, scores and
findings out.
"""

from __future__ import annotations

import math
from typing import Iterable, Mapping

from ..agents.models import (
    ComplianceReport,
    FunctionalReport,
    Issue,
    IssueScanReport,
    PerformanceReport,
)
from ..web.models import round_half_up
from .models import LegResults, QualityReport, Recommendation, Risk, RiskAssessment, Trend

CATEGORY_WEIGHTS: dict[str, float] = {
    "functionality": 0.30,
    "performance": 0.25,
    "security": 0.25,
    "accessibility": 0.15,
    "maintainability": 0.05,
}

SEVERITY_PENALTY = {"CRITICAL": 40, "HIGH": 20, "MEDIUM": 10, "LOW": 5}
FAILED_TEST_PENALTY = 5
FAILED_FINDING_PENALTY = 10

CRITICAL_RISK_BELOW = 50
HIGH_RISK_BELOW = 70
OVERALL_RISK_BELOW = 80
TREND_TOLERANCE = 2

_AREA_GUIDANCE: dict[str, dict[str, object]] = {
    "functionality": {
        "actions": [
            "Fix failing functional tests before adding new features",
            "Add regression tests for recently broken flows",
            "Gate deployments on the basic test suite",
        ],
        "impact": "Fewer user-facing failures",
        "mitigation": "Freeze feature work and stabilise failing flows",
    },
    "performance": {
        "actions": [
            "Compress and lazy-load images and other heavy assets",
            "Defer non-critical JavaScript",
            "Enable caching and a CDN for static resources",
        ],
        "impact": "Faster loads and lower bounce rates",
        "mitigation": "Profile the critical rendering path and remove blocking resources",
    },
    "security": {
        "actions": [
            "Serve every page and resource over HTTPS",
            "Remove mixed content and add rel=noopener to external links",
            "Add security headers (CSP, HSTS)",
        ],
        "impact": "Reduced exposure to data leaks and injection",
        "mitigation": "Patch high-severity findings before the next release",
    },
    "accessibility": {
        "actions": [
            "Provide alt text for all meaningful images",
            "Use a single h1 and a logical heading hierarchy",
            "Label every form control and declare the document language",
        ],
        "impact": "Usable by assistive technologies; lower compliance risk",
        "mitigation": "Run an accessibility audit against WCAG 2.1 AA",
    },
    "maintainability": {
        "actions": [
            "Resolve console errors",
            "Replace deprecated markup",
            "Move inline scripts into versioned bundles",
        ],
        "impact": "Lower cost of change and fewer regressions",
        "mitigation": "Schedule refactoring time for flagged areas",
    },
}


def clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def _penalty(issues: Iterable[Issue]) -> int:
    return sum(SEVERITY_PENALTY[issue.severity] for issue in issues)


def functionality_score(functional: FunctionalReport) -> int:
    return clamp_score(functional.quality_score)


def performance_score(performance: PerformanceReport, budgets: Mapping[str, float]) -> int:
    """Mean of per-metric scores; a metric within budget scores 100."""

    scores = []
    for name, budget in budgets.items():
        value = getattr(performance.metrics, name, 0.0) or 0.0
        if budget <= 0 or value <= budget:
            scores.append(100.0)
        else:
            scores.append(max(0.0, 100.0 - 100.0 * (value - budget) / budget))
    if not scores:
        return 100
    return clamp_score(math.fsum(scores) / len(scores))


def security_score(issues: IssueScanReport) -> int:
    return clamp_score(100 - _penalty(issues.by_category("security")))


def accessibility_score(compliance: ComplianceReport) -> int:
    return clamp_score(
        compliance.accessibility.quality_score
        - FAILED_FINDING_PENALTY * len(compliance.failed_findings)
    )


def maintainability_score(issues: IssueScanReport, functional: FunctionalReport) -> int:
    return clamp_score(
        100
        - _penalty(issues.by_category("maintainability"))
        - FAILED_TEST_PENALTY * functional.summary.failed
    )


def compute_breakdown(legs: LegResults, budgets: Mapping[str, float]) -> dict[str, int]:
    return {
        "functionality": functionality_score(legs.functional),
        "performance": performance_score(legs.performance, budgets),
        "security": security_score(legs.issues),
        "accessibility": accessibility_score(legs.compliance),
        "maintainability": maintainability_score(legs.issues, legs.functional),
    }


def overall_score(breakdown: Mapping[str, float], weights: Mapping[str, float] = CATEGORY_WEIGHTS) -> int:
    """Weighted sum over the weighted categories, rounded half-up."""

    missing = set(weights) - set(breakdown)
    if missing:
        raise ValueError(f"breakdown is missing categories: {', '.join(sorted(missing))}")
    return clamp_score(math.fsum(weights[name] * breakdown[name] for name in weights))


def partial_score(breakdown: Mapping[str, float], weights: Mapping[str, float] = CATEGORY_WEIGHTS) -> int:
    """Weighted score over whichever categories are present, with weights renormalised."""

    present = {name: weight for name, weight in weights.items() if name in breakdown}
    total = math.fsum(present.values())
    if total == 0:
        return 0
    return clamp_score(math.fsum(w * breakdown[name] for name, w in present.items()) / total)


def benchmarks(breakdown: Mapping[str, int], thresholds: Mapping[str, float]) -> dict[str, float]:
    return {
        name: score - thresholds[name] for name, score in breakdown.items() if name in thresholds
    }


def calculate_trend(current: int, previous: int | None) -> Trend:
    if previous is None:
        return "baseline"
    if current - previous > TREND_TOLERANCE:
        return "improving"
    if previous - current > TREND_TOLERANCE:
        return "declining"
    return "stable"


def build_quality_report(
    breakdown: dict[str, int],
    thresholds: Mapping[str, float],
    previous_score: int | None = None,
) -> QualityReport:
    score = overall_score(breakdown)
    return QualityReport(
        overall_score=score,
        breakdown=breakdown,
        trend=calculate_trend(score, previous_score),
        benchmarks=benchmarks(breakdown, thresholds),
    )


def recommendation_priority(score: float, threshold: float) -> float:
    return round(threshold - score, 2)


def _timeframe(gap: float) -> str:
    if gap >= 30:
        return "immediate (within 1 week)"
    if gap >= 15:
        return "short-term (2-4 weeks)"
    return "medium-term (1-2 months)"


def generate_recommendations(
    breakdown: Mapping[str, int], thresholds: Mapping[str, float]
) -> list[Recommendation]:
    """One recommendation per category strictly below its threshold, most urgent first."""

    recommendations = []
    for area, score in breakdown.items():
        threshold = thresholds.get(area)
        if threshold is None or score >= threshold:
            continue
        gap = threshold - score
        guidance = _AREA_GUIDANCE.get(area, {})
        weight = CATEGORY_WEIGHTS.get(area, 0.0)
        recommendations.append(
            Recommendation(
                area=area,
                current_score=score,
                target_score=threshold,
                priority=recommendation_priority(score, threshold),
                actions=list(guidance.get("actions", [])),
                estimated_impact=(
                    f"+{gap:g} {area} points (+{gap * weight:.1f} overall); "
                    f"{guidance.get('impact', 'Improved quality')}"
                ),
                timeframe=_timeframe(gap),
            )
        )
    return sorted(recommendations, key=lambda rec: rec.priority, reverse=True)


def assess_risks(report: QualityReport) -> RiskAssessment:
    risks: list[Risk] = []
    if report.overall_score < OVERALL_RISK_BELOW:
        risks.append(
            Risk(
                type="OVERALL_RISK",
                severity="HIGH",
                description="Overall quality score is below acceptable threshold",
                impact="High probability of production issues",
                mitigation="Immediate quality improvement required",
            )
        )
    for area, score in report.breakdown.items():
        if score >= HIGH_RISK_BELOW:
            continue
        severity = "CRITICAL" if score < CRITICAL_RISK_BELOW else "HIGH"
        guidance = _AREA_GUIDANCE.get(area, {})
        risks.append(
            Risk(
                type=f"{area.upper()}_RISK",
                severity=severity,
                description=f"{area} score critically low ({score})",
                impact=(
                    f"{area.capitalize()} failures are likely in production"
                    if severity == "CRITICAL"
                    else f"{area.capitalize()} degradation may affect users"
                ),
                mitigation=str(guidance.get("mitigation", f"Prioritise {area} improvements")),
            )
        )
    return RiskAssessment(total_risks=len(risks), risk_level=overall_risk_level(risks), risks=risks)


def overall_risk_level(risks: Iterable[Risk]) -> str:
    severities = {risk.severity for risk in risks}
    if "CRITICAL" in severities:
        return "CRITICAL"
    if "HIGH" in severities:
        return "HIGH"
    return "LOW"


__all__ = [
    "CATEGORY_WEIGHTS",
    "SEVERITY_PENALTY",
    "accessibility_score",
    "assess_risks",
    "benchmarks",
    "build_quality_report",
    "calculate_trend",
    "clamp_score",
    "compute_breakdown",
    "functionality_score",
    "generate_recommendations",
    "maintainability_score",
    "overall_score",
    "overall_risk_level",
    "partial_score",
    "performance_score",
    "recommendation_priority",
    "security_score",
]
