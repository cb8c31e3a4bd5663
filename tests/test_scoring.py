from __future__ import annotations

import math

import pytest

from agent_qa.agents.models import (
    ComplianceFinding,
    ComplianceReport,
    FunctionalReport,
    Issue,
    IssueScanReport,
    PerformanceReport,
)
from agent_qa.quality import (
    CATEGORY_WEIGHTS,
    QualityReport,
    assess_risks,
    generate_recommendations,
    overall_score,
)
from agent_qa.quality.scoring import (
    accessibility_score,
    calculate_trend,
    maintainability_score,
    partial_score,
    performance_score,
    security_score,
)
from agent_qa.web.models import PerformanceMetrics, SuiteResult, SuiteSummary

THRESHOLDS = {
    "functionality": 95,
    "performance": 90,
    "security": 98,
    "accessibility": 92,
    "maintainability": 94,
    "overall": 94,
}
BUDGETS = {"load_time": 3000, "dom_content_loaded": 1500, "first_contentful_paint": 1800}


def _breakdown(value: int) -> dict[str, int]:
    return {name: value for name in CATEGORY_WEIGHTS}


def _issue(category: str, severity: str) -> Issue:
    return Issue(category=category, severity=severity, title="t", detail="d", url="https://x.test/")


def test_weights_sum_to_one() -> None:
    assert math.fsum(CATEGORY_WEIGHTS.values()) == 1.0


def test_overall_score_extremes() -> None:
    assert overall_score(_breakdown(100)) == 100
    assert overall_score(_breakdown(0)) == 0


def test_overall_score_is_weighted_and_rounded() -> None:
    breakdown = {
        "functionality": 90,
        "performance": 80,
        "security": 70,
        "accessibility": 60,
        "maintainability": 51,
    }
    # 27 + 20 + 17.5 + 9 + 2.55 = 76.05
    assert overall_score(breakdown) == 76


def test_overall_score_requires_every_category() -> None:
    with pytest.raises(ValueError):
        overall_score({"functionality": 100})


@pytest.mark.parametrize(
    ("score", "severity"),
    [(49, "CRITICAL"), (50, "HIGH"), (69, "HIGH"), (70, None)],
)
def test_category_risk_boundaries(score: int, severity: str | None) -> None:
    breakdown = _breakdown(100)
    breakdown["security"] = score
    report = QualityReport(overall_score=95, breakdown=breakdown)

    risks = {risk.type: risk.severity for risk in assess_risks(report).risks}

    assert risks.get("SECURITY_RISK") == severity


@pytest.mark.parametrize(("overall", "present"), [(79, True), (80, False)])
def test_overall_risk_boundary(overall: int, present: bool) -> None:
    report = QualityReport(overall_score=overall, breakdown=_breakdown(100))

    assessment = assess_risks(report)

    assert ("OVERALL_RISK" in {risk.type for risk in assessment.risks}) is present
    assert assessment.risk_level == ("HIGH" if present else "LOW")
    assert assessment.total_risks == len(assessment.risks)


def test_risk_level_is_highest_severity() -> None:
    breakdown = _breakdown(100)
    breakdown["performance"] = 40
    breakdown["accessibility"] = 60

    assessment = assess_risks(QualityReport(overall_score=85, breakdown=breakdown))

    assert assessment.risk_level == "CRITICAL"
    assert assessment.total_risks == 2


def test_recommendations_cover_exactly_categories_below_threshold() -> None:
    breakdown = {
        "functionality": 95,
        "performance": 60,
        "security": 90,
        "accessibility": 91,
        "maintainability": 100,
    }

    recommendations = generate_recommendations(breakdown, THRESHOLDS)

    assert [rec.area for rec in recommendations] == ["performance", "security", "accessibility"]
    assert [rec.priority for rec in recommendations] == [30, 8, 1]
    assert recommendations[0].timeframe.startswith("immediate")
    assert recommendations[-1].timeframe.startswith("medium-term")
    assert all(rec.actions for rec in recommendations)


def test_no_recommendations_when_all_at_threshold() -> None:
    at_threshold = {name: THRESHOLDS[name] for name in CATEGORY_WEIGHTS}

    assert generate_recommendations(at_threshold, THRESHOLDS) == []


def test_performance_score_penalises_overage() -> None:
    report = PerformanceReport(
        project="demo",
        url="https://x.test/",
        metrics=PerformanceMetrics(load_time=4500, dom_content_loaded=800, first_contentful_paint=0),
    )

    # load time is 50% over budget: (50 + 100 + 100) / 3
    assert performance_score(report, BUDGETS) == 83


def test_security_score_sums_penalties() -> None:
    scan = IssueScanReport(
        project="demo",
        url="https://x.test/",
        issues=[_issue("security", "CRITICAL"), _issue("security", "LOW"), _issue("maintainability", "HIGH")],
    )

    assert security_score(scan) == 55


def test_security_score_is_clamped() -> None:
    scan = IssueScanReport(
        project="demo",
        url="https://x.test/",
        issues=[_issue("security", "CRITICAL")] * 3,
    )

    assert security_score(scan) == 0


def test_maintainability_counts_failed_functional_tests() -> None:
    scan = IssueScanReport(project="demo", url="https://x.test/", issues=[_issue("maintainability", "MEDIUM")])
    functional = FunctionalReport(project="demo", summary=SuiteSummary(total=4, passed=2, failed=2))

    assert maintainability_score(scan, functional) == 80


def test_accessibility_score_subtracts_failed_findings() -> None:
    compliance = ComplianceReport(
        project="demo",
        url="https://x.test/",
        accessibility=SuiteResult(url="https://x.test/", suite="accessibility", quality_score=100),
        findings=[
            ComplianceFinding(rule="form-labels", passed=False, detail=""),
            ComplianceFinding(rule="viewport-meta", passed=True, detail=""),
        ],
    )

    assert accessibility_score(compliance) == 90


def test_partial_score_renormalises_weights() -> None:
    assert partial_score({"functionality": 100, "security": 60}) == 82
    assert partial_score({}) == 0


@pytest.mark.parametrize(
    ("current", "previous", "trend"),
    [(90, None, "baseline"), (90, 80, "improving"), (80, 90, "declining"), (90, 89, "stable")],
)
def test_trend(current: int, previous: int | None, trend: str) -> None:
    assert calculate_trend(current, previous) == trend
