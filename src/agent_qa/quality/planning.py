"""Project classification and test-plan derivation."""

from __future__ import annotations

import math

from ..projects import Complexity, Priority, Project, ProjectType, TestPlan

ECOMMERCE_FEATURES = frozenset({"payment", "payments", "checkout", "cart", "shop", "store"})
WEB_APP_FEATURES = frozenset({"login", "auth", "authentication", "account", "dashboard", "signup"})

BASE_COVERAGE: dict[Complexity, int] = {"low": 70, "medium": 80, "high": 90}
CRITICAL_COVERAGE_BONUS = 5

TIMELINE_DAYS: dict[Complexity, int] = {"low": 2, "medium": 5, "high": 10}
TEAM_SIZE: dict[Priority, int] = {"critical": 4, "high": 3, "medium": 2, "low": 1}


def detect_project_type(project: Project) -> ProjectType:
    if project.type is not None:
        return project.type
    features = {feature.strip().lower() for feature in project.features}
    if features & ECOMMERCE_FEATURES:
        return "ecommerce"
    if features & WEB_APP_FEATURES:
        return "web_app"
    return "website"


def assess_complexity(project: Project) -> Complexity:
    score = len(project.pages) + 2 * len(project.features) + len(project.dependencies)
    if score < 5:
        return "low"
    if score < 12:
        return "medium"
    return "high"


def determine_priority(project_type: ProjectType, complexity: Complexity) -> Priority:
    if project_type == "ecommerce" and complexity == "high":
        return "critical"
    if project_type == "ecommerce" or complexity == "high":
        return "high"
    if complexity == "medium":
        return "medium"
    return "low"


def select_suites(project_type: ProjectType, complexity: Complexity) -> list[str]:
    suites = ["basic"]
    if project_type != "website" or complexity != "low":
        suites.append("accessibility")
    return suites


def coverage_target(complexity: Complexity, priority: Priority) -> int:
    bonus = CRITICAL_COVERAGE_BONUS if priority == "critical" else 0
    return min(100, BASE_COVERAGE[complexity] + bonus)


def select_targets(project: Project, coverage: int) -> list[str]:
    """Entry URL first, then enough extra pages to meet the coverage target."""

    count = math.ceil(len(project.pages) * coverage / 100)
    targets = [project.url]
    for page in project.pages[:count]:
        if page not in targets:
            targets.append(page)
    return targets


def build_timeline(complexity: Complexity, suites: list[str]) -> dict[str, object]:
    days = TIMELINE_DAYS[complexity]
    return {
        "total_days": days,
        "phases": [
            {"name": "planning", "days": 1},
            {"name": "execution", "days": max(1, days - 2), "suites": list(suites)},
            {"name": "reporting", "days": 1},
        ],
    }


def allocate_resources(priority: Priority, suites: list[str]) -> dict[str, object]:
    return {
        "team_size": TEAM_SIZE[priority],
        "units": ["TestAutomation", "BugHunter", "PerformanceAnalyst", "ComplianceGuardian"],
        "browser_sessions": len(suites),
    }


def build_test_plan(project: Project, *, analysis_notes: str = "") -> TestPlan:
    project_type = detect_project_type(project)
    complexity = assess_complexity(project)
    priority = determine_priority(project_type, complexity)
    suites = select_suites(project_type, complexity)
    coverage = coverage_target(complexity, priority)
    return TestPlan(
        project_type=project_type,
        complexity=complexity,
        priority=priority,
        suites=suites,
        targets=select_targets(project, coverage),
        coverage=coverage,
        timeline=build_timeline(complexity, suites),
        resources=allocate_resources(priority, suites),
        analysis_notes=analysis_notes,
    )


__all__ = [
    "assess_complexity",
    "build_test_plan",
    "coverage_target",
    "detect_project_type",
    "determine_priority",
    "select_suites",
    "select_targets",
]
