from __future__ import annotations

import pytest

from agent_qa.projects import Project
from agent_qa.quality import build_test_plan
from agent_qa.quality.planning import (
    assess_complexity,
    coverage_target,
    detect_project_type,
    determine_priority,
)

SITE = "https://shop.example.com/"


def _project(**kwargs) -> Project:
    return Project(id="shop", name="Shop", url=SITE, **kwargs)


@pytest.mark.parametrize(
    ("features", "expected"),
    [
        (["Checkout", "search"], "ecommerce"),
        (["login", "reports"], "web_app"),
        (["blog"], "website"),
        ([], "website"),
    ],
)
def test_detect_project_type_from_features(features: list[str], expected: str) -> None:
    assert detect_project_type(_project(features=features)) == expected


def test_explicit_type_wins() -> None:
    assert detect_project_type(_project(type="web_app", features=["cart"])) == "web_app"


def test_complexity_bands() -> None:
    assert assess_complexity(_project(pages=["a", "b"])) == "low"
    assert assess_complexity(_project(features=["a", "b", "c"])) == "medium"
    assert assess_complexity(_project(features=list("abcdef"))) == "high"


@pytest.mark.parametrize(
    ("project_type", "complexity", "priority"),
    [
        ("ecommerce", "high", "critical"),
        ("ecommerce", "low", "high"),
        ("website", "high", "high"),
        ("web_app", "medium", "medium"),
        ("website", "low", "low"),
    ],
)
def test_priority_matrix(project_type: str, complexity: str, priority: str) -> None:
    assert determine_priority(project_type, complexity) == priority


def test_coverage_bonus_is_capped() -> None:
    assert coverage_target("low", "low") == 70
    assert coverage_target("high", "critical") == 95


def test_simple_website_plan() -> None:
    plan = build_test_plan(_project())

    assert plan.project_type == "website"
    assert plan.complexity == "low"
    assert plan.priority == "low"
    assert plan.suites == ["basic"]
    assert plan.targets == [SITE]
    assert plan.coverage == 70


def test_ecommerce_plan_covers_pages_and_accessibility() -> None:
    pages = [f"{SITE}p{index}" for index in range(4)]
    project = _project(pages=pages, features=["cart", "checkout", "search", "reviews"], dependencies=["stripe"])

    plan = build_test_plan(project, analysis_notes="notes")

    assert plan.project_type == "ecommerce"
    assert plan.complexity == "high"
    assert plan.priority == "critical"
    assert plan.suites == ["basic", "accessibility"]
    assert plan.coverage == 95
    assert plan.targets == [SITE, *pages]
    assert plan.timeline["total_days"] == 10
    assert plan.resources["team_size"] == 4
    assert plan.analysis_notes == "notes"
