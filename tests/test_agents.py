from __future__ import annotations

import asyncio

from agent_qa.agents import (
    BugHunterAgent,
    ComplianceGuardianAgent,
    PerformanceAnalystAgent,
    TestAutomationAgent,
)
from agent_qa.agents.compliance import evaluate_findings
from agent_qa.agents.issues import classify_probe
from agent_qa.browser import ConsoleMessage, FakeSessionProvider, scripts
from agent_qa.config import QASettings
from agent_qa.projects import Project, TestPlan

SITE = "https://example.com/"
ABOUT = "https://example.com/about"


def _project(**kwargs) -> Project:
    return Project(id="demo", name="Demo", url=SITE, **kwargs)


def _run_and_cleanup(agent, coro):
    async def _go():
        try:
            return await coro
        finally:
            await agent.cleanup()

    return asyncio.run(_go())


def test_functional_agent_runs_every_suite_for_every_target(make_page, settings) -> None:
    provider = FakeSessionProvider({SITE: make_page(), ABOUT: make_page()})
    agent = TestAutomationAgent(provider, settings=settings)
    plan = TestPlan(
        project_type="web_app",
        complexity="medium",
        priority="medium",
        suites=["basic", "accessibility"],
        targets=[SITE, ABOUT],
    )

    report = _run_and_cleanup(agent, agent.run_automated_tests(_project(pages=[ABOUT]), plan))

    assert [(suite.url, suite.suite) for suite in report.suites] == [
        (SITE, "basic"),
        (SITE, "accessibility"),
        (ABOUT, "basic"),
        (ABOUT, "accessibility"),
    ]
    assert report.summary.total == 12
    assert report.quality_score == 100
    assert report.failed_tests == []


def test_critical_tests_run_basic_only(provider, settings) -> None:
    agent = TestAutomationAgent(provider, settings=settings)

    report = _run_and_cleanup(agent, agent.run_critical_tests(_project()))

    assert [suite.suite for suite in report.suites] == ["basic"]


def test_classify_probe_flags_insecure_page() -> None:
    probe = {
        "isHttps": False,
        "insecureResources": 0,
        "passwordFieldsOnHttp": 1,
        "unsafeBlankTargets": 2,
        "inlineScripts": 9,
        "deprecatedElements": 1,
        "hasLang": False,
    }

    issues = classify_probe("http://example.com/", probe, ["TypeError: x is undefined"])

    security = {(issue.title, issue.severity) for issue in issues if issue.category == "security"}
    assert security == {
        ("Password field on insecure page", "CRITICAL"),
        ("Page not served over HTTPS", "HIGH"),
        ("target=_blank without rel=noopener", "LOW"),
    }
    maintainability = [issue.severity for issue in issues if issue.category == "maintainability"]
    assert sorted(maintainability) == ["LOW", "LOW", "MEDIUM", "MEDIUM"]


def test_bug_hunter_scan_collects_console_errors(make_page, settings) -> None:
    page = make_page(console_messages=[ConsoleMessage("error", "Uncaught ReferenceError")])
    agent = BugHunterAgent(FakeSessionProvider({SITE: page}), settings=settings)

    report = _run_and_cleanup(agent, agent.scan_for_issues(_project()))

    assert report.console_errors == ["Uncaught ReferenceError"]
    assert [issue.title for issue in report.by_category("maintainability")] == ["Console errors"]
    assert report.by_category("security") == []


def test_quick_scan_reports_security_only(make_page, settings) -> None:
    page = make_page(
        evaluations={
            scripts.SECURITY_PROBE: {
                "isHttps": True,
                "insecureResources": 3,
                "deprecatedElements": 4,
                "hasLang": True,
            }
        }
    )
    agent = BugHunterAgent(FakeSessionProvider({SITE: page}), settings=settings)

    report = _run_and_cleanup(agent, agent.quick_scan(_project()))

    assert [issue.title for issue in report.issues] == ["Mixed content"]


def test_performance_agent_flags_metrics_over_budget(make_page, settings) -> None:
    page = make_page(
        evaluations={
            scripts.PERFORMANCE_METRICS: {
                "loadTime": 4500,
                "domContentLoaded": 800,
                "firstPaint": 300,
                "firstContentfulPaint": 2000,
            }
        }
    )
    agent = PerformanceAnalystAgent(FakeSessionProvider({SITE: page}), settings=settings)

    report = _run_and_cleanup(agent, agent.analyze_performance(_project()))

    assert report.metrics.load_time == 4500
    assert report.over_budget == ["load_time", "first_contentful_paint"]
    assert report.budgets["load_time"] == 3000
    assert len(report.samples) == 1


def test_evaluate_findings_checks_labels_language_and_viewport() -> None:
    findings = evaluate_findings(
        {"lang": "", "formFields": 3, "labelledFields": 1, "hasViewportMeta": True}
    )

    assert {finding.rule: finding.passed for finding in findings} == {
        "document-language": False,
        "form-labels": False,
        "viewport-meta": True,
    }


def test_compliance_agent_combines_suite_and_findings(provider, settings) -> None:
    agent = ComplianceGuardianAgent(provider, settings=settings)

    report = _run_and_cleanup(agent, agent.check_compliance(_project()))

    assert report.accessibility.suite == "accessibility"
    assert report.accessibility.quality_score == 100
    assert report.failed_findings == []
    # The suite and the compliance probe each load the page.
    assert provider.sessions[0].navigations == [SITE, SITE]


def test_bug_hunter_observes_console_after_load(make_page, tmp_path) -> None:
    settings = QASettings(
        _env_file=None, console_observation_window=0.1, project_paths=[str(tmp_path)]
    )
    page = make_page(late_console_messages=[ConsoleMessage("error", "Deferred script failed")])
    agent = BugHunterAgent(FakeSessionProvider({SITE: page}), settings=settings)

    report = _run_and_cleanup(agent, agent.scan_for_issues(_project()))

    assert report.console_errors == ["Deferred script failed"]
    assert [issue.title for issue in report.by_category("maintainability")] == ["Console errors"]
