"""Functional test leg: drives website test suites for a project."""

from __future__ import annotations

import logging

from ..browser.session import SessionProvider
from ..config import QASettings, get_settings
from ..lifecycle import ContextKey, TaskLifecycle
from ..projects import Project, TestPlan
from ..web import WebTester
from ..web.models import SuiteSummary
from .models import FunctionalReport

CRITICAL_SUITES = ("basic",)


class TestAutomationAgent:
    """Runs the suites a test plan selects, across the plan's target pages."""

    __test__ = False

    def __init__(self, session_provider: SessionProvider, *, settings: QASettings | None = None) -> None:
        self.settings = settings or get_settings()
        self.lifecycle = TaskLifecycle("TestAutomation", log_level=self.settings.log_level)
        self.tester = WebTester(session_provider, settings=self.settings, name="TestAutomation.WebTester")

    async def run_automated_tests(self, project: Project, plan: TestPlan) -> FunctionalReport:
        return await self.lifecycle.execute(
            "runAutomatedTests", self._run, project, plan.targets or [project.url], plan.suites
        )

    async def run_critical_tests(self, project: Project) -> FunctionalReport:
        return await self.lifecycle.execute(
            "runCriticalTests", self._run, project, [project.url], list(CRITICAL_SUITES)
        )

    async def _run(self, project: Project, targets: list[str], suites: list[str]) -> FunctionalReport:
        self.lifecycle.set_context(ContextKey.PROJECT, project.id)
        report = FunctionalReport(project=project.name)
        combined = SuiteSummary()
        for url in targets:
            for suite_name in suites:
                result = await self.tester.run_suite(url, suite_name)
                report.suites.append(result)
                for test in result.tests:
                    combined.record(test.status)
        report.summary = combined
        report.quality_score = combined.quality_score
        self.lifecycle.log(
            logging.INFO,
            f"Functional tests finished for {project.name}",
            passed=combined.passed,
            total=combined.total,
        )
        return report

    async def cleanup(self) -> None:
        await self.tester.cleanup()
        self.lifecycle.cleanup()


__all__ = ["CRITICAL_SUITES", "TestAutomationAgent"]
