"""Performance analysis leg: navigation timing against budgets."""

from __future__ import annotations

import logging
from statistics import fmean

from ..browser.session import SessionProvider
from ..config import QASettings, get_settings
from ..lifecycle import ContextKey, TaskLifecycle
from ..projects import Project
from ..web import WebTester
from ..web.models import PerformanceMetrics
from .models import PerformanceReport

BUDGETED_METRICS = ("load_time", "dom_content_loaded", "first_contentful_paint")


class PerformanceAnalystAgent:
    def __init__(self, session_provider: SessionProvider, *, settings: QASettings | None = None) -> None:
        self.settings = settings or get_settings()
        self.lifecycle = TaskLifecycle("PerformanceAnalyst", log_level=self.settings.log_level)
        self.tester = WebTester(
            session_provider, settings=self.settings, name="PerformanceAnalyst.WebTester"
        )

    async def analyze_performance(self, project: Project) -> PerformanceReport:
        return await self.lifecycle.execute(
            "analyzePerformance", self._analyze, project, self.settings.performance_samples
        )

    async def quick_check(self, project: Project) -> PerformanceReport:
        return await self.lifecycle.execute("quickCheck", self._analyze, project, 1)

    async def _analyze(self, project: Project, samples: int) -> PerformanceReport:
        self.lifecycle.set_context(ContextKey.PROJECT, project.id)
        collected: list[PerformanceMetrics] = []
        for _ in range(samples):
            result = await self.tester.collect_performance_metrics(project.url)
            collected.append(result.metrics)

        averaged = PerformanceMetrics(
            **{
                name: fmean(getattr(sample, name) for sample in collected)
                for name in PerformanceMetrics.model_fields
            }
        )
        budgets = self.settings.performance_budgets
        over_budget = [
            name for name in BUDGETED_METRICS if getattr(averaged, name) > budgets[name]
        ]
        self.lifecycle.log(
            logging.INFO,
            f"Performance analysed for {project.name}",
            load_time_ms=averaged.load_time,
            over_budget=over_budget,
        )
        return PerformanceReport(
            project=project.name,
            url=project.url,
            samples=collected,
            metrics=averaged,
            budgets=budgets,
            over_budget=over_budget,
        )

    async def cleanup(self) -> None:
        await self.tester.cleanup()
        self.lifecycle.cleanup()


__all__ = ["BUDGETED_METRICS", "PerformanceAnalystAgent"]
