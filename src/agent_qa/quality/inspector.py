"""Quality aggregation orchestrator.

:class:`QualityInspector` owns the four checking units, fans an assessment out
to them concurrently and folds their raw reports into a weighted quality
report, ranked recommendations and a risk assessment. It also drives the
periodic monitoring loop and the alert path.
"""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Mapping

from ..agents import (
    BugHunterAgent,
    ComplianceGuardianAgent,
    PerformanceAnalystAgent,
    TestAutomationAgent,
)
from ..ai import AIProvider, build_ai_provider
from ..browser.session import SessionProvider
from ..config import QASettings, get_settings
from ..errors import AggregationError, ConfigurationError
from ..integrations import LoggingNotifier, NotificationTransport, TrendPredictor
from ..lifecycle import ContextKey, TaskLifecycle
from ..projects import Project, TestPlan
from .models import Assessment, LegResults, QualityReport, QuickReport, TrendPrediction
from .monitoring import MonitoringHandle, MonitorState
from .planning import build_test_plan
from .scoring import (
    assess_risks,
    build_quality_report,
    compute_breakdown,
    functionality_score,
    generate_recommendations,
    partial_score,
    performance_score,
    security_score,
)

ALERT_TYPE = "QUALITY_DEGRADATION"
URGENT_SEVERITIES = frozenset({"CRITICAL", "HIGH"})

_TIMEFRAME = re.compile(r"^\s*(\d+)\s*([dhm])\s*$")
_TIMEFRAME_UNITS = {"d": "days", "h": "hours", "m": "minutes"}


def parse_timeframe(value: str) -> timedelta:
    """Parse ``30d`` / ``12h`` / ``45m`` into a :class:`timedelta`."""

    match = _TIMEFRAME.match(value)
    if not match:
        raise ValueError(f"Unsupported timeframe '{value}'; use <n>d, <n>h or <n>m")
    amount, unit = match.groups()
    return timedelta(**{_TIMEFRAME_UNITS[unit]: int(amount)})


class QualityInspector:
    """Coordinates the checking units and aggregates their results."""

    def __init__(
        self,
        session_provider: SessionProvider,
        *,
        settings: QASettings | None = None,
        notifier: NotificationTransport | None = None,
        trend_predictor: TrendPredictor | None = None,
        ai_provider: AIProvider | None = None,
        functional: TestAutomationAgent | None = None,
        bug_hunter: BugHunterAgent | None = None,
        performance: PerformanceAnalystAgent | None = None,
        compliance: ComplianceGuardianAgent | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        if ai_provider is None:
            ai_provider = build_ai_provider(
                self.settings.ai_provider,
                model=self.settings.ai_model,
                temperature=self.settings.ai_temperature,
            )
        self.lifecycle = TaskLifecycle(
            "QualityInspector", log_level=self.settings.log_level, ai_provider=ai_provider
        )
        self.functional = functional or TestAutomationAgent(session_provider, settings=self.settings)
        self.bug_hunter = bug_hunter or BugHunterAgent(session_provider, settings=self.settings)
        self.performance = performance or PerformanceAnalystAgent(
            session_provider, settings=self.settings
        )
        self.compliance = compliance or ComplianceGuardianAgent(
            session_provider, settings=self.settings
        )
        self.notifier: NotificationTransport = notifier or LoggingNotifier()
        self.trend_predictor = trend_predictor
        self.thresholds: dict[str, float] = dict(self.settings.thresholds)
        self._monitors: list[MonitoringHandle] = []
        self._history: dict[str, list[dict[str, Any]]] = {}

    # -- assessment ------------------------------------------------------

    async def assess(self, project: Project) -> Assessment:
        """Run all four legs and aggregate them. Any failing leg aborts the assessment."""

        return await self.lifecycle.execute("assessQuality", self._assess, project)

    async def _assess(self, project: Project) -> Assessment:
        self.lifecycle.set_context(ContextKey.PROJECT, project.id)
        self.lifecycle.log(logging.INFO, f"Starting quality assessment for: {project.name}")

        plan = await self.create_test_plan(project)
        legs = await self._run_legs(project, plan)

        breakdown = compute_breakdown(legs, self.settings.performance_budgets)
        report = self.generate_quality_report(breakdown)
        recommendations = generate_recommendations(breakdown, self.thresholds)
        risk_assessment = assess_risks(report)
        self._record_history(project, report.overall_score, "assessment")

        self.lifecycle.log(
            logging.INFO,
            f"Quality assessment completed: {report.overall_score}/100",
            risk_level=risk_assessment.risk_level,
            recommendations=len(recommendations),
        )
        return Assessment(
            project=project.name,
            quality_score=report.overall_score,
            breakdown=breakdown,
            report=report,
            test_plan=plan,
            recommendations=recommendations,
            risk_assessment=risk_assessment,
            detailed_results=legs,
        )

    async def create_test_plan(self, project: Project) -> TestPlan:
        return await self.lifecycle.execute("createTestPlan", self._create_test_plan, project)

    async def _create_test_plan(self, project: Project) -> TestPlan:
        plan = build_test_plan(project)
        notes = await self.lifecycle.call_ai(
            f"Review the {plan.project_type} project '{project.name}' ({plan.complexity} complexity) "
            f"and suggest focus areas for suites {', '.join(plan.suites)}."
        )
        plan = plan.model_copy(update={"analysis_notes": notes})
        self.lifecycle.set_context(ContextKey.TEST_PLAN, plan)
        self.lifecycle.log(
            logging.INFO,
            f"Test plan created for {project.name}",
            priority=plan.priority,
            suites=plan.suites,
            coverage=plan.coverage,
        )
        return plan

    async def _run_legs(self, project: Project, plan: TestPlan) -> LegResults:
        legs: dict[str, Awaitable[Any]] = {
            "functional": self.functional.run_automated_tests(project, plan),
            "issues": self.bug_hunter.scan_for_issues(project),
            "performance": self.performance.analyze_performance(project),
            "compliance": self.compliance.check_compliance(project),
        }
        outcomes = await self._settle(legs)
        failures = {name: exc for name, exc in outcomes.items() if isinstance(exc, BaseException)}
        if failures:
            first = next(iter(failures.values()))
            raise AggregationError(list(failures), str(first) or type(first).__name__) from first
        return LegResults(**outcomes)

    async def _settle(self, legs: Mapping[str, Awaitable[Any]]) -> dict[str, Any]:
        """Await every leg to completion; failures are returned in place of results."""

        results = await asyncio.gather(*legs.values(), return_exceptions=True)
        outcomes = dict(zip(legs, results))
        for name, outcome in outcomes.items():
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                self.lifecycle.log_error(f"Leg failed: {name}", outcome)
        return outcomes

    def generate_quality_report(self, breakdown: dict[str, int]) -> QualityReport:
        previous: QualityReport | None = self.lifecycle.get_context(ContextKey.LAST_REPORT)
        report = build_quality_report(
            breakdown,
            self.thresholds,
            previous.overall_score if previous is not None else None,
        )
        self.lifecycle.set_context(ContextKey.LAST_REPORT, report)
        return report

    # -- quick assessment and alerts --------------------------------------

    async def run_quick_assessment(self, project: Project) -> QuickReport:
        return await self.lifecycle.execute("quickAssessment", self._quick_assessment, project)

    async def _quick_assessment(self, project: Project) -> QuickReport:
        outcomes = await self._settle(
            {
                "functional": self.functional.run_critical_tests(project),
                "issues": self.bug_hunter.quick_scan(project),
                "performance": self.performance.quick_check(project),
            }
        )
        failed = [name for name, outcome in outcomes.items() if isinstance(outcome, BaseException)]
        if len(failed) == len(outcomes):
            first = outcomes[failed[0]]
            raise AggregationError(failed, "every quick check failed") from first

        breakdown: dict[str, int] = {}
        critical: list[str] = []
        fixes: list[str] = []

        functional = outcomes["functional"]
        if "functional" not in failed:
            breakdown["functionality"] = functionality_score(functional)
            critical.extend(f"Critical test failed: {name}" for name in functional.failed_tests)

        issues = outcomes["issues"]
        if "issues" not in failed:
            breakdown["security"] = security_score(issues)
            for issue in issues.issues:
                if issue.severity in URGENT_SEVERITIES:
                    critical.append(issue.title)
                else:
                    fixes.append(issue.detail)

        performance = outcomes["performance"]
        if "performance" not in failed:
            breakdown["performance"] = performance_score(performance, self.settings.performance_budgets)
            fixes.extend(f"Bring {metric} within budget" for metric in performance.over_budget)

        return QuickReport(
            project=project.name,
            quality_score=partial_score(breakdown),
            breakdown=breakdown,
            critical_issues=critical,
            quick_fixes=fixes,
            failed_legs=failed,
        )

    async def send_quality_alert(self, project: Project, report: QuickReport) -> dict[str, Any]:
        alert = {
            "type": ALERT_TYPE,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "project": project.name,
            "current_score": report.quality_score,
            "threshold": self.thresholds["overall"],
            "issues": list(report.critical_issues),
            "recommendations": list(report.quick_fixes),
        }
        try:
            await self.notifier.send(alert)
        except Exception as exc:
            self.lifecycle.log_error("Failed to send quality alert", exc)
        else:
            self.lifecycle.log(
                logging.WARNING,
                f"Quality alert sent for {project.name}",
                score=report.quality_score,
            )
        return alert

    # -- monitoring ------------------------------------------------------

    async def start_monitoring(
        self, project: Project, *, interval: float | None = None
    ) -> MonitoringHandle:
        """Start a background loop of quick assessments; returns its cancellation handle."""

        handle = MonitoringHandle(
            project.id,
            lambda: self._monitor_tick(project),
            interval or self.settings.monitoring_interval,
            on_error=lambda exc: self.lifecycle.log_error(
                f"Monitoring tick failed for {project.name}", exc
            ),
        )
        self._prune_monitors()
        self._monitors.append(handle.start())
        self.lifecycle.log(
            logging.INFO,
            f"Continuous monitoring started for {project.name}",
            interval_s=handle.interval,
        )
        return handle

    async def _monitor_tick(self, project: Project) -> QuickReport:
        report = await self.run_quick_assessment(project)
        self._record_history(project, report.quality_score, "monitoring")
        if report.quality_score < self.thresholds["overall"]:
            await self.send_quality_alert(project, report)
        return report

    def stop_monitoring(self, project_id: str | None = None) -> int:
        """Stop running monitors (all, or those for ``project_id``); returns how many stopped."""

        stopped = 0
        for handle in list(self._monitors):
            if project_id is not None and handle.name != project_id:
                continue
            if handle.stop():
                stopped += 1
            self._monitors.remove(handle)
        return stopped

    def _prune_monitors(self) -> None:
        # Handles can be stopped directly, bypassing stop_monitoring.
        self._monitors = [
            handle for handle in self._monitors if handle.state is not MonitorState.STOPPED
        ]

    @property
    def monitors(self) -> list[MonitoringHandle]:
        return [handle for handle in self._monitors if handle.running]

    # -- history and trends ---------------------------------------------

    def _record_history(self, project: Project, score: int, source: str) -> None:
        self._history.setdefault(project.id, []).append(
            {"timestamp": datetime.now(timezone.utc), "score": score, "source": source}
        )

    def quality_history(self, project_id: str, timeframe: str | None = None) -> list[dict[str, Any]]:
        entries = list(self._history.get(project_id, []))
        if timeframe is None:
            return entries
        cutoff = datetime.now(timezone.utc) - parse_timeframe(timeframe)
        return [entry for entry in entries if entry["timestamp"] >= cutoff]

    async def predict_quality_trends(self, project: Project, timeframe: str = "30d") -> TrendPrediction:
        if self.trend_predictor is None:
            raise ConfigurationError("No trend predictor configured")
        return await self.lifecycle.execute(
            "predictQualityTrends", self._predict_quality_trends, project, timeframe
        )

    async def _predict_quality_trends(self, project: Project, timeframe: str) -> TrendPrediction:
        history = self.quality_history(project.id, timeframe)
        series = [
            {"timestamp": entry["timestamp"].isoformat(), "score": entry["score"]}
            for entry in history
        ]
        assert self.trend_predictor is not None
        raw = await self.trend_predictor.predict_trends(series)
        return TrendPrediction(
            current_trend=str(raw.get("trend", "stable")),
            projected_score=float(raw.get("projected_score", raw.get("projectedScore", 0.0))),
            risk_factors=list(raw.get("risk_factors", raw.get("riskFactors", []))),
            recommendations=list(raw.get("recommendations", [])),
            confidence=float(raw.get("confidence", 0.0)),
            samples=len(series),
        )

    # -- status and teardown ----------------------------------------------

    def status(self) -> dict[str, Any]:
        self._prune_monitors()
        return {
            "inspector": self.lifecycle.status_snapshot(),
            "units": {
                "functional": self.functional.lifecycle.status_snapshot(),
                "issues": self.bug_hunter.lifecycle.status_snapshot(),
                "performance": self.performance.lifecycle.status_snapshot(),
                "compliance": self.compliance.lifecycle.status_snapshot(),
            },
            "monitors": [
                {"project": handle.name, "state": handle.state.value, "ticks": handle.ticks}
                for handle in self._monitors
            ],
            "history": {project_id: len(entries) for project_id, entries in self._history.items()},
        }

    async def cleanup(self) -> None:
        self.stop_monitoring()
        await asyncio.gather(
            self.functional.cleanup(),
            self.bug_hunter.cleanup(),
            self.performance.cleanup(),
            self.compliance.cleanup(),
        )
        self.lifecycle.cleanup()


__all__ = ["ALERT_TYPE", "QualityInspector", "parse_timeframe"]
