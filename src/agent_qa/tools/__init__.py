"""Tool registration for the Agent.QA MCP server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from fastmcp import Context, FastMCP

from ..config import QASettings
from ..projects import Project, ProjectLoader
from ..quality import QualityInspector
from ..web import WebTester

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ToolHandles:
    run_suite: Any
    capture_screenshot: Any
    collect_performance_metrics: Any
    assess_quality: Any
    start_monitoring: Any
    stop_monitoring: Any
    list_projects: Any
    assessments: list[dict[str, Any]]


def register_tools(
    server: FastMCP,
    *,
    inspector: QualityInspector,
    tester: WebTester,
    projects: ProjectLoader,
    settings: QASettings,
) -> ToolHandles:
    """Register Agent.QA's MCP tools on the server."""

    assessments: list[dict[str, Any]] = []

    def _resolve_project(project_id: str | None, project: dict[str, Any] | None) -> Project:
        if project is not None:
            return Project.model_validate(project)
        if project_id:
            return projects.get(project_id)
        raise ValueError("Provide either project_id or an inline project definition")

    async def _run_suite(
        url: str,
        suite: str = "basic",
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Run a named test suite against a URL."""

        result = await tester.run_suite(url, suite)
        _emit_log(
            context,
            "info",
            "Suite finished",
            extra={"url": url, "suite": result.suite, "quality_score": result.quality_score},
        )
        return result.model_dump(mode="json")

    async def _capture_screenshot(
        url: str,
        full_page: bool = False,
        image_type: Literal["png", "jpeg"] = "png",
        context: Context | None = None,
    ) -> dict[str, Any]:
        result = await tester.capture_screenshot(
            url, {"full_page": full_page, "type": image_type}
        )
        _emit_log(context, "info", "Screenshot captured", extra={"url": url, "size": result.size})
        return result.model_dump(mode="json")

    async def _collect_performance_metrics(
        url: str,
        context: Context | None = None,
    ) -> dict[str, Any]:
        result = await tester.collect_performance_metrics(url)
        _emit_log(context, "info", "Performance metrics collected", extra={"url": url})
        return result.model_dump(mode="json")

    async def _assess_quality(
        project_id: str | None = None,
        project: dict[str, Any] | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Run the full four-leg assessment for a project."""

        target = _resolve_project(project_id, project)
        assessment = await inspector.assess(target)
        summary = {
            "project": target.id,
            "quality_score": assessment.quality_score,
            "risk_level": assessment.risk_assessment.risk_level,
            "timestamp": assessment.timestamp.isoformat(),
        }
        assessments.append(summary)
        _emit_log(context, "info", "Assessment completed", extra=summary)
        return assessment.model_dump(mode="json")

    async def _start_monitoring(
        project_id: str | None = None,
        project: dict[str, Any] | None = None,
        interval_seconds: float | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        target = _resolve_project(project_id, project)
        handle = await inspector.start_monitoring(target, interval=interval_seconds)
        _emit_log(
            context,
            "info",
            "Monitoring started",
            extra={"project": target.id, "interval": handle.interval},
        )
        return {"project": target.id, "state": handle.state.value, "interval": handle.interval}

    def _stop_monitoring(
        project_id: str | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        stopped = inspector.stop_monitoring(project_id)
        _emit_log(context, "info", "Monitoring stopped", extra={"project": project_id, "stopped": stopped})
        return {"project": project_id, "stopped": stopped}

    def _list_projects() -> list[dict[str, Any]]:
        return [
            {"id": item.id, "name": item.name, "url": item.url, "type": item.type}
            for item in projects.load_all().values()
        ]

    tool_run_suite = server.tool(
        name="run_suite",
        description=(
            "Run a website test suite (basic or accessibility) against a URL and return "
            "per-test results, a summary and a quality score."
        ),
    )(_run_suite)

    tool_screenshot = server.tool(
        name="capture_screenshot",
        description="Capture a base64-encoded screenshot of a URL.",
    )(_capture_screenshot)

    tool_performance = server.tool(
        name="collect_performance_metrics",
        description="Collect navigation timing metrics (load, DOMContentLoaded, paint) for a URL.",
    )(_collect_performance_metrics)

    tool_assess = server.tool(
        name="assess_quality",
        description=(
            "Assess a project across functionality, performance, security, accessibility "
            "and maintainability. Returns scores, ranked recommendations and risks."
        ),
        annotations={
            "safety": {
                "level": "caution",
                "notes": f"Opens up to four browser sessions; navigation timeout {settings.navigation_timeout:g}s",
            }
        },
    )(_assess_quality)

    tool_start_monitoring = server.tool(
        name="start_monitoring",
        description="Start periodic quick assessments for a project with alerts below the overall threshold.",
    )(_start_monitoring)

    tool_stop_monitoring = server.tool(
        name="stop_monitoring",
        description="Stop monitoring loops for one project, or all projects when no id is given.",
    )(_stop_monitoring)

    tool_list_projects = server.tool(
        name="list_projects",
        description="List project descriptors available from the configured project paths.",
    )(_list_projects)

    return ToolHandles(
        run_suite=tool_run_suite,
        capture_screenshot=tool_screenshot,
        collect_performance_metrics=tool_performance,
        assess_quality=tool_assess,
        start_monitoring=tool_start_monitoring,
        stop_monitoring=tool_stop_monitoring,
        list_projects=tool_list_projects,
        assessments=assessments,
    )


__all__ = ["register_tools", "ToolHandles"]


def _emit_log(
    context: Context | None,
    level: str,
    message: str,
    *,
    extra: dict[str, Any] | None = None,
) -> None:
    """Prefer the MCP context logger; fall back to the module logger."""

    payload = extra or {}

    if context is not None:
        ctx_logger = getattr(context, "logger", None)
        if ctx_logger is not None:
            log_method = getattr(ctx_logger, level, None)
            if callable(log_method):
                log_method(message, extra=payload)
                return

    fallback = getattr(logger, level, logger.info)
    fallback(message, extra=payload)
