"""Agent.QA diagnostics CLI."""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
from pathlib import Path

from agent_qa.browser.playwright_provider import PlaywrightSessionProvider
from agent_qa.browser.session import SessionProvider
from agent_qa.config import QASettings
from agent_qa.errors import AgentQAError
from agent_qa.projects import Project, ProjectLoader
from agent_qa.quality import QualityInspector
from agent_qa.web import WebTester


def make_provider(settings: QASettings) -> SessionProvider:
    return PlaywrightSessionProvider()


def _print(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


async def _with_tester(settings: QASettings, action):
    tester = WebTester(make_provider(settings), settings=settings)
    try:
        return await action(tester)
    finally:
        await tester.cleanup()


def cmd_test(args: argparse.Namespace) -> None:
    settings = QASettings()
    result = asyncio.run(
        _with_tester(settings, lambda tester: tester.run_suite(args.url, args.suite))
    )
    if args.json:
        _print(result.model_dump(mode="json"))
        return
    for test in result.tests:
        print(f"[{test.status}] {test.name}: {test.message}")
    print(
        f"{result.summary.passed}/{result.summary.total} passed, "
        f"quality score {result.quality_score}"
    )


def cmd_screenshot(args: argparse.Namespace) -> None:
    settings = QASettings()
    options = {"full_page": args.full_page, "type": args.type}
    result = asyncio.run(
        _with_tester(settings, lambda tester: tester.capture_screenshot(args.url, options))
    )
    output = Path(args.output)
    output.write_bytes(base64.b64decode(result.screenshot))
    print(f"Saved {result.size} bytes to {output}")


def cmd_performance(args: argparse.Namespace) -> None:
    settings = QASettings()
    result = asyncio.run(
        _with_tester(settings, lambda tester: tester.collect_performance_metrics(args.url))
    )
    _print(result.model_dump(mode="json"))


def _resolve_project(args: argparse.Namespace, settings: QASettings) -> Project:
    if args.url:
        return Project(id=args.project or "adhoc", name=args.project or args.url, url=args.url)
    if not args.project:
        print("Provide a project id or --url")
        raise SystemExit(2)
    return ProjectLoader(settings.project_paths).get(args.project)


def cmd_assess(args: argparse.Namespace) -> None:
    settings = QASettings()
    try:
        project = _resolve_project(args, settings)
    except AgentQAError as exc:
        print(f"Project unavailable: {exc}")
        raise SystemExit(1)

    async def _run():
        inspector = QualityInspector(make_provider(settings), settings=settings)
        try:
            return await inspector.assess(project)
        finally:
            await inspector.cleanup()

    try:
        assessment = asyncio.run(_run())
    except AgentQAError as exc:
        print(f"Assessment failed: {exc}")
        raise SystemExit(1)

    if args.json:
        _print(assessment.model_dump(mode="json"))
        return
    print(f"{project.name}: {assessment.quality_score}/100 ({assessment.report.trend})")
    for area, score in assessment.breakdown.items():
        print(f"  {area:<16}{score:>4}")
    print(f"Risk level: {assessment.risk_assessment.risk_level}")
    for rec in assessment.recommendations:
        print(f"  - {rec.area}: {rec.current_score} -> {rec.target_score:g} ({rec.timeframe})")


def cmd_status(args: argparse.Namespace) -> None:
    settings = QASettings()
    try:
        projects = ProjectLoader(settings.project_paths).load_all()
        project_error = None
    except AgentQAError as exc:
        projects = {}
        project_error = str(exc)
    _print(
        {
            "log_level": settings.log_level,
            "headless": settings.headless,
            "ai_provider": settings.ai_provider,
            "monitoring_interval": settings.monitoring_interval,
            "thresholds": settings.thresholds,
            "performance_budgets": settings.performance_budgets,
            "project_paths": [str(path) for path in settings.project_paths],
            "projects": sorted(projects),
            "project_error": project_error,
        }
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Agent.QA diagnostics")
    sub = parser.add_subparsers(dest="cmd")

    p_test = sub.add_parser("test", help="Run a test suite against a URL")
    p_test.add_argument("url")
    p_test.add_argument("--suite", default="basic")
    p_test.add_argument("--json", action="store_true", help="Output JSON")
    p_test.set_defaults(func=cmd_test)

    p_shot = sub.add_parser("screenshot", help="Capture a screenshot of a URL")
    p_shot.add_argument("url")
    p_shot.add_argument("--output", default="screenshot.png")
    p_shot.add_argument("--full-page", action="store_true")
    p_shot.add_argument("--type", choices=("png", "jpeg"), default="png")
    p_shot.set_defaults(func=cmd_screenshot)

    p_perf = sub.add_parser("performance", help="Collect navigation timing metrics")
    p_perf.add_argument("url")
    p_perf.set_defaults(func=cmd_performance)

    p_assess = sub.add_parser("assess", help="Run a full quality assessment")
    p_assess.add_argument("project", nargs="?", help="Project id from the project paths")
    p_assess.add_argument("--url", help="Assess an ad-hoc URL instead of a stored project")
    p_assess.add_argument("--json", action="store_true", help="Output JSON")
    p_assess.set_defaults(func=cmd_assess)

    p_status = sub.add_parser("status", help="Show effective settings and known projects")
    p_status.set_defaults(func=cmd_status)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
