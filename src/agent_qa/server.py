"""FastMCP server bootstrap for Agent.QA."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fastmcp import FastMCP

from . import __version__
from .browser.playwright_provider import PlaywrightSessionProvider
from .browser.session import SessionProvider
from .config import QASettings, get_settings
from .errors import ProjectLoadError
from .integrations import NotificationTransport, TrendPredictor
from .projects import ProjectLoader
from .quality import QualityInspector
from .tools import register_tools
from .web import WebTester


def configure_logging(level: str) -> None:
    """Configure root logging for the Agent.QA server."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def create_server(
    settings: Optional[QASettings] = None,
    session_provider: SessionProvider | None = None,
    notifier: NotificationTransport | None = None,
    trend_predictor: TrendPredictor | None = None,
) -> FastMCP:
    """Instantiate the FastMCP server with the quality tools and status resource."""

    settings = settings or get_settings()
    session_provider = session_provider or PlaywrightSessionProvider()

    project_loader = ProjectLoader(settings.project_paths)
    tester = WebTester(session_provider, settings=settings)
    inspector = QualityInspector(
        session_provider,
        settings=settings,
        notifier=notifier,
        trend_predictor=trend_predictor,
    )

    server = FastMCP(
        name="Agent.QA",
        instructions=(
            "Agent.QA assesses web properties with functional, security, performance and "
            "accessibility checks and aggregates them into a weighted quality score with "
            "ranked recommendations. Use the tools to run suites, assess projects and "
            "manage monitoring loops."
        ),
    )

    handles = register_tools(
        server,
        inspector=inspector,
        tester=tester,
        projects=project_loader,
        settings=settings,
    )

    def status_payload() -> dict:
        try:
            project_ids = sorted(project_loader.load_all())
            project_error: str | None = None
        except ProjectLoadError as exc:
            project_ids = []
            project_error = str(exc)

        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_version": __version__,
            "log_level": settings.log_level,
            "provider": type(session_provider).__name__,
            "projects": {"count": len(project_ids), "ids": project_ids, "error": project_error},
            "thresholds": settings.thresholds,
            "tester": tester.lifecycle.status_snapshot(),
            "quality": inspector.status(),
            "recent_assessments": handles.assessments[-5:],
        }

    @server.resource(
        "resource://agent-qa/status",
        name="agent_qa_status",
        description="Current runtime status of the Agent.QA units and monitors.",
        mime_type="application/json",
    )
    def status_resource() -> str:
        """Return a JSON string summarizing runtime state."""

        return json.dumps(status_payload(), default=str)

    setattr(server, "project_loader", project_loader)
    setattr(server, "tester", tester)
    setattr(server, "inspector", inspector)
    setattr(server, "tool_handles", handles)
    setattr(server, "status_payload", status_payload)
    return server


def main() -> None:
    """Entry point for running the Agent.QA MCP server via CLI."""

    settings = get_settings()
    configure_logging(settings.log_level)

    server = create_server(settings)
    logging.getLogger(__name__).info(
        "Launching Agent.QA MCP server",
        extra={"version": __version__, "log_level": settings.log_level},
    )
    server.run()


if __name__ == "__main__":
    main()
