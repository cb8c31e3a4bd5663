"""Issue scanning leg: probes a page for security and maintainability defects."""

from __future__ import annotations

import logging
from typing import Any

from ..browser import scripts
from ..browser.session import SessionProvider
from ..config import QASettings, get_settings
from ..lifecycle import ContextKey, TaskLifecycle
from ..projects import Project
from ..web import WebTester
from .models import Issue, IssueScanReport

INLINE_SCRIPT_LIMIT = 5


def classify_probe(url: str, probe: dict[str, Any], errors: list[str]) -> list[Issue]:
    """Turn raw probe counters into issues."""

    issues: list[Issue] = []

    def add(category, severity, title, detail) -> None:
        issues.append(Issue(category=category, severity=severity, title=title, detail=detail, url=url))

    if probe.get("passwordFieldsOnHttp"):
        add(
            "security",
            "CRITICAL",
            "Password field on insecure page",
            f"{probe['passwordFieldsOnHttp']} password field(s) submitted without HTTPS.",
        )
    if not probe.get("isHttps", False):
        add("security", "HIGH", "Page not served over HTTPS", "Serve the page over TLS.")
    if probe.get("insecureResources"):
        add(
            "security",
            "HIGH",
            "Mixed content",
            f"{probe['insecureResources']} resource(s) loaded over plain HTTP.",
        )
    if probe.get("unsafeBlankTargets"):
        add(
            "security",
            "LOW",
            "target=_blank without rel=noopener",
            f"{probe['unsafeBlankTargets']} link(s) expose window.opener.",
        )
    if errors:
        add("maintainability", "MEDIUM", "Console errors", f"{len(errors)} console error(s) on load.")
    if probe.get("deprecatedElements"):
        add(
            "maintainability",
            "MEDIUM",
            "Deprecated HTML elements",
            f"{probe['deprecatedElements']} deprecated element(s) in markup.",
        )
    if probe.get("inlineScripts", 0) > INLINE_SCRIPT_LIMIT:
        add(
            "maintainability",
            "LOW",
            "Excessive inline scripts",
            f"{probe['inlineScripts']} inline script blocks.",
        )
    if not probe.get("hasLang", True):
        add("maintainability", "LOW", "Missing document language", "Set the lang attribute on <html>.")
    return issues


class BugHunterAgent:
    """Scans the project's entry page for defects."""

    def __init__(self, session_provider: SessionProvider, *, settings: QASettings | None = None) -> None:
        self.settings = settings or get_settings()
        self.lifecycle = TaskLifecycle("BugHunter", log_level=self.settings.log_level)
        self.tester = WebTester(session_provider, settings=self.settings, name="BugHunter.WebTester")

    async def scan_for_issues(self, project: Project) -> IssueScanReport:
        return await self.lifecycle.execute("scanForIssues", self._scan, project, False)

    async def quick_scan(self, project: Project) -> IssueScanReport:
        return await self.lifecycle.execute("quickScan", self._scan, project, True)

    async def _scan(self, project: Project, security_only: bool) -> IssueScanReport:
        self.lifecycle.set_context(ContextKey.PROJECT, project.id)
        inspection = await self.tester.inspect_page(project.url, scripts.SECURITY_PROBE)
        probe = inspection.probe or {}
        errors = inspection.console_errors
        issues = classify_probe(project.url, probe, errors)
        if security_only:
            issues = [issue for issue in issues if issue.category == "security"]
        self.lifecycle.log(
            logging.INFO, f"Issue scan found {len(issues)} issue(s) for {project.name}"
        )
        return IssueScanReport(
            project=project.name,
            url=project.url,
            issues=issues,
            probe=dict(probe),
            console_errors=errors[:5],
        )

    async def cleanup(self) -> None:
        await self.tester.cleanup()
        self.lifecycle.cleanup()


__all__ = ["BugHunterAgent", "classify_probe"]
