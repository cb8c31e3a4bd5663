"""Compliance leg: accessibility suite plus document-level conformance probes."""

from __future__ import annotations

import logging
from typing import Any

from ..browser import scripts
from ..browser.session import SessionProvider
from ..config import QASettings, get_settings
from ..lifecycle import ContextKey, TaskLifecycle
from ..projects import Project
from ..web import WebTester
from .models import ComplianceFinding, ComplianceReport


def evaluate_findings(probe: dict[str, Any]) -> list[ComplianceFinding]:
    fields = int(probe.get("formFields", 0) or 0)
    labelled = int(probe.get("labelledFields", 0) or 0)
    lang = probe.get("lang") or ""
    return [
        ComplianceFinding(
            rule="document-language",
            passed=bool(lang),
            detail=f"lang={lang}" if lang else "The <html> element declares no language",
        ),
        ComplianceFinding(
            rule="form-labels",
            passed=labelled >= fields,
            detail=f"{labelled}/{fields} form fields are labelled",
        ),
        ComplianceFinding(
            rule="viewport-meta",
            passed=bool(probe.get("hasViewportMeta")),
            detail="Responsive viewport meta tag "
            + ("present" if probe.get("hasViewportMeta") else "missing"),
        ),
    ]


class ComplianceGuardianAgent:
    """Checks accessibility and conformance of the project's entry page."""

    def __init__(self, session_provider: SessionProvider, *, settings: QASettings | None = None) -> None:
        self.settings = settings or get_settings()
        self.lifecycle = TaskLifecycle("ComplianceGuardian", log_level=self.settings.log_level)
        self.tester = WebTester(
            session_provider, settings=self.settings, name="ComplianceGuardian.WebTester"
        )

    async def check_compliance(self, project: Project) -> ComplianceReport:
        return await self.lifecycle.execute("checkCompliance", self._check, project)

    async def _check(self, project: Project) -> ComplianceReport:
        self.lifecycle.set_context(ContextKey.PROJECT, project.id)
        suite = await self.tester.run_suite(project.url, "accessibility")
        probe = await self.tester.evaluate_probe(project.url, scripts.COMPLIANCE_PROBE)
        findings = evaluate_findings(probe or {})
        failed = [finding.rule for finding in findings if not finding.passed]
        self.lifecycle.log(
            logging.INFO,
            f"Compliance checked for {project.name}",
            accessibility_score=suite.quality_score,
            failed_rules=failed,
        )
        return ComplianceReport(
            project=project.name, url=project.url, accessibility=suite, findings=findings
        )

    async def cleanup(self) -> None:
        await self.tester.cleanup()
        self.lifecycle.cleanup()


__all__ = ["ComplianceGuardianAgent", "evaluate_findings"]
