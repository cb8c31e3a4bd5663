from __future__ import annotations

from typing import Any, Callable

import pytest

from agent_qa.browser import FakePage, FakeSessionProvider, scripts
from agent_qa.config import QASettings

SITE = "https://example.com/"


def _healthy_evaluations() -> dict[str, Any]:
    return {
        scripts.NAVIGATION_LOAD_TIME: 120,
        scripts.PAGE_TITLE: "Example Domain",
        scripts.BASIC_ELEMENTS: {
            "hasHeadings": True,
            "hasImages": False,
            "hasLinks": True,
            "hasForm": False,
        },
        scripts.IMAGE_ALT_STATS: {"total": 4, "withAlt": 4, "percentage": 100.0},
        scripts.HEADING_STRUCTURE: {"hasH1": True, "total": 3, "structure": ["h1", "h2", "h2"]},
        scripts.PERFORMANCE_METRICS: {
            "loadTime": 900,
            "domContentLoaded": 400,
            "firstPaint": 200,
            "firstContentfulPaint": 250,
        },
        scripts.SECURITY_PROBE: {
            "isHttps": True,
            "insecureResources": 0,
            "passwordFieldsOnHttp": 0,
            "unsafeBlankTargets": 0,
            "inlineScripts": 1,
            "deprecatedElements": 0,
            "hasLang": True,
        },
        scripts.COMPLIANCE_PROBE: {
            "lang": "en",
            "formFields": 2,
            "labelledFields": 2,
            "hasViewportMeta": True,
        },
    }


@pytest.fixture
def make_page() -> Callable[..., FakePage]:
    """Build a healthy scripted page; keyword ``evaluations`` entries override probes."""

    def _make(*, evaluations: dict[str, Any] | None = None, **kwargs: Any) -> FakePage:
        merged = _healthy_evaluations()
        merged.update(evaluations or {})
        return FakePage(evaluations=merged, **kwargs)

    return _make


@pytest.fixture
def provider(make_page) -> FakeSessionProvider:
    return FakeSessionProvider({SITE: make_page()})


@pytest.fixture
def settings(tmp_path) -> QASettings:
    return QASettings(
        _env_file=None,
        console_observation_window=0,
        project_paths=[str(tmp_path)],
    )
