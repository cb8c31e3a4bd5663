from __future__ import annotations

import asyncio
import base64

import pytest

from agent_qa.browser import ConsoleMessage, FakeSessionProvider, scripts
from agent_qa.config import QASettings
from agent_qa.errors import NavigationError, QATimeoutError
from agent_qa.lifecycle import ContextKey
from agent_qa.web import TestDescriptor, TestOutcome, TestSuite, WebTester

SITE = "https://example.com/"


def _run(tester: WebTester, coro):
    async def _go():
        try:
            return await coro
        finally:
            await tester.cleanup()

    return asyncio.run(_go())


def test_basic_suite_all_pass(provider, settings) -> None:
    tester = WebTester(provider, settings=settings)

    result = _run(tester, tester.run_suite(SITE, "basic"))

    assert [test.name for test in result.tests] == [
        "Page Load",
        "Title Check",
        "Basic Elements",
        "Console Errors",
    ]
    assert result.summary.model_dump() == {"total": 4, "passed": 4, "failed": 0, "skipped": 0}
    assert result.quality_score == 100
    assert result.tests[1].message == 'Title found: "Example Domain"'


def test_accessibility_suite_scores_partial_pass(make_page, settings) -> None:
    page = make_page(
        evaluations={
            scripts.IMAGE_ALT_STATS: {"total": 5, "withAlt": 3, "percentage": 60.0},
            scripts.HEADING_STRUCTURE: {"hasH1": True, "total": 1, "structure": ["h1"]},
        }
    )
    provider = FakeSessionProvider({SITE: page})
    tester = WebTester(provider, settings=settings)

    result = _run(tester, tester.run_suite(SITE, "accessibility"))

    statuses = {test.name: test.status for test in result.tests}
    assert statuses == {"Alt Text Check": "failed", "Heading Structure": "passed"}
    assert result.summary.total == 2
    assert result.summary.passed == 1
    assert result.summary.failed == 1
    assert result.quality_score == 50
    # The runner loads the page itself because the suite does not navigate.
    assert provider.sessions[0].navigations == [SITE]


def test_failing_test_does_not_abort_siblings(make_page, settings) -> None:
    page = make_page()
    del page.evaluations[scripts.BASIC_ELEMENTS]
    tester = WebTester(FakeSessionProvider({SITE: page}), settings=settings)

    result = _run(tester, tester.run_suite(SITE))

    broken = result.tests[2]
    assert broken.name == "Basic Elements"
    assert broken.status == "failed"
    assert broken.duration == 0
    assert broken.details["error_type"] == "RuntimeError"
    assert result.tests[3].status == "passed"
    assert result.summary.passed == 3
    assert result.quality_score == 75


def test_console_errors_are_reported_with_samples(make_page, settings) -> None:
    messages = [ConsoleMessage("error", f"boom {index}") for index in range(7)]
    messages.append(ConsoleMessage("log", "hello"))
    tester = WebTester(
        FakeSessionProvider({SITE: make_page(console_messages=messages)}), settings=settings
    )

    result = _run(tester, tester.run_suite(SITE))

    console = result.tests[3]
    assert console.status == "failed"
    assert console.details["count"] == 7
    assert console.details["errors"] == [f"boom {index}" for index in range(5)]


def test_http_error_status_fails_page_load(make_page, settings) -> None:
    tester = WebTester(FakeSessionProvider({SITE: make_page(status=503)}), settings=settings)

    result = _run(tester, tester.run_suite(SITE))

    assert result.tests[0].status == "failed"
    assert result.tests[0].details["status"] == 503


def test_unknown_suite_falls_back_to_basic(provider, settings) -> None:
    tester = WebTester(provider, settings=settings)

    async def scenario():
        result = await tester.run_suite(SITE, "does-not-exist")
        suite = tester.lifecycle.get_context(ContextKey.SUITE)
        await tester.cleanup()
        return result, suite

    result, suite = asyncio.run(scenario())

    assert result.suite == "basic"
    assert suite == "basic"


def test_custom_suite_registration(provider, settings) -> None:
    async def always_passes(page, url) -> TestOutcome:
        return TestOutcome(success=True, message=f"checked {url}")

    tester = WebTester(provider, settings=settings)
    tester.register_suite(
        TestSuite(name="smoke", tests=(TestDescriptor("Smoke", "Always passes", always_passes),))
    )

    result = _run(tester, tester.run_suite(SITE, "smoke"))

    assert result.suite == "smoke"
    assert result.quality_score == 100


def test_screenshot_returns_encoded_payload(make_page, settings) -> None:
    image = b"\x89PNG\r\n\x1a\nscreen"
    tester = WebTester(FakeSessionProvider({SITE: make_page(screenshot=image)}), settings=settings)

    result = _run(tester, tester.capture_screenshot(SITE, {"full_page": True}))

    assert result.size == len(image)
    assert base64.b64decode(result.screenshot) == image
    assert result.image_type == "png"


def test_performance_metrics_default_missing_entries(make_page, settings) -> None:
    page = make_page(evaluations={scripts.PERFORMANCE_METRICS: {"loadTime": 1200}})
    tester = WebTester(FakeSessionProvider({SITE: page}), settings=settings)

    result = _run(tester, tester.collect_performance_metrics(SITE))

    assert result.metrics.load_time == 1200
    assert result.metrics.dom_content_loaded == 0
    assert result.metrics.first_contentful_paint == 0


def test_session_is_lazily_initialized_once(provider, settings) -> None:
    tester = WebTester(provider, settings=settings)

    async def scenario() -> None:
        await tester.collect_performance_metrics(SITE)
        await tester.capture_screenshot(SITE)
        await tester.cleanup()

    asyncio.run(scenario())

    assert len(provider.sessions) == 1
    assert provider.sessions[0].closed
    assert provider.sessions[0].config.viewport == {"width": 1280, "height": 720}


def test_navigation_timeout_raises_timeout_error(make_page, tmp_path) -> None:
    settings = QASettings(
        _env_file=None,
        console_observation_window=0,
        navigation_timeout=0.01,
        project_paths=[str(tmp_path)],
    )
    page = make_page(navigation_delay=0.5)
    tester = WebTester(FakeSessionProvider({SITE: page}), settings=settings)

    with pytest.raises(QATimeoutError) as excinfo:
        _run(tester, tester.collect_performance_metrics(SITE))

    assert excinfo.value.timeout == 0.01
    assert isinstance(excinfo.value, TimeoutError)


def test_unreachable_target_raises_navigation_error(provider, settings) -> None:
    tester = WebTester(provider, settings=settings)

    with pytest.raises(NavigationError):
        _run(tester, tester.capture_screenshot("https://unknown.invalid/"))

    assert tester.lifecycle.metrics.tasks_failed == 1


def _observing_settings(tmp_path, window: float) -> QASettings:
    return QASettings(
        _env_file=None,
        console_observation_window=window,
        project_paths=[str(tmp_path)],
    )


def test_concurrent_suites_on_one_tester_run_one_at_a_time(make_page, tmp_path) -> None:
    other = "https://other.example.com/"
    pages = {
        SITE: make_page(console_messages=[ConsoleMessage("error", "Uncaught TypeError")]),
        other: make_page(),
    }
    provider = FakeSessionProvider(pages)
    tester = WebTester(provider, settings=_observing_settings(tmp_path, 0.1))

    async def scenario():
        async def second():
            await asyncio.sleep(0.01)
            return await tester.run_suite(other)

        try:
            return await asyncio.gather(tester.run_suite(SITE), second())
        finally:
            await tester.cleanup()

    first, second = asyncio.run(scenario())

    assert first.tests[3].status == "failed"
    assert first.tests[3].details["errors"] == ["Uncaught TypeError"]
    assert second.tests[3].status == "passed"
    assert provider.sessions[0].navigations == [SITE, other]
    assert len(provider.sessions) == 1


def test_console_errors_after_load_are_caught_in_window(make_page, tmp_path) -> None:
    page = make_page(late_console_messages=[ConsoleMessage("error", "late failure")])
    tester = WebTester(
        FakeSessionProvider({SITE: page}), settings=_observing_settings(tmp_path, 0.1)
    )

    result = _run(tester, tester.run_suite(SITE, "basic"))

    console = result.tests[3]
    assert console.status == "failed"
    assert console.details["errors"] == ["late failure"]


def test_console_errors_after_window_closes_are_not_counted(make_page, settings) -> None:
    page = make_page(
        late_console_messages=[ConsoleMessage("error", "too late")], late_console_delay=0.2
    )
    tester = WebTester(FakeSessionProvider({SITE: page}), settings=settings)

    result = _run(tester, tester.run_suite(SITE, "basic"))

    assert result.tests[3].status == "passed"
