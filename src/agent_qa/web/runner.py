"""Sequential website test runner over a single browser session."""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from typing import Any, Awaitable, Mapping, TypeVar

from ..browser import scripts
from ..browser.session import (
    BrowserSession,
    ConsoleMessage,
    NavigationResponse,
    SessionConfig,
    SessionProvider,
    console_errors,
)
from ..config import QASettings, get_settings
from ..errors import QATimeoutError
from ..lifecycle import ContextKey, TaskLifecycle, UnitStatus
from .models import (
    PageInspection,
    PerformanceMetrics,
    PerformanceResult,
    ScreenshotResult,
    SuiteResult,
    TestResult,
)
from .suites import BUILTIN_SUITES, TestDescriptor, TestSuite, resolve_suite

T = TypeVar("T")


class _RunnerPage:
    """Adapts the runner's session to the page handle tests are given."""

    def __init__(self, runner: "WebTester") -> None:
        self._runner = runner
        self.observation_window = runner.settings.console_observation_window

    async def navigate(self, url: str) -> NavigationResponse:
        return await self._runner._navigate(url)

    async def evaluate(self, script: str) -> Any:
        return await self._runner._evaluate(script)

    async def wait(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def console_errors(self) -> list[str]:
        return console_errors(self._runner.console_messages)


class WebTester:
    """Runs ordered test suites, screenshots and timing probes against one browser session.

    The session is created lazily and owned exclusively by this runner. Every
    operation that drives the page holds the runner lock from start to finish,
    so callers sharing a runner are served one operation at a time.
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        *,
        settings: QASettings | None = None,
        name: str = "WebTester",
        suites: Mapping[str, TestSuite] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.lifecycle = TaskLifecycle(name, log_level=self.settings.log_level)
        self._provider = session_provider
        self._session: BrowserSession | None = None
        self._console: list[ConsoleMessage] = []
        self._suites: dict[str, TestSuite] = dict(suites or BUILTIN_SUITES)
        self._lock = asyncio.Lock()

    @property
    def session(self) -> BrowserSession | None:
        return self._session

    @property
    def console_messages(self) -> list[ConsoleMessage]:
        return list(self._console)

    @property
    def suites(self) -> dict[str, TestSuite]:
        return dict(self._suites)

    def register_suite(self, suite: TestSuite) -> None:
        self._suites[suite.name] = suite

    def session_config(self) -> SessionConfig:
        return SessionConfig(
            headless=self.settings.headless,
            viewport=self.settings.viewport,
            user_agent=self.settings.user_agent,
            default_timeout=self.settings.default_timeout,
            navigation_timeout=self.settings.navigation_timeout,
        )

    # -- session management --------------------------------------------

    async def initialize_browser(self) -> dict[str, Any]:
        async with self._lock:
            return await self.lifecycle.execute("initializeBrowser", self._initialize_browser)

    async def _initialize_browser(self) -> dict[str, Any]:
        if self._session is not None:
            await self._close_session()
        session = await self._provider.new_session(self.session_config())
        session.on_console_message(self._console.append)
        self._session = session
        self.lifecycle.log(logging.INFO, "Browser initialized successfully")
        return {"success": True, "provider": type(self._provider).__name__}

    async def _ensure_session(self) -> BrowserSession:
        if self._session is None:
            await self.lifecycle.execute("initializeBrowser", self._initialize_browser)
        assert self._session is not None
        return self._session

    async def _close_session(self) -> None:
        session, self._session = self._session, None
        self._console.clear()
        if session is not None:
            await session.close()
            self.lifecycle.log(logging.INFO, "Browser closed")

    async def close(self) -> dict[str, Any]:
        async def _close() -> dict[str, Any]:
            await self._close_session()
            return {"success": True}

        async with self._lock:
            return await self.lifecycle.execute("closeBrowser", _close)

    # -- guarded session calls -----------------------------------------

    async def _bounded(self, operation: str, awaitable: Awaitable[T], timeout: float) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except QATimeoutError:
            raise
        except asyncio.TimeoutError as exc:
            raise QATimeoutError(operation, timeout) from exc

    async def _navigate(self, url: str) -> NavigationResponse:
        session = await self._ensure_session()
        self._console.clear()
        return await self._bounded(
            f"navigation to {url}", session.navigate(url), self.settings.navigation_timeout
        )

    async def _evaluate(self, script: str) -> Any:
        session = await self._ensure_session()
        return await self._bounded("evaluate", session.evaluate(script), self.settings.default_timeout)

    # -- suites ----------------------------------------------------------

    async def run_suite(self, url: str, suite_name: str = "basic") -> SuiteResult:
        """Execute the named suite (``basic`` when unknown) against ``url``."""

        async with self._lock:
            return await self.lifecycle.execute("testWebsite", self._run_suite, url, suite_name)

    async def _run_suite(self, url: str, suite_name: str) -> SuiteResult:
        await self._ensure_session()
        suite = resolve_suite(suite_name, self._suites)
        if suite.name != suite_name:
            self.lifecycle.log(
                logging.WARNING, f"Unknown suite '{suite_name}', running '{suite.name}'"
            )
        self.lifecycle.set_context(ContextKey.TARGET_URL, url)
        self.lifecycle.set_context(ContextKey.SUITE, suite.name)

        if not suite.navigates:
            await self._navigate(url)

        result = SuiteResult(url=url, suite=suite.name)
        page = _RunnerPage(self)
        for test in suite.tests:
            try:
                test_result = await self._run_single_test(page, url, test)
            except Exception as exc:
                self.lifecycle.log_error(f"Test failed: {test.name}", exc)
                test_result = TestResult(
                    name=test.name,
                    description=test.description,
                    status="failed",
                    message=str(exc) or type(exc).__name__,
                    details={"error": str(exc), "error_type": type(exc).__name__},
                    duration=0.0,
                )
            result.tests.append(test_result)
            result.summary.record(test_result.status)

        result.quality_score = result.summary.quality_score
        self.lifecycle.log(
            logging.INFO,
            f"Website test completed: {result.summary.passed}/{result.summary.total} tests passed",
            url=url,
            suite=suite.name,
        )
        return result

    async def _run_single_test(self, page: _RunnerPage, url: str, test: TestDescriptor) -> TestResult:
        self.lifecycle.log(logging.DEBUG, f"Running test: {test.name}")
        started = time.perf_counter()
        outcome = await test.execute(page, url)
        duration = (time.perf_counter() - started) * 1000.0
        return TestResult(
            name=test.name,
            description=test.description,
            status="passed" if outcome.success else "failed",
            message=outcome.message,
            details=outcome.details,
            duration=duration,
        )

    # -- captures ----------------------------------------------------------

    async def capture_screenshot(
        self, url: str, options: Mapping[str, Any] | None = None
    ) -> ScreenshotResult:
        async with self._lock:
            return await self.lifecycle.execute(
                "captureScreenshot", self._capture_screenshot, url, options
            )

    async def _capture_screenshot(self, url: str, options: Mapping[str, Any] | None) -> ScreenshotResult:
        options = dict(options or {})
        image_type = options.get("type", "png")
        screenshot_options = {
            "full_page": bool(options.get("full_page", False)),
            "type": image_type,
            "quality": int(options.get("quality", 90)),
        }
        session = await self._ensure_session()
        await self._navigate(url)
        image = await self._bounded(
            "screenshot", session.screenshot(screenshot_options), self.settings.default_timeout
        )
        self.lifecycle.log(logging.INFO, f"Screenshot captured for {url}", size=len(image))
        return ScreenshotResult(
            url=url,
            image_type=image_type,
            screenshot=base64.b64encode(image).decode("ascii"),
            size=len(image),
        )

    async def collect_performance_metrics(self, url: str) -> PerformanceResult:
        async with self._lock:
            return await self.lifecycle.execute(
                "collectPerformanceMetrics", self._collect_performance_metrics, url
            )

    async def _collect_performance_metrics(self, url: str) -> PerformanceResult:
        await self._navigate(url)
        raw = await self._evaluate(scripts.PERFORMANCE_METRICS) or {}
        metrics = PerformanceMetrics(
            load_time=raw.get("loadTime") or 0,
            dom_content_loaded=raw.get("domContentLoaded") or 0,
            first_paint=raw.get("firstPaint") or 0,
            first_contentful_paint=raw.get("firstContentfulPaint") or 0,
        )
        self.lifecycle.log(logging.INFO, f"Performance metrics collected for {url}")
        return PerformanceResult(url=url, metrics=metrics)

    async def evaluate_probe(self, url: str, script: str) -> Any:
        """Load ``url`` and evaluate an arbitrary DOM probe on it."""

        async def _probe() -> Any:
            await self._navigate(url)
            return await self._evaluate(script)

        async with self._lock:
            return await self.lifecycle.execute("evaluateProbe", _probe)

    async def inspect_page(self, url: str, script: str) -> PageInspection:
        """Load ``url``, evaluate ``script`` and collect console errors over the observation window."""

        async with self._lock:
            return await self.lifecycle.execute("inspectPage", self._inspect_page, url, script)

    async def _inspect_page(self, url: str, script: str) -> PageInspection:
        await self._navigate(url)
        probe = await self._evaluate(script)
        await asyncio.sleep(self.settings.console_observation_window)
        return PageInspection(
            url=url, probe=probe, console_errors=console_errors(self._console)
        )

    # -- teardown ----------------------------------------------------------

    async def cleanup(self) -> None:
        if self.lifecycle.status is UnitStatus.TERMINATED:
            return
        await self.close()
        self.lifecycle.cleanup()

    async def restart(self) -> None:
        async with self._lock:
            await self._close_session()
            self.lifecycle.restart()


__all__ = ["WebTester"]
