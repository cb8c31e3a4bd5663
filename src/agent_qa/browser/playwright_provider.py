"""Playwright-backed browser sessions."""

from __future__ import annotations

from typing import Any, Mapping

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from ..errors import ConfigurationError, NavigationError, QATimeoutError
from .session import ConsoleHandler, ConsoleMessage, NavigationResponse, SessionConfig

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


class PlaywrightSession:
    """One browser, context and page owned by a single test runner."""

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
        config: SessionConfig,
    ) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page
        self._config = config

    async def navigate(self, url: str) -> NavigationResponse:
        try:
            response = await self._page.goto(url)
        except PlaywrightTimeoutError as exc:
            raise QATimeoutError(f"navigation to {url}", self._config.navigation_timeout) from exc
        except PlaywrightError as exc:
            raise NavigationError(url, exc.message) from exc
        if response is None:
            # Same-document navigations report no response.
            return NavigationResponse(status=200, final_url=self._page.url)
        return NavigationResponse(status=response.status, final_url=response.url)

    async def evaluate(self, script: str) -> Any:
        return await self._page.evaluate(script)

    async def screenshot(self, options: Mapping[str, Any] | None = None) -> bytes:
        options = dict(options or {})
        image_type = options.get("type", "png")
        kwargs: dict[str, Any] = {
            "full_page": bool(options.get("full_page", False)),
            "type": image_type,
        }
        if image_type == "jpeg":
            kwargs["quality"] = int(options.get("quality", 90))
        return await self._page.screenshot(**kwargs)

    def on_console_message(self, handler: ConsoleHandler) -> None:
        self._page.on("console", lambda msg: handler(ConsoleMessage(type=msg.type, text=msg.text)))

    async def close(self) -> None:
        try:
            await self._context.close()
            await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightSessionProvider:
    """Launch a fresh Playwright browser for every session."""

    def __init__(self, browser_type: str = "chromium") -> None:
        if browser_type not in SUPPORTED_BROWSERS:
            raise ConfigurationError(
                f"Unsupported browser '{browser_type}'; expected one of {', '.join(SUPPORTED_BROWSERS)}"
            )
        self.browser_type = browser_type

    async def new_session(self, config: SessionConfig) -> PlaywrightSession:
        playwright = await async_playwright().start()
        try:
            launcher = getattr(playwright, self.browser_type)
            browser = await launcher.launch(headless=config.headless)
            context = await browser.new_context(
                viewport=config.viewport, user_agent=config.user_agent
            )
            page = await context.new_page()
        except BaseException:
            await playwright.stop()
            raise
        page.set_default_timeout(config.default_timeout * 1000)
        page.set_default_navigation_timeout(config.navigation_timeout * 1000)
        return PlaywrightSession(playwright, browser, context, page, config)


__all__ = ["PlaywrightSession", "PlaywrightSessionProvider", "SUPPORTED_BROWSERS"]
