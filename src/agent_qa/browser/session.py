"""Browser session contract and a scripted in-memory provider."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Protocol

from ..errors import NavigationError


@dataclass(slots=True)
class NavigationResponse:
    status: int
    final_url: str


@dataclass(frozen=True, slots=True)
class ConsoleMessage:
    type: str
    text: str


@dataclass(slots=True)
class SessionConfig:
    """Options applied when a browser session is opened."""

    headless: bool = True
    viewport: dict[str, int] = field(default_factory=lambda: {"width": 1280, "height": 720})
    user_agent: str = "Agent.QA WebTester/1.0"
    default_timeout: float = 30.0
    navigation_timeout: float = 15.0


ConsoleHandler = Callable[[ConsoleMessage], None]


class BrowserSession(Protocol):
    """Minimal page-level API consumed by the test runner."""

    async def navigate(self, url: str) -> NavigationResponse:
        ...

    async def evaluate(self, script: str) -> Any:
        ...

    async def screenshot(self, options: Mapping[str, Any] | None = None) -> bytes:
        ...

    def on_console_message(self, handler: ConsoleHandler) -> None:
        ...

    async def close(self) -> None:
        ...


class SessionProvider(Protocol):
    async def new_session(self, config: SessionConfig) -> BrowserSession:
        ...


@dataclass(slots=True)
class FakePage:
    """Scripted page: DOM probe results keyed by script, console output and status."""

    status: int = 200
    evaluations: dict[str, Any] = field(default_factory=dict)
    console_messages: list[ConsoleMessage] = field(default_factory=list)
    screenshot: bytes = b"\x89PNG\r\n\x1a\nfake"
    final_url: str | None = None
    navigation_delay: float = 0.0
    navigation_error: str | None = None
    late_console_messages: list[ConsoleMessage] = field(default_factory=list)
    late_console_delay: float = 0.01


class FakeBrowserSession:
    """Test double that serves :class:`FakePage` objects instead of a real browser."""

    def __init__(self, pages: Mapping[str, FakePage], config: SessionConfig | None = None) -> None:
        self._pages = pages
        self.config = config or SessionConfig()
        self._handlers: list[ConsoleHandler] = []
        self._current: FakePage | None = None
        self.navigations: list[str] = []
        self.evaluated: list[str] = []
        self.closed = False

    async def navigate(self, url: str) -> NavigationResponse:
        self.navigations.append(url)
        page = self._pages.get(url)
        if page is None:
            raise NavigationError(url, "net::ERR_NAME_NOT_RESOLVED")
        if page.navigation_delay:
            await asyncio.sleep(page.navigation_delay)
        if page.navigation_error:
            raise NavigationError(url, page.navigation_error)
        self._current = page
        for message in page.console_messages:
            self.emit_console(message)
        if page.late_console_messages:
            # Delivered after navigation returns, while the page is being observed.
            loop = asyncio.get_running_loop()
            for message in page.late_console_messages:
                loop.call_later(page.late_console_delay, self.emit_console, message)
        return NavigationResponse(status=page.status, final_url=page.final_url or url)

    async def evaluate(self, script: str) -> Any:
        self.evaluated.append(script)
        if self._current is None:
            raise RuntimeError("evaluate called before navigation")
        try:
            return self._current.evaluations[script]
        except KeyError as exc:
            raise RuntimeError("page has no scripted result for this probe") from exc

    async def screenshot(self, options: Mapping[str, Any] | None = None) -> bytes:
        if self._current is None:
            raise RuntimeError("screenshot called before navigation")
        return self._current.screenshot

    def on_console_message(self, handler: ConsoleHandler) -> None:
        self._handlers.append(handler)

    def emit_console(self, message: ConsoleMessage) -> None:
        for handler in list(self._handlers):
            handler(message)

    async def close(self) -> None:
        self.closed = True


class FakeSessionProvider:
    """Hands out :class:`FakeBrowserSession` instances over a shared page map."""

    def __init__(self, pages: Mapping[str, FakePage] | None = None) -> None:
        self.pages: dict[str, FakePage] = dict(pages or {})
        self.sessions: list[FakeBrowserSession] = []

    async def new_session(self, config: SessionConfig) -> FakeBrowserSession:
        session = FakeBrowserSession(self.pages, config)
        self.sessions.append(session)
        return session


def console_errors(messages: Iterable[ConsoleMessage]) -> list[str]:
    return [message.text for message in messages if message.type == "error"]


__all__ = [
    "BrowserSession",
    "ConsoleHandler",
    "ConsoleMessage",
    "FakeBrowserSession",
    "FakePage",
    "FakeSessionProvider",
    "NavigationResponse",
    "SessionConfig",
    "SessionProvider",
    "console_errors",
]
