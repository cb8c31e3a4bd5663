"""Browser session contract, fakes and DOM probes."""

from . import scripts
from .session import (
    BrowserSession,
    ConsoleMessage,
    FakeBrowserSession,
    FakePage,
    FakeSessionProvider,
    NavigationResponse,
    SessionConfig,
    SessionProvider,
    console_errors,
)

__all__ = [
    "BrowserSession",
    "ConsoleMessage",
    "FakeBrowserSession",
    "FakePage",
    "FakeSessionProvider",
    "NavigationResponse",
    "SessionConfig",
    "SessionProvider",
    "console_errors",
    "scripts",
]
