"""Built-in website test suites and their pass/fail policies.

Suites are ordered: a test may rely on page state (navigation, collected
console messages) left behind by the tests before it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, ClassVar, Protocol

from ..browser import scripts
from ..browser.session import NavigationResponse

ALT_TEXT_PASS_PERCENTAGE = 80
MIN_BASIC_ELEMENT_TYPES = 2
MAX_CONSOLE_ERROR_SAMPLES = 5


class SuitePage(Protocol):
    """Page handle the runner lends to each test."""

    observation_window: float

    async def navigate(self, url: str) -> NavigationResponse:
        ...

    async def evaluate(self, script: str) -> Any:
        ...

    async def wait(self, seconds: float) -> None:
        ...

    def console_errors(self) -> list[str]:
        ...


@dataclass(slots=True)
class TestOutcome:
    __test__: ClassVar[bool] = False

    success: bool
    message: str
    details: dict[str, Any] = field(default_factory=dict)


TestFunction = Callable[[SuitePage, str], Awaitable[TestOutcome]]


@dataclass(frozen=True, slots=True)
class TestDescriptor:
    __test__: ClassVar[bool] = False

    name: str
    description: str
    execute: TestFunction


@dataclass(frozen=True, slots=True)
class TestSuite:
    """Named, ordered sequence of tests.

    ``navigates`` is true when the first test performs the navigation itself;
    otherwise the runner loads the target before the first test.
    """

    __test__: ClassVar[bool] = False

    name: str
    tests: tuple[TestDescriptor, ...]
    navigates: bool = False


async def page_load(page: SuitePage, url: str) -> TestOutcome:
    response = await page.navigate(url)
    load_time = await page.evaluate(scripts.NAVIGATION_LOAD_TIME)
    return TestOutcome(
        success=response.status < 400,
        message=f"Page loaded with status {response.status}",
        details={
            "status": response.status,
            "load_time_ms": load_time,
            "url": response.final_url,
        },
    )


async def title_check(page: SuitePage, url: str) -> TestOutcome:
    title = await page.evaluate(scripts.PAGE_TITLE)
    return TestOutcome(
        success=bool(title),
        message=f'Title found: "{title}"' if title else "No title found",
        details={"title": title or ""},
    )


async def basic_elements(page: SuitePage, url: str) -> TestOutcome:
    elements = await page.evaluate(scripts.BASIC_ELEMENTS)
    present = sum(1 for value in elements.values() if value)
    return TestOutcome(
        success=present >= MIN_BASIC_ELEMENT_TYPES,
        message=f"Found {present}/{len(elements)} basic element types",
        details=dict(elements),
    )


async def console_errors(page: SuitePage, url: str) -> TestOutcome:
    await page.wait(page.observation_window)
    errors = page.console_errors()
    return TestOutcome(
        success=not errors,
        message="No console errors found" if not errors else f"Found {len(errors)} console errors",
        details={"count": len(errors), "errors": errors[:MAX_CONSOLE_ERROR_SAMPLES]},
    )


async def alt_text_check(page: SuitePage, url: str) -> TestOutcome:
    stats = await page.evaluate(scripts.IMAGE_ALT_STATS)
    return TestOutcome(
        success=stats["percentage"] >= ALT_TEXT_PASS_PERCENTAGE,
        message=f"{stats['withAlt']}/{stats['total']} images have alt text",
        details=dict(stats),
    )


async def heading_structure(page: SuitePage, url: str) -> TestOutcome:
    info = await page.evaluate(scripts.HEADING_STRUCTURE)
    ok = bool(info["hasH1"]) and info["total"] > 0
    return TestOutcome(
        success=ok,
        message=(
            f"Good heading structure with {info['total']} headings"
            if ok
            else "Missing H1 or no headings found"
        ),
        details=dict(info),
    )


BASIC_SUITE = TestSuite(
    name="basic",
    navigates=True,
    tests=(
        TestDescriptor("Page Load", "Page loads with a non-error HTTP status", page_load),
        TestDescriptor("Title Check", "Page declares a title", title_check),
        TestDescriptor("Basic Elements", "Core HTML element types are present", basic_elements),
        TestDescriptor("Console Errors", "No console errors after load", console_errors),
    ),
)

ACCESSIBILITY_SUITE = TestSuite(
    name="accessibility",
    tests=(
        TestDescriptor("Alt Text Check", "Images carry alternative text", alt_text_check),
        TestDescriptor("Heading Structure", "Page has a top-level heading", heading_structure),
    ),
)

BUILTIN_SUITES: dict[str, TestSuite] = {
    BASIC_SUITE.name: BASIC_SUITE,
    ACCESSIBILITY_SUITE.name: ACCESSIBILITY_SUITE,
}


def resolve_suite(name: str, suites: dict[str, TestSuite] | None = None) -> TestSuite:
    """Return the named suite, falling back to ``basic`` for unknown names."""

    registry = suites if suites is not None else BUILTIN_SUITES
    return registry.get(name) or registry["basic"]


__all__ = [
    "ACCESSIBILITY_SUITE",
    "BASIC_SUITE",
    "BUILTIN_SUITES",
    "SuitePage",
    "TestDescriptor",
    "TestFunction",
    "TestOutcome",
    "TestSuite",
    "resolve_suite",
]
