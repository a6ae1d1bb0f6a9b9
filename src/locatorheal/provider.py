from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Literal, Protocol

from playwright.sync_api import Error as PlaywrightError

from .models import StrategyKind
from .selector_rules import as_xpath_selector

if TYPE_CHECKING:
    from playwright.sync_api import Locator, Page

WaitState = Literal["visible", "hidden", "attached", "detached"]
WAIT_STATES: tuple[str, ...] = ("visible", "hidden", "attached", "detached")

DEFAULT_READ_TIMEOUT_MS = 1000


class ElementHandle(Protocol):
    """Zero or more live elements; verbs act on the first match."""

    def is_visible(self, timeout_ms: int) -> bool: ...

    def get_attribute(self, name: str) -> str | None: ...

    def text_content(self) -> str | None: ...

    def read_text(self, timeout_ms: int) -> str | None: ...

    def wait_for(self, state: WaitState, timeout_ms: int) -> None: ...

    def click(self) -> None: ...

    def fill(self, text: str) -> None: ...


class ElementProvider(Protocol):
    def resolve(self, kind: StrategyKind, value: str) -> ElementHandle: ...


QueryBuilder = Callable[["Page", str], "Locator"]

QUERY_BUILDERS: dict[StrategyKind, QueryBuilder] = {
    StrategyKind.TEST_ID: lambda page, value: page.get_by_test_id(value),
    StrategyKind.TEXT: lambda page, value: page.get_by_text(value, exact=False),
    StrategyKind.ROLE: lambda page, value: page.get_by_role(value),  # type: ignore[arg-type]
    StrategyKind.LABEL: lambda page, value: page.get_by_label(value),
    StrategyKind.PLACEHOLDER: lambda page, value: page.get_by_placeholder(value),
    StrategyKind.CSS: lambda page, value: page.locator(value),
    StrategyKind.XPATH: lambda page, value: page.locator(as_xpath_selector(value)),
}


class PlaywrightElementHandle:
    def __init__(self, locator: Locator, read_timeout_ms: int = DEFAULT_READ_TIMEOUT_MS) -> None:
        self.locator = locator
        self.read_timeout_ms = read_timeout_ms

    @property
    def first(self) -> Locator:
        return self.locator.first

    def is_visible(self, timeout_ms: int) -> bool:
        try:
            if timeout_ms <= 0:
                # Playwright reads timeout=0 as "wait forever".
                return self.first.is_visible()
            self.first.wait_for(state="visible", timeout=timeout_ms)
            return True
        except PlaywrightError:
            return False

    def get_attribute(self, name: str) -> str | None:
        try:
            return self.first.get_attribute(name, timeout=self.read_timeout_ms)
        except PlaywrightError:
            return None

    def text_content(self) -> str | None:
        try:
            return self.first.text_content(timeout=self.read_timeout_ms)
        except PlaywrightError:
            return None

    def read_text(self, timeout_ms: int) -> str | None:
        return self.first.text_content(timeout=timeout_ms)

    def wait_for(self, state: WaitState, timeout_ms: int) -> None:
        self.first.wait_for(state=state, timeout=timeout_ms)

    def click(self) -> None:
        self.first.click()

    def fill(self, text: str) -> None:
        self.first.fill(text)


class PlaywrightElementProvider:
    def __init__(self, page: Page, read_timeout_ms: int = DEFAULT_READ_TIMEOUT_MS) -> None:
        self.page = page
        self.read_timeout_ms = read_timeout_ms

    def resolve(self, kind: StrategyKind, value: str) -> PlaywrightElementHandle:
        builder = QUERY_BUILDERS[StrategyKind(kind)]
        return PlaywrightElementHandle(builder(self.page, value), read_timeout_ms=self.read_timeout_ms)
