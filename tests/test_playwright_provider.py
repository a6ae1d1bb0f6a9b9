from __future__ import annotations

from typing import Any

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from locatorheal.engine import HealingEngine
from locatorheal.models import StrategyKind
from locatorheal.provider import PlaywrightElementHandle, PlaywrightElementProvider
from locatorheal.settings import HealerSettings


class StubLocator:
    def __init__(self, query: tuple[str, tuple[Any, ...], dict[str, Any]], **behaviour: Any) -> None:
        self.query = query
        self.behaviour = behaviour
        self.calls: list[tuple[str, Any]] = []

    @property
    def first(self) -> StubLocator:
        return self

    def is_visible(self) -> bool:
        self.calls.append(("is_visible", None))
        return bool(self.behaviour.get("visible", True))

    def wait_for(self, state: str = "visible", timeout: float | None = None) -> None:
        self.calls.append(("wait_for", (state, timeout)))
        if self.behaviour.get("wait_error"):
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    def get_attribute(self, name: str, timeout: float | None = None) -> str | None:
        self.calls.append(("get_attribute", (name, timeout)))
        if self.behaviour.get("read_error"):
            raise PlaywrightError("Target closed")
        return self.behaviour.get("attributes", {}).get(name)

    def text_content(self, timeout: float | None = None) -> str | None:
        self.calls.append(("text_content", timeout))
        if self.behaviour.get("read_error"):
            raise PlaywrightError("Target closed")
        return self.behaviour.get("text")

    def click(self) -> None:
        self.calls.append(("click", None))

    def fill(self, value: str) -> None:
        self.calls.append(("fill", value))


class StubPage:
    def __init__(self, **behaviour: Any) -> None:
        self.behaviour = behaviour
        self.created: list[StubLocator] = []

    def _make(self, method: str, *args: Any, **kwargs: Any) -> StubLocator:
        locator = StubLocator((method, args, kwargs), **self.behaviour)
        self.created.append(locator)
        return locator

    def locator(self, selector: str) -> StubLocator:
        return self._make("locator", selector)

    def get_by_test_id(self, test_id: str) -> StubLocator:
        return self._make("get_by_test_id", test_id)

    def get_by_text(self, text: str, exact: bool | None = None) -> StubLocator:
        return self._make("get_by_text", text, exact=exact)

    def get_by_role(self, role: str) -> StubLocator:
        return self._make("get_by_role", role)

    def get_by_label(self, text: str) -> StubLocator:
        return self._make("get_by_label", text)

    def get_by_placeholder(self, text: str) -> StubLocator:
        return self._make("get_by_placeholder", text)


@pytest.mark.parametrize(
    ("kind", "value", "expected"),
    [
        (StrategyKind.TEST_ID, "login", ("get_by_test_id", ("login",), {})),
        (StrategyKind.TEXT, "Login", ("get_by_text", ("Login",), {"exact": False})),
        (StrategyKind.ROLE, "button", ("get_by_role", ("button",), {})),
        (StrategyKind.LABEL, "Username", ("get_by_label", ("Username",), {})),
        (StrategyKind.PLACEHOLDER, "Password", ("get_by_placeholder", ("Password",), {})),
        (StrategyKind.CSS, "#real-id", ("locator", ("#real-id",), {})),
        (StrategyKind.XPATH, "//button", ("locator", ("xpath=//button",), {})),
    ],
)
def test_each_kind_builds_its_own_query(kind: StrategyKind, value: str, expected: tuple) -> None:
    page = StubPage()

    handle = PlaywrightElementProvider(page).resolve(kind, value)  # type: ignore[arg-type]

    assert handle.locator.query == expected


def test_zero_timeout_visibility_checks_immediately() -> None:
    locator = StubLocator(("locator", ("#a",), {}), visible=False)
    handle = PlaywrightElementHandle(locator)  # type: ignore[arg-type]

    assert handle.is_visible(0) is False
    assert locator.calls == [("is_visible", None)]


def test_bounded_visibility_waits_and_reports_timeouts_as_hidden() -> None:
    visible = StubLocator(("locator", ("#a",), {}))
    hidden = StubLocator(("locator", ("#b",), {}), wait_error=True)

    assert PlaywrightElementHandle(visible).is_visible(2000) is True  # type: ignore[arg-type]
    assert PlaywrightElementHandle(hidden).is_visible(2000) is False  # type: ignore[arg-type]
    assert visible.calls == [("wait_for", ("visible", 2000))]


def test_reads_are_bounded_and_return_none_on_errors() -> None:
    ok = StubLocator(("locator", ("#a",), {}), attributes={"id": "a", "name": "  "}, text="Hi")
    broken = StubLocator(("locator", ("#b",), {}), read_error=True)
    handle = PlaywrightElementHandle(ok, read_timeout_ms=300)  # type: ignore[arg-type]

    assert handle.get_attribute("id") == "a"
    assert handle.get_attribute("name") == "  "
    assert handle.text_content() == "Hi"
    assert ("get_attribute", ("id", 300)) in ok.calls
    assert ("text_content", 300) in ok.calls

    broken_handle = PlaywrightElementHandle(broken)  # type: ignore[arg-type]
    assert broken_handle.get_attribute("id") is None
    assert broken_handle.text_content() is None


def test_wait_for_propagates_timeout() -> None:
    locator = StubLocator(("locator", ("#a",), {}), wait_error=True)

    with pytest.raises(PlaywrightTimeoutError):
        PlaywrightElementHandle(locator).wait_for("visible", 5000)  # type: ignore[arg-type]


def test_for_page_wires_probe_timeout_into_reads(tmp_path) -> None:
    page = StubPage(attributes={"id": "a"})
    engine = HealingEngine.for_page(page, settings=HealerSettings(probe_timeout_ms=250, log_dir=tmp_path))  # type: ignore[arg-type]

    handle = engine.find_element("#a")
    handle.get_attribute("id")

    assert page.created[0].calls == [("wait_for", ("visible", 5000)), ("get_attribute", ("id", 250))]


def test_read_text_for_interactions_raises_playwright_errors() -> None:
    ok = StubLocator(("locator", ("#a",), {}), text="Dashboard")
    broken = StubLocator(("locator", ("#b",), {}), read_error=True)

    assert PlaywrightElementHandle(ok).read_text(4000) == "Dashboard"  # type: ignore[arg-type]
    assert ok.calls == [("text_content", 4000)]
    with pytest.raises(PlaywrightError):
        PlaywrightElementHandle(broken).read_text(4000)  # type: ignore[arg-type]
