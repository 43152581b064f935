from __future__ import annotations

import asyncio
import re

import pytest
from playwright.async_api import Error as PlaywrightError

from share_export.core.exceptions import ExtractionFailedException
from share_export.extraction.rendered import (
    EXPANDER_SELECTOR,
    RenderedDomStrategy,
    expand_collapsed,
    wait_for_stable_count,
)
from share_export.rules import RuleRegistry

CHATGPT_URL = "https://chatgpt.com/share/abc-123"


class FakeTarget:
    def __init__(self, *, fails: bool = False) -> None:
        self.fails = fails
        self.clicks = 0

    async def click(self, timeout: float | None = None) -> None:
        if self.fails:
            raise PlaywrightError("Element is not attached to the DOM")
        self.clicks += 1


class FakeLocator:
    def __init__(self, page: FakePage, targets: list[FakeTarget]) -> None:
        self._page = page
        self._targets = targets

    async def count(self) -> int:
        counts = self._page.counts
        value = counts[min(self._page.polls, len(counts) - 1)]
        self._page.polls += 1
        return value

    async def all(self) -> list[FakeTarget]:
        return list(self._targets)


class FakePage:
    """Just enough of a Playwright page for the polling helpers."""

    def __init__(
        self,
        counts: list[int] | None = None,
        *,
        toggles: list[FakeTarget] | None = None,
        ellipses: list[FakeTarget] | None = None,
    ) -> None:
        self.counts = counts or [0]
        self.polls = 0
        self.toggles = toggles or []
        self.ellipses = ellipses or []
        self.selectors: list[str] = []
        self.text_patterns: list[re.Pattern[str]] = []
        self.html = "<html><body></body></html>"
        self.goto_error: BaseException | None = None
        self.hang_on_goto = False
        self.visited: list[str] = []
        self.navigating = asyncio.Event()

    async def goto(self, url: str, **kwargs: object) -> None:
        self.visited.append(url)
        self.navigating.set()
        if self.goto_error is not None:
            raise self.goto_error
        if self.hang_on_goto:
            await asyncio.Event().wait()

    async def content(self) -> str:
        return self.html

    def locator(self, selector: str) -> FakeLocator:
        self.selectors.append(selector)
        return FakeLocator(self, self.toggles)

    def get_by_text(self, pattern: re.Pattern[str]) -> FakeLocator:
        self.text_patterns.append(pattern)
        return FakeLocator(self, self.ellipses)


# ── Stable count ─────────────────────────────────────────────────────


async def test_waits_until_count_settles() -> None:
    page = FakePage([0, 2, 5, 5, 5])
    count = await wait_for_stable_count(page, ".msg", poll_interval=0, max_wait=5)
    assert count == 5
    assert page.polls == 5
    assert page.selectors == [".msg"] * 5


async def test_one_unchanged_check_is_not_enough() -> None:
    page = FakePage([3, 3, 6, 6, 6])
    count = await wait_for_stable_count(page, ".msg", poll_interval=0, max_wait=5)
    assert count == 6
    assert page.polls == 5


async def test_gives_up_at_deadline() -> None:
    page = FakePage([0])
    count = await wait_for_stable_count(page, ".msg", poll_interval=0, max_wait=0)
    assert count == 0
    assert page.polls == 1


# ── Expanding ────────────────────────────────────────────────────────


async def test_expands_toggles_and_ellipses() -> None:
    toggles = [FakeTarget(), FakeTarget(fails=True)]
    ellipses = [FakeTarget()]
    page = FakePage(toggles=toggles, ellipses=ellipses)

    clicked = await expand_collapsed(page, settle=0)

    assert clicked == 2
    assert [t.clicks for t in toggles] == [1, 0]
    assert ellipses[0].clicks == 1
    assert page.selectors == [EXPANDER_SELECTOR]
    assert page.text_patterns[0].match("…")
    assert page.text_patterns[0].match(" ... ")


async def test_expand_respects_limit() -> None:
    toggles = [FakeTarget() for _ in range(5)]
    clicked = await expand_collapsed(FakePage(toggles=toggles), settle=0, limit=3)
    assert clicked == 3
    assert [t.clicks for t in toggles] == [1, 1, 1, 0, 0]


# ── Strategy guards ──────────────────────────────────────────────────


async def test_caller_markup_not_rendered(registry, make_context) -> None:
    strategy = RenderedDomStrategy(registry)
    with pytest.raises(ExtractionFailedException) as exc_info:
        await strategy.attempt(make_context(CHATGPT_URL, "<html></html>"))
    assert "nothing to render" in exc_info.value.reason


async def test_no_rule_fails(make_context) -> None:
    strategy = RenderedDomStrategy(RuleRegistry())
    with pytest.raises(ExtractionFailedException) as exc_info:
        await strategy.attempt(make_context(CHATGPT_URL))
    assert "no verified rule" in exc_info.value.reason


# ── Browser lifecycle ────────────────────────────────────────────────


class FakeBrowser:
    def __init__(self, page: FakePage) -> None:
        self.page = page
        self.page_options: dict[str, object] = {}
        self.closed = 0

    async def new_page(self, **kwargs: object) -> FakePage:
        self.page_options = kwargs
        return self.page

    async def close(self) -> None:
        self.closed += 1


class FakeChromium:
    def __init__(self, browser: FakeBrowser) -> None:
        self.browser = browser
        self.launch_options: dict[str, object] = {}

    async def launch(self, **kwargs: object) -> FakeBrowser:
        self.launch_options = kwargs
        return self.browser


class FakePlaywright:
    """Stands in for ``async_playwright()``'s context manager."""

    def __init__(self, browser: FakeBrowser) -> None:
        self.chromium = FakeChromium(browser)

    async def __aenter__(self) -> FakePlaywright:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


@pytest.fixture()
def browser(monkeypatch: pytest.MonkeyPatch) -> FakeBrowser:
    fake = FakeBrowser(FakePage())
    monkeypatch.setattr(
        "share_export.extraction.rendered.async_playwright",
        lambda: FakePlaywright(fake),
    )
    return fake


@pytest.fixture()
def rendered(registry) -> RenderedDomStrategy:
    return RenderedDomStrategy(
        registry, user_agent="test-agent", poll_interval=0, max_wait=0.2, settle=0
    )


async def test_renders_and_closes_browser(browser, rendered, make_context, load_page) -> None:
    browser.page.counts = [2, 2, 2]
    browser.page.html = load_page("chatgpt_react_hooks.html")

    conversation = await rendered.attempt(make_context(CHATGPT_URL))

    assert conversation.title == "React Hooks Explained"
    assert [m.role.value for m in conversation.messages] == ["user", "assistant"]
    assert browser.page.visited == [CHATGPT_URL]
    assert browser.page_options == {"user_agent": "test-agent"}
    assert browser.closed == 1


async def test_nothing_rendered_closes_browser(browser, rendered, make_context) -> None:
    browser.page.counts = [0]
    with pytest.raises(ExtractionFailedException) as exc_info:
        await rendered.attempt(make_context(CHATGPT_URL))
    assert exc_info.value.reason == "no message containers rendered"
    assert browser.closed == 1


async def test_navigation_error_becomes_failure(browser, rendered, make_context) -> None:
    browser.page.goto_error = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
    with pytest.raises(ExtractionFailedException) as exc_info:
        await rendered.attempt(make_context(CHATGPT_URL))
    assert exc_info.value.reason == "browser error: net::ERR_NAME_NOT_RESOLVED"
    assert browser.closed == 1


async def test_cancellation_closes_browser(browser, rendered, make_context) -> None:
    browser.page.hang_on_goto = True
    task = asyncio.create_task(rendered.attempt(make_context(CHATGPT_URL)))
    await browser.page.navigating.wait()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert browser.closed == 1
