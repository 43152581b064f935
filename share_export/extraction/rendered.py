"""Rendered-DOM strategy: let a headless browser run the page's scripts.

Share pages on every supported platform hydrate client-side, so the
static body is often an empty shell.  This strategy loads the page in
Chromium, waits for the message list to stop growing, opens collapsed
sections and hands the resulting DOM to the static parser.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from share_export.core.exceptions import ExtractionFailedException
from share_export.extraction.base import (
    ExtractionContext,
    ExtractionStrategy,
    StrategyName,
)
from share_export.extraction.fetch import DEFAULT_USER_AGENT
from share_export.extraction.html import HtmlConversationParser
from share_export.models import Conversation
from share_export.rules.registry import RuleRegistry

logger = logging.getLogger(__name__)

EXPANDER_SELECTOR = 'button[aria-expanded="false"], [role="button"][aria-expanded="false"]'
ELLIPSIS_TEXT = re.compile(r"^\s*(?:\.\.\.|…)\s*$")


async def wait_for_stable_count(
    page: Any,
    selector: str,
    *,
    poll_interval: float = 0.5,
    max_wait: float = 15.0,
    stable_checks: int = 2,
) -> int:
    """Poll the match count for *selector* until it settles.

    Returns once the count is non-zero and has not grown for
    *stable_checks* consecutive checks, or the last observed count once
    *max_wait* seconds have passed (possibly zero).
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + max_wait
    previous: int | None = None
    unchanged = 0

    while True:
        count = await page.locator(selector).count()
        unchanged = unchanged + 1 if count > 0 and count == previous else 0
        if unchanged >= stable_checks:
            return count
        if loop.time() >= deadline:
            logger.debug("Count for %r did not settle (last=%d)", selector, count)
            return count
        previous = count
        await asyncio.sleep(poll_interval)


async def expand_collapsed(page: Any, *, settle: float = 0.3, limit: int = 25) -> int:
    """Click collapsed-section toggles and ellipsis placeholders.

    Returns how many were activated.  A toggle that cannot be clicked
    (detached, hidden, covered) is skipped.
    """
    targets = [
        *await page.locator(EXPANDER_SELECTOR).all(),
        *await page.get_by_text(ELLIPSIS_TEXT).all(),
    ]

    clicked = 0
    for target in targets[:limit]:
        try:
            await target.click(timeout=2000)
        except PlaywrightError as exc:
            logger.debug("Expander click skipped: %s", exc.message)
            continue
        clicked += 1
        await asyncio.sleep(settle)
    return clicked


class RenderedDomStrategy(ExtractionStrategy):
    name = StrategyName.RENDERED_DOM

    def __init__(
        self,
        registry: RuleRegistry,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        navigation_timeout: float = 30.0,
        poll_interval: float = 0.5,
        max_wait: float = 15.0,
        settle: float = 0.3,
    ) -> None:
        self._registry = registry
        self._user_agent = user_agent
        self._navigation_timeout = navigation_timeout
        self._poll_interval = poll_interval
        self._max_wait = max_wait
        self._settle = settle

    async def attempt(self, context: ExtractionContext) -> Conversation:
        if context.html is not None:
            raise ExtractionFailedException("markup supplied by caller; nothing to render")

        rule = self._registry.best_rule(context.platform)
        if rule is None:
            raise ExtractionFailedException(f"no verified rule for {context.platform}")

        try:
            html = await self._render(context.url, rule.selectors.messages)
        except PlaywrightError as exc:
            raise ExtractionFailedException(f"browser error: {exc.message}") from exc

        return HtmlConversationParser(context.config).parse(html, rule, context.url)

    async def _render(self, url: str, message_selector: str) -> str:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True)
            try:
                page = await browser.new_page(user_agent=self._user_agent)
                await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self._navigation_timeout * 1000,
                )
                count = await wait_for_stable_count(
                    page,
                    message_selector,
                    poll_interval=self._poll_interval,
                    max_wait=self._max_wait,
                )
                if count == 0:
                    raise ExtractionFailedException("no message containers rendered")

                expanded = await expand_collapsed(page, settle=self._settle)
                logger.debug(
                    "Rendered %s: %d containers, %d sections expanded",
                    url,
                    count,
                    expanded,
                )
                return await page.content()
            finally:
                await browser.close()
