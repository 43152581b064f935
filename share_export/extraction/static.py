from __future__ import annotations

import logging

from share_export.core.exceptions import ExtractionFailedException
from share_export.extraction.base import (
    ExtractionContext,
    ExtractionStrategy,
    StrategyName,
)
from share_export.extraction.fetch import PageFetcher
from share_export.extraction.html import HtmlConversationParser
from share_export.models import Conversation
from share_export.rules.registry import RuleRegistry

logger = logging.getLogger(__name__)


class StaticMarkupStrategy(ExtractionStrategy):
    """Parse the page as delivered by the server with the best known rule."""

    name = StrategyName.STATIC_MARKUP

    def __init__(self, registry: RuleRegistry, fetcher: PageFetcher) -> None:
        self._registry = registry
        self._fetcher = fetcher

    async def attempt(self, context: ExtractionContext) -> Conversation:
        rule = self._registry.best_rule(context.platform)
        if rule is None:
            raise ExtractionFailedException(
                f"no verified rule for {context.platform}"
            )

        html = await context.static_html(self._fetcher)
        logger.debug("Static markup: applying rule %s to %s", rule.id, context.url)
        return HtmlConversationParser(context.config).parse(html, rule, context.url)
