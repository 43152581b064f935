from __future__ import annotations

import logging

from share_export.core.exceptions import ExtractionFailedException
from share_export.extraction.base import (
    ExtractionContext,
    ExtractionStrategy,
    StrategyName,
)
from share_export.extraction.fetch import PageFetcher
from share_export.extraction.html import HtmlConversationParser, parse_document
from share_export.extraction.validation import validate_conversation
from share_export.models import Conversation
from share_export.rules.registry import RuleRegistry

logger = logging.getLogger(__name__)


class CommunityRuleStrategy(ExtractionStrategy):
    """Try every verified rule for the platform, best confidence first.

    Covers the case where the top rule has gone stale but an older or
    community-published rule still fits the current markup.
    """

    name = StrategyName.COMMUNITY_RULE

    def __init__(self, registry: RuleRegistry, fetcher: PageFetcher) -> None:
        self._registry = registry
        self._fetcher = fetcher

    async def attempt(self, context: ExtractionContext) -> Conversation:
        rules = self._registry.rules_for(context.platform)
        if not rules:
            raise ExtractionFailedException(
                f"no verified rules for {context.platform}"
            )

        soup = parse_document(await context.static_html(self._fetcher))
        parser = HtmlConversationParser(context.config)

        for rule in rules:
            try:
                conversation = parser.parse_soup(soup, rule, context.url)
                validate_conversation(conversation)
            except ExtractionFailedException as exc:
                logger.debug("Community rule %s rejected: %s", rule.id, exc.reason)
                continue
            logger.info("Community rule %s v%d matched", rule.id, rule.version)
            return conversation

        raise ExtractionFailedException(f"none of {len(rules)} rules matched")
