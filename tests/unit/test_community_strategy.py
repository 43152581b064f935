from __future__ import annotations

import pytest

from share_export.core.exceptions import ExtractionFailedException
from share_export.extraction.base import StrategyName
from share_export.extraction.community import CommunityRuleStrategy
from share_export.extraction.fetch import PageFetcher
from share_export.models import Platform, Role
from share_export.rules import RuleRegistry
from share_export.testing.strategy_test_kit import StrategyTestKit

CHATGPT_URL = "https://chatgpt.com/share/abc-123"
CLAUDE_URL = "https://claude.ai/share/abc-123"


class TestChatGPTCommunityRule(StrategyTestKit):
    """The top ChatGPT rule no longer fits; an older turn-based rule does."""

    strategy_name = StrategyName.COMMUNITY_RULE
    platform = Platform.CHATGPT
    expected_roles = [Role.USER, Role.ASSISTANT]

    @pytest.fixture()
    def strategy_fixture(self, registry, make_context, load_page):
        context = make_context(CHATGPT_URL, load_page("chatgpt_turns_only.html"))
        return CommunityRuleStrategy(registry, PageFetcher()), context


class TestClaudeCommunityRule(StrategyTestKit):
    strategy_name = StrategyName.COMMUNITY_RULE
    platform = Platform.CLAUDE
    expected_roles = [Role.USER, Role.ASSISTANT]

    @pytest.fixture()
    def strategy_fixture(self, registry, make_context, load_page):
        context = make_context(CLAUDE_URL, load_page("claude_data_role.html"))
        return CommunityRuleStrategy(registry, PageFetcher()), context


async def test_best_rule_still_preferred(registry, make_context, load_page) -> None:
    context = make_context(CHATGPT_URL, load_page("chatgpt_react_hooks.html"))
    conversation = await CommunityRuleStrategy(registry, PageFetcher()).attempt(context)
    assert conversation.title == "React Hooks Explained"
    assert len(conversation.messages) == 2


async def test_no_rule_matches(registry, make_context, load_page) -> None:
    context = make_context(CHATGPT_URL, load_page("empty_shell.html"))
    with pytest.raises(ExtractionFailedException) as exc_info:
        await CommunityRuleStrategy(registry, PageFetcher()).attempt(context)
    assert exc_info.value.reason == "none of 3 rules matched"


async def test_no_rules_for_platform(make_context, load_page) -> None:
    context = make_context(CHATGPT_URL, load_page("chatgpt_react_hooks.html"))
    with pytest.raises(ExtractionFailedException):
        await CommunityRuleStrategy(RuleRegistry(), PageFetcher()).attempt(context)
