from __future__ import annotations

from datetime import UTC, datetime

import pytest

from share_export.core.exceptions import ExtractionFailedException
from share_export.extraction.html import (
    HtmlConversationParser,
    Matched,
    NoMatch,
    block_text,
    code_artifacts,
    explicit_role,
    match_rule,
    parse_document,
)
from share_export.models import ArtifactType, Platform, Role
from share_export.providers.registry import get_platform_config
from share_export.rules import ParsingRule, RuleRegistry, SelectorSet

CHATGPT_URL = "https://chatgpt.com/share/abc-123"
CHATGPT = get_platform_config(Platform.CHATGPT)


def _rule(selectors: SelectorSet, rule_id: str = "test-rule") -> ParsingRule:
    return ParsingRule(
        id=rule_id,
        platform=Platform.CHATGPT,
        selectors=selectors,
        confidence=0.9,
        verified=True,
    )


# ── Rule matching ────────────────────────────────────────────────────


def test_nested_containers_collapsed() -> None:
    soup = parse_document(
        '<div class="msg"><div class="msg">inner</div></div><div class="msg">two</div>'
    )
    result = match_rule(soup, _rule(SelectorSet(messages=".msg")))
    assert isinstance(result, Matched)
    assert len(result.containers) == 2


def test_no_containers() -> None:
    result = match_rule(parse_document("<p>nothing</p>"), _rule(SelectorSet(messages=".msg")))
    assert isinstance(result, NoMatch)


# ── Container helpers ────────────────────────────────────────────────


def test_block_text_keeps_paragraph_breaks() -> None:
    node = parse_document("<div><p>One</p><p>Two<br>lines</p><ul><li>a</li><li>b</li></ul></div>")
    assert block_text(node.div) == "One\nTwo\nlines\na\nb"


def test_block_text_leaves_source_untouched() -> None:
    soup = parse_document("<div><p>One</p><br></div>")
    block_text(soup.div)
    assert soup.div.find("br") is not None


def test_explicit_role_from_selectors_and_attributes() -> None:
    selectors = SelectorSet(messages=".m", user_role=".mine", assistant_role=".bot")
    soup = parse_document(
        '<div class="m mine">a</div>'
        '<div class="m"><span class="bot">b</span></div>'
        '<div class="m" data-role="human">c</div>'
        '<div class="m">d</div>'
    )
    roles = [explicit_role(tag, selectors) for tag in soup.select(".m")]
    assert roles == [Role.USER, Role.ASSISTANT, Role.USER, None]


def test_code_artifacts_deduplicated_and_filtered() -> None:
    soup = parse_document(
        "<div>"
        '<pre><code class="language-go">fmt.Println("hello")</code></pre>'
        '<pre><code class="language-go">fmt.Println("hello")</code></pre>'
        "<pre><code>x=1</code></pre>"
        "</div>"
    )
    (artifact,) = code_artifacts(soup.div, "pre code")
    assert artifact.language == "go"
    assert artifact.content == 'fmt.Println("hello")'


def test_code_language_from_pre_class() -> None:
    soup = parse_document(
        '<div><pre class="language-bash"><code>echo "hello there"</code></pre></div>'
    )
    (artifact,) = code_artifacts(soup.div, "pre code")
    assert artifact.language == "bash"


# ── Full pages ───────────────────────────────────────────────────────


def test_chatgpt_react_hooks_page(load_page, registry: RuleRegistry) -> None:
    rule = registry.best_rule(Platform.CHATGPT)
    conversation = HtmlConversationParser(CHATGPT).parse(
        load_page("chatgpt_react_hooks.html"), rule, CHATGPT_URL
    )

    assert conversation.title == "React Hooks Explained"
    assert conversation.platform == Platform.CHATGPT
    assert [m.role for m in conversation.messages] == [Role.USER, Role.ASSISTANT]

    user, assistant = conversation.messages
    assert user.content.text == "Hello! Can you help me understand how React hooks work?"
    assert user.content.artifacts == []

    (artifact,) = assistant.content.artifacts
    assert artifact.type == ArtifactType.CODE
    assert artifact.language == "javascript"
    assert artifact.content.startswith("import React, { useState, useEffect } from 'react';")
    assert "setCount(count + 1)" in artifact.content
    assert assistant.content.formatting.has_code_blocks
    assert assistant.content.text.startswith("Of course! React hooks")

    meta = conversation.metadata
    assert meta.message_count == 2
    assert meta.source_url == CHATGPT_URL
    assert user.timestamp == assistant.timestamp


def test_page_chrome_not_captured(load_page, registry: RuleRegistry) -> None:
    conversation = HtmlConversationParser(CHATGPT).parse(
        load_page("chatgpt_react_hooks.html"),
        registry.best_rule(Platform.CHATGPT),
        CHATGPT_URL,
    )
    texts = " ".join(m.content.text for m in conversation.messages)
    assert "Skip to content" not in texts
    assert "__remixContext" not in texts
    assert "Terms of use" not in texts


def test_noise_containers_dropped_and_roles_inferred(load_page, registry: RuleRegistry) -> None:
    rule = next(
        r for r in registry.rules_for(Platform.CHATGPT) if r.id == "chatgpt-conversation-turn"
    )
    conversation = HtmlConversationParser(CHATGPT).parse(
        load_page("chatgpt_turns_only.html"), rule, CHATGPT_URL
    )

    assert conversation.title == "Sorting a list in Python"
    assert [m.role for m in conversation.messages] == [Role.USER, Role.ASSISTANT]
    assert conversation.messages[0].content.text == "How do I sort tuples by the second item?"
    (artifact,) = conversation.messages[1].content.artifacts
    assert artifact.language == "python"


def test_timestamps_from_markup(load_page, registry: RuleRegistry) -> None:
    config = get_platform_config(Platform.CLAUDE)
    rule = next(
        r for r in registry.rules_for(Platform.CLAUDE) if r.id == "claude-data-role"
    )
    conversation = HtmlConversationParser(config).parse(
        load_page("claude_data_role.html"), rule, "https://claude.ai/share/abc-123"
    )

    assert conversation.title == "Writing a haiku"
    assert [m.timestamp for m in conversation.messages] == [
        datetime(2025, 1, 5, 15, 4, 5, tzinfo=UTC),
        datetime(2025, 1, 5, 15, 4, 9, tzinfo=UTC),
    ]
    assert conversation.messages[1].content.text.splitlines() == [
        "Crimson leaves falling",
        "Whispering to the cold earth",
        "Summer's last goodbye",
    ]


def test_links_and_images_recorded(load_page, registry: RuleRegistry) -> None:
    claude = HtmlConversationParser(get_platform_config(Platform.CLAUDE)).parse(
        load_page("claude_share.html"),
        registry.best_rule(Platform.CLAUDE),
        "https://claude.ai/share/abc-123",
    )
    answer = claude.messages[1]
    assert answer.content.formatting.has_links
    assert answer.content.formatting.is_markdown
    assert [a.type for a in answer.content.artifacts] == [ArtifactType.LINK]

    perplexity = HtmlConversationParser(get_platform_config(Platform.PERPLEXITY)).parse(
        load_page("perplexity_share.html"),
        registry.best_rule(Platform.PERPLEXITY),
        "https://www.perplexity.ai/search/denver-trails",
    )
    assert perplexity.title == "Best hiking trails near Denver"
    answer = perplexity.messages[1]
    assert answer.content.formatting.has_images
    assert answer.content.artifacts[0].content.endswith("royal-arch.jpg")


def test_title_falls_back_to_platform_default(load_page, registry: RuleRegistry) -> None:
    config = get_platform_config(Platform.GEMINI)
    conversation = HtmlConversationParser(config).parse(
        load_page("gemini_share.html"),
        registry.best_rule(Platform.GEMINI),
        "https://gemini.google.com/share/a1b2c3",
    )
    assert conversation.title == "Gemini Conversation"
    assert [m.role for m in conversation.messages] == [Role.USER, Role.ASSISTANT]


def test_unmatched_rule_fails(load_page, registry: RuleRegistry) -> None:
    with pytest.raises(ExtractionFailedException) as exc_info:
        HtmlConversationParser(CHATGPT).parse(
            load_page("empty_shell.html"),
            registry.best_rule(Platform.CHATGPT),
            CHATGPT_URL,
        )
    assert "matched no message containers" in exc_info.value.reason


def test_only_noise_fails() -> None:
    html = '<div class="m">Copy code</div><div class="m">   </div>'
    with pytest.raises(ExtractionFailedException) as exc_info:
        HtmlConversationParser(CHATGPT).parse(
            html, _rule(SelectorSet(messages=".m")), CHATGPT_URL
        )
    assert "no usable messages" in exc_info.value.reason
