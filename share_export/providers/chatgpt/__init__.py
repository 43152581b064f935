"""ChatGPT share links: ``https://chatgpt.com/share/<id>``."""

from __future__ import annotations

import re
from datetime import UTC, datetime

from share_export.models import Platform
from share_export.providers.chatgpt.endpoint import parse_shared_conversation
from share_export.providers.types import EndpointSpec, PlatformConfig
from share_export.rules.models import ParsingRule, SelectorSet

_AUTHOR_ROLE = "[data-message-author-role]"
_USER = '[data-message-author-role="user"]'
_ASSISTANT = '[data-message-author-role="assistant"]'
_CONTENT = ".markdown, .prose, .whitespace-pre-wrap"

CHATGPT = PlatformConfig(
    platform=Platform.CHATGPT,
    display_name="ChatGPT",
    pattern=re.compile(
        r"^(?i:https://(?:chatgpt\.com|chat\.openai\.com))/share/([a-fA-F0-9-]+)$"
    ),
    base_url="https://chatgpt.com",
    seed_rules=(
        ParsingRule(
            id="chatgpt-author-role",
            platform=Platform.CHATGPT,
            version=3,
            selectors=SelectorSet(
                messages=_AUTHOR_ROLE,
                user_role=_USER,
                assistant_role=_ASSISTANT,
                content=_CONTENT,
                timestamp="time[datetime]",
                title="title, h1",
            ),
            confidence=0.95,
            verified=True,
            last_updated=datetime(2025, 6, 1, tzinfo=UTC),
        ),
        ParsingRule(
            id="chatgpt-conversation-turn",
            platform=Platform.CHATGPT,
            version=2,
            selectors=SelectorSet(
                messages='article[data-testid^="conversation-turn"], .conversation-turn',
                user_role=_USER,
                assistant_role=_ASSISTANT,
                content=_CONTENT,
                timestamp="time[datetime]",
                title='title, h1, [data-testid="conversation-title"], .conversation-title',
            ),
            confidence=0.9,
            verified=True,
            last_updated=datetime(2025, 3, 1, tzinfo=UTC),
        ),
        ParsingRule(
            id="chatgpt-legacy-group",
            platform=Platform.CHATGPT,
            version=1,
            selectors=SelectorSet(
                messages='[role="presentation"] .group, .group',
                user_role=_USER,
                assistant_role=_ASSISTANT,
                content=_CONTENT,
                title="title, h1",
            ),
            confidence=0.82,
            verified=True,
            last_updated=datetime(2024, 5, 1, tzinfo=UTC),
        ),
    ),
    endpoints=(
        EndpointSpec(
            url_template="https://chatgpt.com/backend-api/share/{share_id}",
            parse=parse_shared_conversation,
        ),
    ),
)
