"""Claude share links: ``https://claude.ai/share/<id>``."""

from __future__ import annotations

import re
from datetime import UTC, datetime

from share_export.models import Platform
from share_export.providers.claude.endpoint import parse_chat_snapshot
from share_export.providers.types import EndpointSpec, PlatformConfig
from share_export.rules.models import ParsingRule, SelectorSet

CLAUDE = PlatformConfig(
    platform=Platform.CLAUDE,
    display_name="Claude",
    pattern=re.compile(r"^(?i:https://claude\.ai)/share/([a-fA-F0-9-]+)$"),
    base_url="https://claude.ai",
    seed_rules=(
        ParsingRule(
            id="claude-font-message",
            platform=Platform.CLAUDE,
            version=2,
            selectors=SelectorSet(
                messages=(
                    '[data-testid="user-message"], '
                    ".font-claude-response, .font-claude-message"
                ),
                user_role='[data-testid="user-message"]',
                assistant_role=".font-claude-response, .font-claude-message",
                content=".standard-markdown, .prose, .whitespace-pre-wrap",
                timestamp="time[datetime]",
                title="title, .conversation-title, h1",
            ),
            confidence=0.93,
            verified=True,
            last_updated=datetime(2025, 5, 15, tzinfo=UTC),
        ),
        ParsingRule(
            id="claude-data-role",
            platform=Platform.CLAUDE,
            version=1,
            selectors=SelectorSet(
                messages="[data-role]",
                user_role='[data-role="user"]',
                assistant_role='[data-role="assistant"]',
                content=".prose, .message-content",
                timestamp="time, .timestamp",
                title="title, .conversation-title",
            ),
            confidence=0.9,
            verified=True,
            last_updated=datetime(2024, 11, 1, tzinfo=UTC),
        ),
    ),
    endpoints=(
        EndpointSpec(
            url_template=(
                "https://claude.ai/api/chat_snapshots/{share_id}"
                "?rendering_mode=messages&render_all_tools=true"
            ),
            parse=parse_chat_snapshot,
        ),
    ),
)
