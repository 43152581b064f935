"""Gemini share links: ``https://gemini.google.com/share/<id>``.

Gemini exposes no structured endpoint for shares; content is rendered
client-side into ``user-query`` / ``model-response`` custom elements.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

from share_export.models import Platform
from share_export.providers.types import PlatformConfig
from share_export.rules.models import ParsingRule, SelectorSet

GEMINI = PlatformConfig(
    platform=Platform.GEMINI,
    display_name="Gemini",
    pattern=re.compile(r"^(?i:https://gemini\.google\.com)/share/([a-fA-F0-9]+)$"),
    base_url="https://gemini.google.com",
    seed_rules=(
        ParsingRule(
            id="gemini-custom-elements",
            platform=Platform.GEMINI,
            version=1,
            selectors=SelectorSet(
                messages="user-query, model-response",
                user_role="user-query",
                assistant_role="model-response",
                content=".query-text, message-content, .markdown",
                title="title, h1",
                code_block="pre code, code-block code",
            ),
            confidence=0.9,
            verified=True,
            last_updated=datetime(2025, 4, 1, tzinfo=UTC),
        ),
    ),
)
