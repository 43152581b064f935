"""Perplexity thread links: ``https://www.perplexity.ai/search/<slug>``."""

from __future__ import annotations

import re
from datetime import UTC, datetime

from share_export.models import Platform
from share_export.providers.perplexity.endpoint import parse_thread
from share_export.providers.types import EndpointSpec, PlatformConfig
from share_export.rules.models import ParsingRule, SelectorSet

PERPLEXITY = PlatformConfig(
    platform=Platform.PERPLEXITY,
    display_name="Perplexity",
    pattern=re.compile(
        r"^(?i:https://www\.perplexity\.ai)/search/([a-zA-Z0-9_-]+)$"
    ),
    base_url="https://www.perplexity.ai",
    seed_rules=(
        ParsingRule(
            id="perplexity-thread-blocks",
            platform=Platform.PERPLEXITY,
            version=1,
            selectors=SelectorSet(
                messages='[data-testid="thread-query"], [data-testid="thread-answer"]',
                user_role='[data-testid="thread-query"]',
                assistant_role='[data-testid="thread-answer"]',
                content=".prose, .break-words",
                title="title, h1",
            ),
            confidence=0.86,
            verified=True,
            last_updated=datetime(2025, 2, 1, tzinfo=UTC),
        ),
    ),
    endpoints=(
        EndpointSpec(
            url_template="https://www.perplexity.ai/rest/thread/{share_id}",
            parse=parse_thread,
        ),
    ),
)
