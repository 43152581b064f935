from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import httpx
import pytest

from share_export.extraction.base import ExtractionContext
from share_export.extraction.fetch import PageFetcher
from share_export.models import (
    Artifact,
    ArtifactType,
    Conversation,
    Message,
    MessageContent,
    Platform,
    Role,
)
from share_export.providers.registry import validate_share_url
from share_export.rules.registry import RuleRegistry

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PAGES_DIR = FIXTURES_DIR / "pages"
ENDPOINTS_DIR = FIXTURES_DIR / "endpoints"

SENT_AT = datetime(2025, 1, 5, 15, 4, 5, tzinfo=UTC)


@pytest.fixture()
def load_page() -> Callable[[str], str]:
    """Return a loader for HTML fixtures under ``fixtures/pages``."""

    def _load(name: str) -> str:
        return (PAGES_DIR / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture()
def load_endpoint() -> Callable[[str], Any]:
    """Return a loader for JSON payloads under ``fixtures/endpoints``."""

    def _load(name: str) -> Any:
        return json.loads((ENDPOINTS_DIR / name).read_text(encoding="utf-8"))

    return _load


@pytest.fixture()
def registry() -> RuleRegistry:
    return RuleRegistry.with_seed_rules()


@pytest.fixture()
def make_context() -> Callable[..., ExtractionContext]:
    def _make(url: str, html: str | None = None) -> ExtractionContext:
        return ExtractionContext(match=validate_share_url(url), html=html)

    return _make


@pytest.fixture()
def make_fetcher() -> Callable[..., PageFetcher]:
    """Build a :class:`PageFetcher` served from a ``{url: response}`` map.

    Unknown URLs get a 404.  Every request is appended to the returned
    fetcher's ``requests`` list.
    """

    def _make(routes: dict[str, httpx.Response] | None = None) -> PageFetcher:
        routes = routes or {}
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            template = routes.get(str(request.url))
            if template is None:
                return httpx.Response(404)
            return httpx.Response(
                template.status_code,
                headers=template.headers,
                content=template.content,
            )

        fetcher = PageFetcher(transport=httpx.MockTransport(handler))
        fetcher.requests = seen  # type: ignore[attr-defined]
        return fetcher

    return _make


@pytest.fixture()
def conversation() -> Conversation:
    """A two-turn ChatGPT conversation with one code artifact and fixed times."""
    return Conversation.create(
        platform=Platform.CHATGPT,
        title="React Hooks Explained",
        source_url="https://chatgpt.com/share/abc-123",
        extracted_at=SENT_AT,
        messages=[
            Message(
                id="msg-1",
                role=Role.USER,
                content=MessageContent(text="How do I print in Python?"),
                timestamp=SENT_AT,
            ),
            Message(
                id="msg-2",
                role=Role.ASSISTANT,
                content=MessageContent(
                    text="Use the print function:\n\n```python\nprint(\"hello, world\")\n```",
                    artifacts=[
                        Artifact(
                            type=ArtifactType.CODE,
                            content='print("hello, world")',
                            language="python",
                        )
                    ],
                ),
                timestamp=SENT_AT,
            ),
        ],
    )
