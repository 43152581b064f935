"""Last-resort strategy: ask a language model to read the page.

Only a bounded plain-text excerpt is sent.  The reply must match
:class:`SemanticConversation`; anything else counts as a failed attempt.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ValidationError

from share_export.core.exceptions import ExtractionFailedException
from share_export.extraction.base import (
    ExtractionContext,
    ExtractionStrategy,
    StrategyName,
)
from share_export.extraction.fetch import PageFetcher
from share_export.extraction.heuristics import (
    clean_text,
    fenced_code_artifacts,
    is_noise,
    markdown_formatting,
)
from share_export.extraction.html import block_text, parse_document
from share_export.llm.base import BaseLLMClient
from share_export.models import Conversation, Message, MessageContent, Role

logger = logging.getLogger(__name__)

MAX_EXCERPT_CHARS = 12_000

_STRIPPED_TAGS = ["script", "style", "noscript", "svg", "template", "iframe"]

_PROMPT = """\
The text below was taken from a publicly shared {platform} conversation page.
Recover the conversation it contains.

Rules:
- Return every turn in the order it appears.
- role is "user" for the person's prompts and "assistant" for the model's replies.
- Keep code exactly as written, inside ``` fences with a language tag when known.
- Ignore navigation, buttons, cookie banners and other page chrome.
- title is the conversation title if the page shows one, otherwise an empty string.

Page text:
---
{excerpt}
---
"""


class SemanticMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    text: str


class SemanticConversation(BaseModel):
    title: str = ""
    messages: list[SemanticMessage]


def build_excerpt(html: str, limit: int = MAX_EXCERPT_CHARS) -> str:
    """Visible page text with scripts and styles removed, capped at *limit*."""
    soup = parse_document(html)
    for tag in soup.find_all(_STRIPPED_TAGS):
        tag.decompose()
    root = soup.body or soup
    return block_text(root)[:limit]


class SemanticFallbackStrategy(ExtractionStrategy):
    name = StrategyName.SEMANTIC_FALLBACK

    def __init__(self, llm: BaseLLMClient | None, fetcher: PageFetcher) -> None:
        self._llm = llm
        self._fetcher = fetcher

    async def attempt(self, context: ExtractionContext) -> Conversation:
        if self._llm is None:
            raise ExtractionFailedException("no language model configured")

        excerpt = build_excerpt(await context.static_html(self._fetcher))
        if not excerpt:
            raise ExtractionFailedException("page has no visible text")

        prompt = _PROMPT.format(
            platform=context.config.display_name, excerpt=excerpt
        )
        raw = await self._llm.structured_completion(
            prompt, SemanticConversation.model_json_schema()
        )

        try:
            reply = SemanticConversation.model_validate_json(raw)
        except ValidationError as exc:
            raise ExtractionFailedException(
                f"model reply did not match schema ({exc.error_count()} errors)"
            ) from exc

        return self._to_conversation(reply, context)

    @staticmethod
    def _to_conversation(
        reply: SemanticConversation, context: ExtractionContext
    ) -> Conversation:
        messages: list[Message] = []
        for item in reply.messages:
            text = clean_text(item.text)
            code = fenced_code_artifacts(text)
            if not text or is_noise(text, has_code=bool(code)):
                continue
            messages.append(
                Message(
                    role=Role(item.role),
                    content=MessageContent(
                        text=text,
                        artifacts=code,
                        formatting=markdown_formatting(text),
                    ),
                )
            )

        config = context.config
        title = clean_text(reply.title)
        if not title or title.lower() == config.display_name.lower():
            title = config.default_title

        logger.info(
            "Semantic fallback recovered %d of %d messages",
            len(messages),
            len(reply.messages),
        )
        return Conversation.create(
            platform=context.platform,
            title=title,
            messages=messages,
            source_url=context.url,
        )
