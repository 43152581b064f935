"""Maps Perplexity's thread JSON onto the conversation model.

Each thread entry is one query/answer pair.  The answer lives either in
a ``markdown_block`` inside ``blocks`` or, on older payloads, in a flat
``answer`` field.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from share_export.extraction.heuristics import (
    fenced_code_artifacts,
    markdown_formatting,
)
from share_export.models import Conversation, Message, MessageContent, Platform, Role

_TITLE_LIMIT = 100


class PerplexityMarkdownBlock(BaseModel):
    answer: str | None = None
    chunks: list[str] = []


class PerplexityBlock(BaseModel):
    markdown_block: PerplexityMarkdownBlock | None = None


class PerplexityEntry(BaseModel):
    query_str: str = ""
    thread_title: str | None = None
    answer: str | None = None
    blocks: list[PerplexityBlock] = []

    def answer_text(self) -> str:
        for block in self.blocks:
            md = block.markdown_block
            if md is None:
                continue
            if md.answer:
                return md.answer.strip()
            if md.chunks:
                return "".join(md.chunks).strip()
        return (self.answer or "").strip()


class PerplexityThread(BaseModel):
    entries: list[PerplexityEntry] = []


def _content(text: str) -> MessageContent:
    return MessageContent(
        text=text,
        artifacts=fenced_code_artifacts(text),
        formatting=markdown_formatting(text),
    )


def parse_thread(payload: Any, source_url: str) -> Conversation:
    thread = PerplexityThread.model_validate(payload)

    messages: list[Message] = []
    for entry in thread.entries:
        query = entry.query_str.strip()
        if query:
            messages.append(Message(role=Role.USER, content=_content(query)))
        answer = entry.answer_text()
        if answer:
            messages.append(Message(role=Role.ASSISTANT, content=_content(answer)))

    title = ""
    if thread.entries:
        first = thread.entries[0]
        title = (first.thread_title or first.query_str).strip()[:_TITLE_LIMIT]

    return Conversation.create(
        platform=Platform.PERPLEXITY,
        title=title,
        messages=messages,
        source_url=source_url,
    )
