"""Maps Claude's ``chat_snapshots`` JSON onto the conversation model."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel

from share_export.extraction.heuristics import (
    fenced_code_artifacts,
    markdown_formatting,
)
from share_export.models import Conversation, Message, MessageContent, Platform, Role


class ClaudeContentBlock(BaseModel):
    type: str
    text: str | None = None


class ClaudeSnapshotMessage(BaseModel):
    sender: Literal["human", "assistant"]
    text: str = ""
    content: list[ClaudeContentBlock] = []
    index: int | None = None
    created_at: datetime | None = None

    def full_text(self) -> str:
        blocks = [b.text for b in self.content if b.type == "text" and b.text]
        return ("\n\n".join(blocks) if blocks else self.text).strip()


class ClaudeSnapshot(BaseModel):
    snapshot_name: str | None = None
    name: str | None = None
    chat_messages: list[ClaudeSnapshotMessage] = []


def parse_chat_snapshot(payload: Any, source_url: str) -> Conversation:
    snapshot = ClaudeSnapshot.model_validate(payload)
    ordered = sorted(
        enumerate(snapshot.chat_messages),
        key=lambda pair: (pair[1].index if pair[1].index is not None else pair[0]),
    )

    messages: list[Message] = []
    for _, raw in ordered:
        text = raw.full_text()
        if not text:
            continue
        kwargs: dict[str, Any] = {}
        if raw.created_at is not None:
            kwargs["timestamp"] = raw.created_at
        messages.append(
            Message(
                role=Role.USER if raw.sender == "human" else Role.ASSISTANT,
                content=MessageContent(
                    text=text,
                    artifacts=fenced_code_artifacts(text),
                    formatting=markdown_formatting(text),
                ),
                **kwargs,
            )
        )

    return Conversation.create(
        platform=Platform.CLAUDE,
        title=(snapshot.snapshot_name or snapshot.name or "").strip(),
        messages=messages,
        source_url=source_url,
    )
