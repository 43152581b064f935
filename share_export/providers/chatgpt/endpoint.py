"""Maps ChatGPT's ``backend-api/share`` JSON onto the conversation model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from share_export.extraction.heuristics import (
    fenced_code_artifacts,
    markdown_formatting,
)
from share_export.models import Conversation, Message, MessageContent, Platform, Role
from share_export.providers.chatgpt.schemas import (
    ChatGPTMessage,
    ChatGPTNode,
    ChatGPTSharedConversation,
)

logger = logging.getLogger(__name__)

# Timestamps above this threshold are treated as milliseconds (year 2100+)
_MAX_SECONDS_EPOCH = 4_102_444_800  # 2100-01-01 00:00 UTC

_ROLES = {"user": Role.USER, "assistant": Role.ASSISTANT}


def _safe_timestamp(ts: float | int | None) -> datetime | None:
    """Convert a Unix epoch to datetime, handling ms-vs-s ambiguity."""
    if ts is None:
        return None
    ts = float(ts)
    if ts > _MAX_SECONDS_EPOCH:
        ts /= 1000.0
    return datetime.fromtimestamp(ts, tz=UTC)


def _ordered_nodes(shared: ChatGPTSharedConversation) -> list[ChatGPTNode]:
    """Return message nodes in conversational order.

    Prefers the server's linearised list, then the active branch walked
    back from ``current_node``, then every node sorted by creation time.
    """
    if shared.linear_conversation:
        return shared.linear_conversation

    if shared.current_node and shared.current_node in shared.mapping:
        branch: list[ChatGPTNode] = []
        node_id: str | None = shared.current_node
        seen: set[str] = set()
        while node_id and node_id in shared.mapping and node_id not in seen:
            seen.add(node_id)
            node = shared.mapping[node_id]
            branch.append(node)
            node_id = node.parent
        return list(reversed(branch))

    nodes = list(shared.mapping.values())
    return sorted(
        nodes,
        key=lambda n: (
            n.message is None or n.message.create_time is None,
            n.message.create_time if n.message and n.message.create_time else 0.0,
        ),
    )


def _message_text(message: ChatGPTMessage) -> str:
    if message.content.content_type not in (None, "text", "multimodal_text"):
        return ""
    parts = message.content.parts or []
    return "\n".join(p for p in parts if isinstance(p, str)).strip()


def parse_shared_conversation(payload: Any, source_url: str) -> Conversation:
    shared = ChatGPTSharedConversation.model_validate(payload)

    messages: list[Message] = []
    for node in _ordered_nodes(shared):
        if node.message is None:
            continue
        role = _ROLES.get(node.message.author.role)
        # Skip system/tool messages and empty content
        if role is None:
            continue
        text = _message_text(node.message)
        if not text:
            continue

        published = _safe_timestamp(node.message.create_time)
        kwargs: dict[str, Any] = {}
        if published is not None:
            kwargs["timestamp"] = published
        messages.append(
            Message(
                role=role,
                content=MessageContent(
                    text=text,
                    artifacts=fenced_code_artifacts(text),
                    formatting=markdown_formatting(text),
                ),
                **kwargs,
            )
        )

    logger.debug("Mapped %d ChatGPT messages from structured payload", len(messages))
    return Conversation.create(
        platform=Platform.CHATGPT,
        title=(shared.title or "").strip(),
        messages=messages,
        source_url=source_url,
    )
