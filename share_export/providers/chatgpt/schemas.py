"""Pydantic schemas for the ChatGPT shared-conversation JSON payload."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ChatGPTAuthor(BaseModel):
    role: str


class ChatGPTContent(BaseModel):
    content_type: str | None = None
    parts: list[Any] | None = None


class ChatGPTMessage(BaseModel):
    id: str | None = None
    author: ChatGPTAuthor
    content: ChatGPTContent
    create_time: float | None = None


class ChatGPTNode(BaseModel):
    id: str | None = None
    message: ChatGPTMessage | None = None
    parent: str | None = None
    children: list[str] = []


class ChatGPTSharedConversation(BaseModel):
    title: str | None = None
    create_time: float | None = None
    current_node: str | None = None
    mapping: dict[str, ChatGPTNode] = {}
    linear_conversation: list[ChatGPTNode] | None = None
