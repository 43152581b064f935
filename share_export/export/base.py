from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import datetime
from enum import StrEnum
from typing import ClassVar, Literal

from pydantic import BaseModel, Field

from share_export.models import Conversation, Role, utc_now


class ExportFormat(StrEnum):
    PDF = "pdf"
    MARKDOWN = "markdown"
    JSON = "json"
    CSV = "csv"
    TEXT = "text"


class ExportOptions(BaseModel):
    include_metadata: bool = True
    include_timestamps: bool = True
    include_artifacts: bool = True
    page_size: Literal["A4", "Letter"] = "A4"
    font_size: int = Field(default=12, ge=6, le=32)


class ExportGenerator(ABC):
    """Renders a :class:`Conversation` into one document format."""

    format: ClassVar[ExportFormat]
    content_type: ClassVar[str]
    file_extension: ClassVar[str]

    @abstractmethod
    def generate(
        self, conversation: Conversation, options: ExportOptions | None = None
    ) -> bytes: ...


_ROLE_LABELS: dict[Role, str] = {
    Role.USER: "You",
    Role.ASSISTANT: "Assistant",
    Role.SYSTEM: "System",
}

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE = re.compile(r"\s+")
_FILENAME_STEM_LIMIT = 50


def role_label(role: Role) -> str:
    return _ROLE_LABELS[role]


def format_long(dt: datetime) -> str:
    """``Jan 5, 2025, 3:04:05 PM``"""
    return f"{dt:%b} {dt.day}, {dt.year}, {dt.hour % 12 or 12}:{dt:%M:%S %p}"


def format_short(dt: datetime) -> str:
    """``Jan 5, 2025, 3:04 PM``"""
    return f"{dt:%b} {dt.day}, {dt.year}, {dt.hour % 12 or 12}:{dt:%M %p}"


def metadata_lines(conversation: Conversation) -> list[tuple[str, str]]:
    meta = conversation.metadata
    lines = [
        ("Platform", conversation.platform.value.upper()),
        ("Extracted", format_long(meta.extracted_at)),
        ("Messages", str(meta.message_count)),
    ]
    if meta.source_url:
        lines.append(("Original URL", meta.source_url))
    return lines


def safe_filename(title: str, extension: str, *, today: datetime | None = None) -> str:
    """Filesystem-safe name such as ``react_hooks_2025-01-05.md``."""
    stem = _UNSAFE_FILENAME_CHARS.sub("", title or "conversation")
    stem = _WHITESPACE.sub("_", stem.strip())[:_FILENAME_STEM_LIMIT].lower()
    date_part = (today or utc_now()).strftime("%Y-%m-%d")
    return f"{stem or 'conversation'}_{date_part}.{extension}"
