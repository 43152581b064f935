"""Canonical conversation data model.

The :class:`Conversation` value is the only contract between extraction
and document generation.  Wire form (``model_dump(by_alias=True)``) uses
camelCase keys so the JSON export matches what downstream tools expect.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from share_export.models.utils import generate_id, utc_now

MIN_ARTIFACT_LENGTH = 10
"""Artifacts whose content is this short or shorter are noise."""


class Platform(StrEnum):
    CHATGPT = "chatgpt"
    CLAUDE = "claude"
    GEMINI = "gemini"
    PERPLEXITY = "perplexity"


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ArtifactType(StrEnum):
    CODE = "code"
    IMAGE = "image"
    FILE = "file"
    LINK = "link"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Artifact(_WireModel):
    type: ArtifactType
    content: str
    language: str | None = None

    @property
    def is_useful(self) -> bool:
        return len(self.content.strip()) > MIN_ARTIFACT_LENGTH


class Formatting(_WireModel):
    is_markdown: bool = False
    has_code_blocks: bool = False
    has_links: bool = False
    has_images: bool = False


class MessageContent(_WireModel):
    text: str
    artifacts: list[Artifact] = Field(default_factory=list)
    formatting: Formatting = Field(default_factory=Formatting)

    def code_artifacts(self) -> list[Artifact]:
        return [a for a in self.artifacts if a.type == ArtifactType.CODE]


class Message(_WireModel):
    id: str = Field(default_factory=generate_id)
    role: Role
    content: MessageContent
    timestamp: datetime = Field(default_factory=utc_now)


class ConversationMetadata(_WireModel):
    platform: Platform
    extracted_at: datetime = Field(default_factory=utc_now)
    message_count: int
    title: str
    source_url: str | None = None


class Conversation(_WireModel):
    id: str = Field(default_factory=generate_id)
    title: str
    platform: Platform
    messages: list[Message]
    metadata: ConversationMetadata

    @classmethod
    def create(
        cls,
        *,
        platform: Platform,
        title: str,
        messages: list[Message],
        source_url: str | None = None,
        extracted_at: datetime | None = None,
    ) -> Conversation:
        """Assemble a conversation and derive its metadata block."""
        return cls(
            title=title,
            platform=platform,
            messages=messages,
            metadata=ConversationMetadata(
                platform=platform,
                extracted_at=extracted_at or utc_now(),
                message_count=len(messages),
                title=title,
                source_url=source_url,
            ),
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
