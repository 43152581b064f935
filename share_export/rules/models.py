"""Parsing rule records held by the :class:`RuleRegistry`."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from share_export.models import Platform
from share_export.models.utils import utc_now


class _FrozenWireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class SelectorSet(_FrozenWireModel):
    """CSS selectors locating each conversation element on a share page.

    ``messages`` must select every message container in document order;
    the role selectors are matched against a container or its descendants.
    """

    messages: str
    user_role: str | None = None
    assistant_role: str | None = None
    content: str | None = None
    timestamp: str | None = None
    title: str = "title, h1"
    code_block: str = "pre code, .code-block"


class ParsingRule(_FrozenWireModel):
    """A published selector rule.  Immutable once constructed."""

    id: str
    platform: Platform
    version: int = 1
    selectors: SelectorSet
    confidence: float = Field(ge=0.0, le=1.0)
    verified: bool = False
    last_updated: datetime = Field(default_factory=utc_now)

    @property
    def key(self) -> tuple[str, int]:
        return (self.id, self.version)
