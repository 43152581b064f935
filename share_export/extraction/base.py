from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

from share_export.models import Conversation, Platform

if TYPE_CHECKING:
    from share_export.extraction.fetch import PageFetcher
    from share_export.providers.registry import PlatformMatch
    from share_export.providers.types import PlatformConfig


class StrategyName(StrEnum):
    STATIC_MARKUP = "static_markup"
    STRUCTURED_ENDPOINT = "structured_endpoint"
    RENDERED_DOM = "rendered_dom"
    COMMUNITY_RULE = "community_rule"
    SEMANTIC_FALLBACK = "semantic_fallback"


DEFAULT_ORDER: tuple[StrategyName, ...] = (
    StrategyName.STATIC_MARKUP,
    StrategyName.STRUCTURED_ENDPOINT,
    StrategyName.RENDERED_DOM,
    StrategyName.COMMUNITY_RULE,
    StrategyName.SEMANTIC_FALLBACK,
)


@dataclass
class ExtractionContext:
    """Per-request state handed to every strategy attempt.

    ``html`` is caller-supplied markup; when present no strategy fetches
    the page itself.  The fetched static body is memoised here so the
    static and community strategies download it at most once per request.
    """

    match: PlatformMatch
    html: str | None = None
    _static_html: str | None = field(default=None, repr=False)

    @property
    def url(self) -> str:
        return self.match.url

    @property
    def platform(self) -> Platform:
        return self.match.platform

    @property
    def share_id(self) -> str:
        return self.match.share_id

    @property
    def config(self) -> PlatformConfig:
        return self.match.config

    async def static_html(self, fetcher: PageFetcher) -> str:
        if self.html is not None:
            return self.html
        if self._static_html is None:
            self._static_html = await fetcher.fetch_html(self.url)
        return self._static_html


class ExtractionStrategy(ABC):
    """One way of recovering a conversation from a share link.

    Subclasses set :attr:`name` and implement :meth:`attempt`, raising
    :class:`ExtractionFailedException` with a short reason when they
    cannot produce a conversation.
    """

    name: ClassVar[StrategyName]

    @abstractmethod
    async def attempt(self, context: ExtractionContext) -> Conversation: ...
