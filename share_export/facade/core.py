"""Main facade for the share_export library."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from share_export.config import parse_config
from share_export.core.exceptions import ExportFailedException
from share_export.export.base import ExportFormat, ExportOptions, safe_filename
from share_export.export.registry import create_export_generator
from share_export.extraction.base import DEFAULT_ORDER, ExtractionStrategy, StrategyName
from share_export.extraction.community import CommunityRuleStrategy
from share_export.extraction.endpoint import StructuredEndpointStrategy
from share_export.extraction.fetch import PageFetcher
from share_export.extraction.rendered import RenderedDomStrategy
from share_export.extraction.semantic import SemanticFallbackStrategy
from share_export.extraction.static import StaticMarkupStrategy
from share_export.facade.types import ExportResult
from share_export.models import Conversation, Platform
from share_export.orchestration.orchestrator import ExtractionRun, StrategyOrchestrator
from share_export.orchestration.outcomes import OutcomeLog
from share_export.orchestration.selector import AdaptiveStrategySelector
from share_export.providers.registry import PlatformMatch, validate_share_url
from share_export.rules.models import ParsingRule
from share_export.rules.registry import RuleRegistry

if TYPE_CHECKING:
    from share_export.llm.base import BaseLLMClient

logger = logging.getLogger(__name__)


def default_strategies(
    registry: RuleRegistry,
    fetcher: PageFetcher,
    llm_client: BaseLLMClient | None = None,
    enabled: Iterable[StrategyName] = DEFAULT_ORDER,
) -> list[ExtractionStrategy]:
    """Build the built-in strategies, keeping only those in *enabled*."""
    built: dict[StrategyName, ExtractionStrategy] = {
        StrategyName.STATIC_MARKUP: StaticMarkupStrategy(registry, fetcher),
        StrategyName.STRUCTURED_ENDPOINT: StructuredEndpointStrategy(fetcher),
        StrategyName.RENDERED_DOM: RenderedDomStrategy(
            registry, user_agent=fetcher.user_agent
        ),
        StrategyName.COMMUNITY_RULE: CommunityRuleStrategy(registry, fetcher),
        StrategyName.SEMANTIC_FALLBACK: SemanticFallbackStrategy(llm_client, fetcher),
    }
    wanted = set(enabled)
    return [strategy for name, strategy in built.items() if name in wanted]


class ShareExport:
    """Main entry point for the share_export library.

    Turns a public chatbot share link into a :class:`Conversation` and
    renders it as a document.

    Usage::

        exporter = ShareExport.from_config({"llm": {"api_key": "sk-..."}})
        result = await exporter.export(
            "https://chatgpt.com/share/abc-123", ExportFormat.MARKDOWN
        )
        Path(result.filename).write_bytes(result.content)

    The rule registry and outcome log are shared by every request made
    through one instance; nothing else is kept between requests.
    """

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        *,
        fetcher: PageFetcher | None = None,
        llm_client: BaseLLMClient | None = None,
        outcomes: OutcomeLog | None = None,
        strategies: Iterable[ExtractionStrategy] | None = None,
        timeouts: Mapping[StrategyName, float] | None = None,
        min_samples: int = 3,
    ) -> None:
        self._registry = registry or RuleRegistry.with_seed_rules()
        self._fetcher = fetcher or PageFetcher()
        self._outcomes = outcomes if outcomes is not None else OutcomeLog()
        self._selector = AdaptiveStrategySelector(
            self._outcomes, min_samples=min_samples
        )
        if strategies is None:
            strategies = default_strategies(self._registry, self._fetcher, llm_client)
        self._orchestrator = StrategyOrchestrator(
            strategies,
            outcomes=self._outcomes,
            selector=self._selector,
            timeouts=timeouts,
        )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ShareExport:
        """Construct a ShareExport instance from a configuration dict."""
        parsed = parse_config(config)
        registry = RuleRegistry.with_seed_rules(feed=parsed.feed)
        settings = parsed.settings
        return cls(
            registry,
            fetcher=parsed.fetcher,
            llm_client=parsed.llm_client,
            strategies=default_strategies(
                registry, parsed.fetcher, parsed.llm_client, settings.enabled
            ),
            timeouts=settings.timeouts,
            min_samples=settings.min_samples,
        )

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    @property
    def outcomes(self) -> OutcomeLog:
        return self._outcomes

    # ── Detection ────────────────────────────────────────────────────

    def detect(self, url: str) -> PlatformMatch:
        """Validate *url* and identify its platform without any network access."""
        return validate_share_url(url)

    # ── Extraction ───────────────────────────────────────────────────

    async def run(self, url: str, html: str | None = None) -> ExtractionRun:
        """Extract and return the full run record, successful or not."""
        return await self._orchestrator.run(url, html)

    async def extract(self, url: str, html: str | None = None) -> Conversation:
        """Extract the conversation behind *url*.

        Args:
            url: Public share link.
            html: Page markup already in hand; when given, no strategy
                downloads the page itself.

        Raises:
            InvalidUrlError: *url* is not an absolute HTTPS URL.
            UnsupportedPlatformError: *url* matches no known platform.
            AllStrategiesFailedError: every strategy was tried and failed.
        """
        return await self._orchestrator.extract(url, html)

    # ── Export ───────────────────────────────────────────────────────

    def render(
        self,
        conversation: Conversation,
        fmt: ExportFormat | str,
        options: ExportOptions | None = None,
    ) -> tuple[bytes, str, str]:
        """Render an already-extracted conversation.

        Returns ``(content, filename, content_type)``.
        """
        generator = create_export_generator(fmt)
        try:
            content = generator.generate(conversation, options or ExportOptions())
        except (ValueError, RuntimeError) as exc:
            raise ExportFailedException(str(exc)) from exc
        filename = safe_filename(conversation.title, generator.file_extension)
        return content, filename, generator.content_type

    async def export(
        self,
        url: str,
        fmt: ExportFormat | str,
        options: ExportOptions | None = None,
        *,
        html: str | None = None,
    ) -> ExportResult:
        """Extract the conversation behind *url* and render it as *fmt*."""
        started = time.perf_counter()
        export_format = ExportFormat(fmt)
        conversation = await self.extract(url, html)
        content, filename, content_type = self.render(
            conversation, export_format, options
        )
        elapsed = time.perf_counter() - started

        logger.info(
            "Exported %d messages as %s (%d bytes) in %.2fs",
            len(conversation.messages),
            export_format,
            len(content),
            elapsed,
        )
        return ExportResult(
            content=content,
            filename=filename,
            content_type=content_type,
            format=export_format,
            message_count=len(conversation.messages),
            processing_time=elapsed,
            conversation=conversation,
        )

    # ── Rules & ranking ──────────────────────────────────────────────

    async def refresh_rules(self) -> int:
        """Merge newly published rules from the configured feed."""
        return await self._registry.refresh()

    def rules(self, platform: Platform | None = None) -> list[ParsingRule]:
        if platform is None:
            return self._registry.all_rules()
        return list(self._registry.rules_for(platform))

    def rank(self, platform: Platform) -> list[StrategyName]:
        return self._selector.rank(platform)

    def plan(self, platform: Platform) -> list[StrategyName]:
        """The order strategies would be attempted in right now."""
        return self._orchestrator.plan(platform)
