from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from share_export.extraction.base import DEFAULT_ORDER, StrategyName
from share_export.extraction.fetch import DEFAULT_USER_AGENT, PageFetcher
from share_export.rules.feed import RuleFeed

if TYPE_CHECKING:
    from share_export.llm.base import BaseLLMClient


T = TypeVar("T")


class _Registry(Generic[T]):
    """Maps provider names from the config dict to factories.

    Built-in providers are imported on first use, so importing this module
    stays cheap.  A factory with a ``from_config`` classmethod receives the
    raw section; any other factory is called with it as keyword arguments.
    """

    def __init__(self, label: str) -> None:
        self._label = label
        self._factories: dict[str, type[T]] | None = None

    def _table(self) -> dict[str, type[T]]:
        if self._factories is None:
            self._factories = dict(self._builtin())
        return self._factories

    def register(self, name: str, cls: type[T]) -> None:
        self._table()[name] = cls

    def build(self, provider: str, config: dict[str, Any]) -> T:
        table = self._table()
        try:
            factory = table[provider]
        except KeyError:
            raise ValueError(
                f"Unknown {self._label} provider {provider!r}; "
                f"expected one of {sorted(table)}"
            ) from None
        from_config = getattr(factory, "from_config", None)
        if from_config is not None:
            return from_config(config)
        return factory(**config)

    def _builtin(self) -> dict[str, type[T]]:
        return {}


class _RuleFeedRegistry(_Registry[RuleFeed]):
    def _builtin(self) -> dict[str, type[RuleFeed]]:
        from share_export.rules.feed import FileRuleFeed, HttpRuleFeed, StaticRuleFeed

        return {"static": StaticRuleFeed, "file": FileRuleFeed, "http": HttpRuleFeed}


class _LLMRegistry(_Registry["BaseLLMClient"]):
    def _builtin(self) -> dict[str, type[BaseLLMClient]]:
        from share_export.llm.litellm import LiteLLMClient

        return {"openai": LiteLLMClient}


rule_feed_registry = _RuleFeedRegistry("rules")
llm_registry = _LLMRegistry("llm")


@dataclass
class ExtractionSettings:
    enabled: list[StrategyName] = field(default_factory=lambda: list(DEFAULT_ORDER))
    timeouts: dict[StrategyName, float] = field(default_factory=dict)
    min_samples: int = 3


@dataclass
class ParsedConfig:
    fetcher: PageFetcher
    feed: RuleFeed | None
    llm_client: BaseLLMClient | None
    settings: ExtractionSettings


def _parse_settings(config: dict[str, Any]) -> ExtractionSettings:
    strategies_cfg = config.get("strategies", {})
    selector_cfg = config.get("selector", {})

    settings = ExtractionSettings()
    if "enabled" in strategies_cfg:
        settings.enabled = [StrategyName(name) for name in strategies_cfg["enabled"]]
    settings.timeouts = {
        StrategyName(name): float(seconds)
        for name, seconds in strategies_cfg.get("timeouts", {}).items()
    }
    settings.min_samples = int(selector_cfg.get("min_samples", settings.min_samples))
    return settings


def parse_config(config: dict[str, Any]) -> ParsedConfig:
    """Parse a user config dict into the components the facade needs.

    Expected shape (every section optional)::

        {
            "llm": {"provider": "openai", "api_key": "sk-...", "model": "openai/gpt-4o-mini"},
            "rules": {"provider": "http", "config": {"url": "https://..."}},
            "fetch": {"timeout": 20.0, "user_agent": "..."},
            "strategies": {"enabled": ["static_markup", ...], "timeouts": {"rendered_dom": 45}},
            "selector": {"min_samples": 3},
        }

    Without an ``llm`` section (or without an API key) the semantic
    fallback stays disabled.  Without ``rules`` only the seed rules are
    used.
    """
    fetch_cfg = config.get("fetch", {})
    fetcher = PageFetcher(
        timeout=float(fetch_cfg.get("timeout", 20.0)),
        user_agent=fetch_cfg.get("user_agent", DEFAULT_USER_AGENT),
    )

    feed: RuleFeed | None = None
    rules_cfg = config.get("rules")
    if rules_cfg:
        feed = rule_feed_registry.build(
            rules_cfg.get("provider", "http"),
            rules_cfg.get("config", {}),
        )

    llm_client: BaseLLMClient | None = None
    llm_cfg = config.get("llm")
    if llm_cfg and llm_cfg.get("api_key"):
        llm_client = llm_registry.build(llm_cfg.get("provider", "openai"), llm_cfg)

    return ParsedConfig(
        fetcher=fetcher,
        feed=feed,
        llm_client=llm_client,
        settings=_parse_settings(config),
    )
