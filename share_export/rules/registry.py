"""Process-wide selector rule registry.

Readers always see an immutable snapshot (a dict of tuples that is never
mutated after publication).  Writers build a new snapshot under a lock
and swap the reference, so a concurrent ``best_rule`` never observes a
half-applied update.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from types import MappingProxyType
from typing import TYPE_CHECKING

from share_export.models import Platform
from share_export.rules.models import ParsingRule

if TYPE_CHECKING:
    from share_export.rules.feed import RuleFeed

logger = logging.getLogger(__name__)

MIN_ACCEPTED_CONFIDENCE = 0.8

_Snapshot = MappingProxyType[Platform, tuple[ParsingRule, ...]]


def _rank_key(rule: ParsingRule) -> tuple[float, float]:
    return (-rule.confidence, -rule.last_updated.timestamp())


def is_acceptable(rule: ParsingRule) -> bool:
    return rule.verified and rule.confidence > MIN_ACCEPTED_CONFIDENCE


class RuleRegistry:
    """Holds, per platform, the verified rules ordered best-first.

    Usage::

        registry = RuleRegistry.with_seed_rules(feed=HttpRuleFeed(url))
        await registry.refresh()
        rule = registry.best_rule(Platform.CHATGPT)
    """

    def __init__(
        self,
        rules: Iterable[ParsingRule] = (),
        *,
        feed: RuleFeed | None = None,
    ) -> None:
        self._feed = feed
        self._write_lock = threading.Lock()
        self._snapshot: _Snapshot = self._build_snapshot({}, rules)

    @classmethod
    def with_seed_rules(cls, *, feed: RuleFeed | None = None) -> RuleRegistry:
        """Registry pre-loaded with the rules every platform ships with."""
        from share_export.providers.registry import PLATFORM_REGISTRY

        seeds = [rule for cfg in PLATFORM_REGISTRY.values() for rule in cfg.seed_rules]
        return cls(seeds, feed=feed)

    # -- Reads ----------------------------------------------------------------

    def best_rule(self, platform: Platform) -> ParsingRule | None:
        rules = self._snapshot.get(platform, ())
        return rules[0] if rules else None

    def rules_for(self, platform: Platform) -> tuple[ParsingRule, ...]:
        """All verified rules for *platform*, best confidence first."""
        return self._snapshot.get(platform, ())

    def all_rules(self) -> list[ParsingRule]:
        return [rule for rules in self._snapshot.values() for rule in rules]

    # -- Writes ---------------------------------------------------------------

    def add_rule(self, rule: ParsingRule) -> bool:
        """Publish *rule*.  Returns ``False`` (and changes nothing) if rejected."""
        if not is_acceptable(rule):
            logger.debug(
                "Rejected rule %s v%d (confidence=%.2f, verified=%s)",
                rule.id,
                rule.version,
                rule.confidence,
                rule.verified,
            )
            return False
        with self._write_lock:
            self._snapshot = self._build_snapshot(self._current_map(), [rule])
        return True

    async def refresh(self) -> int:
        """Pull rules from the configured feed and merge the acceptable ones.

        Returns the number of rules accepted.  Without a feed this is a
        no-op.
        """
        if self._feed is None:
            return 0

        incoming = await self._feed.fetch_rules()
        accepted = [rule for rule in incoming if is_acceptable(rule)]
        with self._write_lock:
            self._snapshot = self._build_snapshot(self._current_map(), accepted)

        logger.info(
            "Rule refresh: %d received, %d accepted", len(incoming), len(accepted)
        )
        return len(accepted)

    # -- Internals ------------------------------------------------------------

    def _current_map(self) -> dict[tuple[str, int], ParsingRule]:
        return {rule.key: rule for rule in self.all_rules()}

    @staticmethod
    def _build_snapshot(
        existing: dict[tuple[str, int], ParsingRule],
        additions: Iterable[ParsingRule],
    ) -> _Snapshot:
        merged = dict(existing)
        for rule in additions:
            if is_acceptable(rule):
                merged[rule.key] = rule

        by_platform: dict[Platform, list[ParsingRule]] = {}
        for rule in merged.values():
            by_platform.setdefault(rule.platform, []).append(rule)

        return MappingProxyType(
            {
                platform: tuple(sorted(rules, key=_rank_key))
                for platform, rules in by_platform.items()
            }
        )
