"""Ranks extraction strategies per platform from recorded outcomes.

Each strategy with enough samples is scored as::

    0.5 * success_rate + 0.3 * speed + 0.2 * cost_efficiency

``speed`` is the mean latency min-max normalised across the scored
strategies (fastest = 1).  ``cost_efficiency`` is the success rate
divided by the strategy's relative cost weight, normalised so the best
strategy scores 1.  Strategies below ``min_samples`` get a neutral 0.5.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from share_export.extraction.base import DEFAULT_ORDER, StrategyName
from share_export.models import Platform
from share_export.orchestration.outcomes import OutcomeLog, StrategyOutcome

logger = logging.getLogger(__name__)

SUCCESS_WEIGHT = 0.5
SPEED_WEIGHT = 0.3
COST_WEIGHT = 0.2
NEUTRAL_SCORE = 0.5

DEFAULT_COST_WEIGHTS: dict[StrategyName, float] = {
    StrategyName.STATIC_MARKUP: 1.0,
    StrategyName.STRUCTURED_ENDPOINT: 1.0,
    StrategyName.COMMUNITY_RULE: 1.5,
    StrategyName.RENDERED_DOM: 5.0,
    StrategyName.SEMANTIC_FALLBACK: 10.0,
}


@dataclass(frozen=True)
class StrategyStats:
    samples: int
    success_rate: float
    mean_latency: float


def summarize(outcomes: Iterable[StrategyOutcome]) -> dict[StrategyName, StrategyStats]:
    grouped: dict[StrategyName, list[StrategyOutcome]] = {}
    for outcome in outcomes:
        grouped.setdefault(outcome.strategy_name, []).append(outcome)

    return {
        name: StrategyStats(
            samples=len(items),
            success_rate=sum(o.succeeded for o in items) / len(items),
            mean_latency=sum(o.latency for o in items) / len(items),
        )
        for name, items in grouped.items()
    }


class AdaptiveStrategySelector:
    def __init__(
        self,
        outcomes: OutcomeLog,
        *,
        min_samples: int = 3,
        cost_weights: Mapping[StrategyName, float] | None = None,
        default_order: Sequence[StrategyName] = DEFAULT_ORDER,
    ) -> None:
        self._outcomes = outcomes
        self.min_samples = min_samples
        self._cost_weights = {**DEFAULT_COST_WEIGHTS, **(cost_weights or {})}
        self._default_order = tuple(default_order)

    def scores(self, platform: Platform) -> dict[StrategyName, float]:
        stats = summarize(self._outcomes.snapshot(platform))
        scored = {
            name: s for name, s in stats.items() if s.samples >= self.min_samples
        }

        result = {name: NEUTRAL_SCORE for name in self._default_order}
        if not scored:
            return result

        latencies = [s.mean_latency for s in scored.values()]
        fastest, slowest = min(latencies), max(latencies)
        efficiency = {
            name: s.success_rate / self._cost_weights.get(name, 1.0)
            for name, s in scored.items()
        }
        best_efficiency = max(efficiency.values())

        for name, s in scored.items():
            if slowest > fastest:
                speed = 1.0 - (s.mean_latency - fastest) / (slowest - fastest)
            else:
                speed = 1.0
            cost = efficiency[name] / best_efficiency if best_efficiency > 0 else 0.0
            result[name] = (
                SUCCESS_WEIGHT * s.success_rate
                + SPEED_WEIGHT * speed
                + COST_WEIGHT * cost
            )
        return result

    def rank(self, platform: Platform) -> list[StrategyName]:
        """Strategies best-first; ties keep the default priority order."""
        if not self._outcomes.snapshot(platform):
            return list(self._default_order)

        scores = self.scores(platform)
        ranked = sorted(self._default_order, key=lambda name: -scores[name])
        logger.debug(
            "Ranking for %s: %s",
            platform,
            ", ".join(f"{name}={scores[name]:.2f}" for name in ranked),
        )
        return ranked
