from __future__ import annotations

import pytest

from share_export.extraction.base import DEFAULT_ORDER, StrategyName
from share_export.models import Platform
from share_export.orchestration.outcomes import OutcomeLog, StrategyOutcome
from share_export.orchestration.selector import (
    NEUTRAL_SCORE,
    AdaptiveStrategySelector,
    summarize,
)


def _record(
    log: OutcomeLog,
    strategy: StrategyName,
    *,
    succeeded: bool,
    latency: float = 1.0,
    times: int = 1,
    platform: Platform = Platform.CHATGPT,
) -> None:
    for _ in range(times):
        log.append(
            StrategyOutcome(
                platform=platform,
                strategy_name=strategy,
                succeeded=succeeded,
                latency=latency,
            )
        )


@pytest.fixture()
def log() -> OutcomeLog:
    return OutcomeLog()


# ── Outcome log ──────────────────────────────────────────────────────


def test_log_is_bounded() -> None:
    log = OutcomeLog(capacity=3)
    for latency in (1.0, 2.0, 3.0, 4.0):
        _record(log, StrategyName.STATIC_MARKUP, succeeded=True, latency=latency)
    assert len(log) == 3
    assert [o.latency for o in log.snapshot()] == [2.0, 3.0, 4.0]


def test_snapshot_filters_by_platform(log: OutcomeLog) -> None:
    _record(log, StrategyName.STATIC_MARKUP, succeeded=True)
    _record(log, StrategyName.STATIC_MARKUP, succeeded=False, platform=Platform.GEMINI)
    assert len(log.snapshot(Platform.GEMINI)) == 1
    assert len(log.snapshot()) == 2


def test_summarize(log: OutcomeLog) -> None:
    _record(log, StrategyName.STATIC_MARKUP, succeeded=True, latency=1.0)
    _record(log, StrategyName.STATIC_MARKUP, succeeded=False, latency=3.0)
    stats = summarize(log.snapshot())[StrategyName.STATIC_MARKUP]
    assert stats.samples == 2
    assert stats.success_rate == 0.5
    assert stats.mean_latency == 2.0


# ── Ranking ──────────────────────────────────────────────────────────


def test_no_history_uses_default_order(log: OutcomeLog) -> None:
    selector = AdaptiveStrategySelector(log)
    assert selector.rank(Platform.CHATGPT) == list(DEFAULT_ORDER)
    assert set(selector.scores(Platform.CHATGPT).values()) == {NEUTRAL_SCORE}


def test_reliable_slow_strategy_outranks_failing_fast_one(log: OutcomeLog) -> None:
    _record(log, StrategyName.RENDERED_DOM, succeeded=True, latency=3.0, times=10)
    _record(log, StrategyName.STATIC_MARKUP, succeeded=False, latency=0.2, times=10)

    ranking = AdaptiveStrategySelector(log).rank(Platform.CHATGPT)

    assert ranking[0] == StrategyName.RENDERED_DOM
    assert ranking.index(StrategyName.RENDERED_DOM) < ranking.index(
        StrategyName.STATIC_MARKUP
    )
    assert ranking[-1] == StrategyName.STATIC_MARKUP


def test_scores_follow_weights(log: OutcomeLog) -> None:
    _record(log, StrategyName.RENDERED_DOM, succeeded=True, latency=3.0, times=10)
    _record(log, StrategyName.STATIC_MARKUP, succeeded=False, latency=0.2, times=10)

    scores = AdaptiveStrategySelector(log).scores(Platform.CHATGPT)

    # rendered: full success, slowest, only efficient strategy
    assert scores[StrategyName.RENDERED_DOM] == pytest.approx(0.5 + 0.0 + 0.2)
    # static: no success, fastest, zero efficiency
    assert scores[StrategyName.STATIC_MARKUP] == pytest.approx(0.0 + 0.3 + 0.0)
    assert scores[StrategyName.SEMANTIC_FALLBACK] == NEUTRAL_SCORE


def test_too_few_samples_stay_neutral(log: OutcomeLog) -> None:
    _record(log, StrategyName.STATIC_MARKUP, succeeded=False, times=2)
    selector = AdaptiveStrategySelector(log, min_samples=3)
    assert selector.scores(Platform.CHATGPT)[StrategyName.STATIC_MARKUP] == NEUTRAL_SCORE
    assert selector.rank(Platform.CHATGPT) == list(DEFAULT_ORDER)


def test_history_is_per_platform(log: OutcomeLog) -> None:
    _record(log, StrategyName.SEMANTIC_FALLBACK, succeeded=True, times=5)
    _record(log, StrategyName.STATIC_MARKUP, succeeded=False, times=5)
    selector = AdaptiveStrategySelector(log)
    assert selector.rank(Platform.CHATGPT)[0] == StrategyName.SEMANTIC_FALLBACK
    assert selector.rank(Platform.CLAUDE) == list(DEFAULT_ORDER)


def test_cheaper_strategy_wins_on_equal_record(log: OutcomeLog) -> None:
    _record(log, StrategyName.STATIC_MARKUP, succeeded=True, latency=1.0, times=5)
    _record(log, StrategyName.SEMANTIC_FALLBACK, succeeded=True, latency=1.0, times=5)
    scores = AdaptiveStrategySelector(log).scores(Platform.CHATGPT)
    assert scores[StrategyName.STATIC_MARKUP] > scores[StrategyName.SEMANTIC_FALLBACK]
