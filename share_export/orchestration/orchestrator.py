"""Runs extraction strategies for one request until one yields a valid result."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from share_export.core.exceptions import (
    AllStrategiesFailedError,
    ExtractionFailedException,
)
from share_export.extraction.base import (
    DEFAULT_ORDER,
    ExtractionContext,
    ExtractionStrategy,
    StrategyName,
)
from share_export.extraction.validation import validate_conversation
from share_export.models import Conversation, Platform
from share_export.orchestration.outcomes import OutcomeLog, StrategyOutcome
from share_export.orchestration.selector import AdaptiveStrategySelector
from share_export.orchestration.states import (
    DetectingState,
    ExhaustedFailureState,
    IdleState,
    State,
    StopState,
    TryingState,
    ValidatedState,
)
from share_export.providers.registry import validate_share_url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUTS: dict[StrategyName, float] = {
    StrategyName.STATIC_MARKUP: 20.0,
    StrategyName.STRUCTURED_ENDPOINT: 15.0,
    StrategyName.RENDERED_DOM: 60.0,
    StrategyName.COMMUNITY_RULE: 20.0,
    StrategyName.SEMANTIC_FALLBACK: 60.0,
}


@dataclass(frozen=True)
class StrategyAttempt:
    strategy: StrategyName
    succeeded: bool
    latency: float
    reason: str | None = None
    error_class: str | None = None


@dataclass
class ExtractionRun:
    """Everything that happened while extracting one URL."""

    url: str
    platform: Platform | None = None
    plan: list[StrategyName] = field(default_factory=list)
    states: list[State] = field(default_factory=list)
    attempts: list[StrategyAttempt] = field(default_factory=list)
    conversation: Conversation | None = None

    @property
    def final_state(self) -> State | None:
        return self.states[-1] if self.states else None

    @property
    def failures(self) -> list[tuple[str, str]]:
        return [
            (str(a.strategy), a.reason or "unknown")
            for a in self.attempts
            if not a.succeeded
        ]


@dataclass
class _RunScope:
    run: ExtractionRun
    html: str | None
    context: ExtractionContext | None = None


class StrategyOrchestrator:
    """Per-request state machine over the configured strategies.

    The adaptive selector's top pick runs first, followed by the rest in
    default priority order.  Each strategy runs at most once per request,
    under its own timeout, and every attempt is recorded in the outcome
    log.
    """

    def __init__(
        self,
        strategies: Iterable[ExtractionStrategy],
        *,
        outcomes: OutcomeLog,
        selector: AdaptiveStrategySelector,
        timeouts: Mapping[StrategyName, float] | None = None,
    ) -> None:
        self._strategies = {s.name: s for s in strategies}
        self._outcomes = outcomes
        self._selector = selector
        self._timeouts = {**DEFAULT_TIMEOUTS, **(timeouts or {})}

    @property
    def strategy_names(self) -> list[StrategyName]:
        return [name for name in DEFAULT_ORDER if name in self._strategies]

    def plan(self, platform: Platform) -> list[StrategyName]:
        """Attempt order for *platform*: top-ranked first, then default priority."""
        available = self.strategy_names
        if not available:
            return []
        ranked = [name for name in self._selector.rank(platform) if name in available]
        first = ranked[0] if ranked else available[0]
        return [first, *(name for name in available if name != first)]

    # -- Entry points ---------------------------------------------------------

    async def run(self, url: str, html: str | None = None) -> ExtractionRun:
        """Drive the state machine to a terminal state.

        URL validation errors propagate immediately, before any strategy
        runs.  Strategy failures never propagate; inspect the returned run.
        """
        scope = _RunScope(run=ExtractionRun(url=url), html=html)
        state: State = IdleState(url=url)
        scope.run.states.append(state)

        while not isinstance(state, StopState):
            state = await self._transition(state, scope)
            scope.run.states.append(state)

        return scope.run

    async def extract(self, url: str, html: str | None = None) -> Conversation:
        run = await self.run(url, html)
        if run.conversation is not None:
            return run.conversation
        raise AllStrategiesFailedError(str(run.platform), run.failures)

    # -- State machine --------------------------------------------------------

    async def _transition(self, current_state: State, scope: _RunScope) -> State:
        match current_state:
            case IdleState(url=url):
                return DetectingState(url=url)

            case DetectingState(url=url):
                share = validate_share_url(url)
                scope.run.platform = share.platform
                scope.run.plan = self.plan(share.platform)
                scope.context = ExtractionContext(match=share, html=scope.html)
                logger.info(
                    "Extracting %s share %s; plan: %s",
                    share.config.display_name,
                    share.share_id,
                    ", ".join(scope.run.plan),
                )
                return self._next(share.platform, 0, scope)

            case TryingState(platform=platform, strategy=name, index=index):
                conversation = await self._attempt(name, scope)
                if conversation is not None:
                    scope.run.conversation = conversation
                    return ValidatedState(platform=platform, strategy=name)
                return self._next(platform, index + 1, scope)

            case _:
                raise ValueError(f"No transition from {current_state!r}")

    def _next(self, platform: Platform, index: int, scope: _RunScope) -> State:
        if index < len(scope.run.plan):
            return TryingState(
                platform=platform, strategy=scope.run.plan[index], index=index
            )
        failures = scope.run.failures
        logger.error(
            "All %d strategies failed for %s: %s",
            len(failures),
            platform,
            "; ".join(f"{name}: {reason}" for name, reason in failures),
        )
        return ExhaustedFailureState(platform=platform, failures=failures)

    async def _attempt(
        self, name: StrategyName, scope: _RunScope
    ) -> Conversation | None:
        context = scope.context
        assert context is not None
        strategy = self._strategies[name]
        timeout = self._timeouts.get(name, DEFAULT_TIMEOUTS[name])

        logger.info("Trying %s for %s", name, context.url)
        started = time.perf_counter()
        conversation: Conversation | None = None
        reason: str | None = None
        error_class: str | None = None
        try:
            async with asyncio.timeout(timeout):
                result = await strategy.attempt(context)
            conversation = validate_conversation(result)
        except TimeoutError:
            reason = f"timed out after {timeout:g}s"
            error_class = "TimeoutError"
        except ExtractionFailedException as exc:
            reason = exc.reason
            error_class = type(exc).__name__
        except Exception as exc:
            logger.warning("Strategy %s raised unexpectedly", name, exc_info=True)
            reason = f"{type(exc).__name__}: {exc}"
            error_class = type(exc).__name__
        latency = time.perf_counter() - started

        succeeded = conversation is not None
        self._outcomes.append(
            StrategyOutcome(
                platform=context.platform,
                strategy_name=name,
                succeeded=succeeded,
                latency=latency,
                error_class=error_class,
            )
        )
        scope.run.attempts.append(
            StrategyAttempt(
                strategy=name,
                succeeded=succeeded,
                latency=latency,
                reason=reason,
                error_class=error_class,
            )
        )

        if conversation is not None:
            logger.info(
                "%s succeeded in %.2fs (%d messages)",
                name,
                latency,
                len(conversation.messages),
            )
        else:
            logger.warning("%s failed after %.2fs: %s", name, latency, reason)
        return conversation
