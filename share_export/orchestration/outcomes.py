from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from share_export.extraction.base import StrategyName
from share_export.models import Platform, utc_now

DEFAULT_CAPACITY = 10_000


@dataclass(frozen=True)
class StrategyOutcome:
    """One strategy attempt, recorded whether it succeeded or not."""

    platform: Platform
    strategy_name: StrategyName
    succeeded: bool
    latency: float
    error_class: str | None = None
    recorded_at: datetime = field(default_factory=utc_now)


class OutcomeLog:
    """Bounded, append-only record of strategy outcomes.

    Safe to share between concurrent requests.  Once ``capacity`` is
    reached the oldest outcomes are discarded.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._outcomes: deque[StrategyOutcome] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, outcome: StrategyOutcome) -> None:
        with self._lock:
            self._outcomes.append(outcome)

    def snapshot(self, platform: Platform | None = None) -> tuple[StrategyOutcome, ...]:
        with self._lock:
            outcomes = tuple(self._outcomes)
        if platform is None:
            return outcomes
        return tuple(o for o in outcomes if o.platform == platform)

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)
