"""States of the per-request extraction state machine.

Hierarchy:
    State
    ├── NextState   → the orchestrator advances immediately
    └── StopState   → terminal; the run is over

Transitions::

    Idle → Detecting → Trying(0) → Trying(1) → … → ExhaustedFailure
                           └──────────┴─────→ Validated
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from share_export.extraction.base import StrategyName
from share_export.models import Platform, utc_now


class State:
    """Base marker for all states."""


class NextState(State):
    """Transition state: advance immediately."""


class StopState(State):
    """Terminal state."""


class IdleState(BaseModel, NextState):
    status: Literal["IDLE"] = "IDLE"
    url: str
    timestamp: datetime = Field(default_factory=utc_now)


class DetectingState(BaseModel, NextState):
    status: Literal["DETECTING"] = "DETECTING"
    url: str
    timestamp: datetime = Field(default_factory=utc_now)


class TryingState(BaseModel, NextState):
    """About to run the strategy at ``index`` in the run's plan."""

    status: Literal["TRYING"] = "TRYING"
    platform: Platform
    strategy: StrategyName
    index: int
    timestamp: datetime = Field(default_factory=utc_now)


class ValidatedState(BaseModel, StopState):
    status: Literal["VALIDATED"] = "VALIDATED"
    platform: Platform
    strategy: StrategyName
    completed_at: datetime = Field(default_factory=utc_now)


class ExhaustedFailureState(BaseModel, StopState):
    """Every planned strategy ran once and none produced a valid result."""

    status: Literal["EXHAUSTED"] = "EXHAUSTED"
    platform: Platform
    failures: list[tuple[str, str]]
    failed_at: datetime = Field(default_factory=utc_now)
