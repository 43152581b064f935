from share_export.orchestration.orchestrator import (
    DEFAULT_TIMEOUTS,
    ExtractionRun,
    StrategyAttempt,
    StrategyOrchestrator,
)
from share_export.orchestration.outcomes import OutcomeLog, StrategyOutcome
from share_export.orchestration.selector import AdaptiveStrategySelector

__all__ = [
    "DEFAULT_TIMEOUTS",
    "AdaptiveStrategySelector",
    "ExtractionRun",
    "OutcomeLog",
    "StrategyAttempt",
    "StrategyOrchestrator",
    "StrategyOutcome",
]
