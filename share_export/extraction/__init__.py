"""Extraction strategies turning a share page into a :class:`Conversation`.

Strategy implementations live in submodules and are imported explicitly;
this package only exposes the shared contract.
"""

from share_export.extraction.base import (
    DEFAULT_ORDER,
    ExtractionContext,
    ExtractionStrategy,
    StrategyName,
)

__all__ = [
    "DEFAULT_ORDER",
    "ExtractionContext",
    "ExtractionStrategy",
    "StrategyName",
]
