from __future__ import annotations

from abc import ABC, abstractmethod


class BaseLLMClient(ABC):
    """Minimal surface the semantic fallback needs from a language model."""

    @abstractmethod
    async def structured_completion(self, prompt: str, response_schema: dict) -> str:
        """Return the raw JSON text of a reply conforming to *response_schema*."""
        ...
