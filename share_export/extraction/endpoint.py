from __future__ import annotations

import logging

from pydantic import ValidationError

from share_export.core.exceptions import ExtractionFailedException
from share_export.extraction.base import (
    ExtractionContext,
    ExtractionStrategy,
    StrategyName,
)
from share_export.extraction.fetch import PageFetcher
from share_export.models import Conversation

logger = logging.getLogger(__name__)


class StructuredEndpointStrategy(ExtractionStrategy):
    """Read the platform's JSON share endpoint, when it has one.

    Endpoints are undocumented and probed in the order the platform
    declares them; the first one returning a parseable, non-empty payload
    wins.  JSON text is taken as-is, without the markup heuristics.
    """

    name = StrategyName.STRUCTURED_ENDPOINT

    def __init__(self, fetcher: PageFetcher) -> None:
        self._fetcher = fetcher

    async def attempt(self, context: ExtractionContext) -> Conversation:
        config = context.config
        if not config.endpoints:
            raise ExtractionFailedException(
                f"{config.display_name} has no structured endpoint"
            )

        reasons: list[str] = []
        for spec in config.endpoints:
            endpoint_url = spec.url_for(context.share_id)
            try:
                payload = await self._fetcher.fetch_json(endpoint_url)
            except ExtractionFailedException as exc:
                reasons.append(exc.reason)
                continue
            if payload is None:
                reasons.append("non-JSON response")
                continue

            try:
                conversation = spec.parse(payload, context.url)
            except (ValidationError, ValueError, KeyError, TypeError) as exc:
                logger.debug("Endpoint %s payload rejected: %s", endpoint_url, exc)
                reasons.append(f"unexpected payload shape ({type(exc).__name__})")
                continue

            if not conversation.messages:
                reasons.append("payload contained no messages")
                continue
            if not conversation.title.strip():
                conversation = conversation.model_copy(
                    update={
                        "title": config.default_title,
                        "metadata": conversation.metadata.model_copy(
                            update={"title": config.default_title}
                        ),
                    }
                )
            return conversation

        raise ExtractionFailedException("; ".join(reasons))
