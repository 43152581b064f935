"""Sources of published parsing rules for :meth:`RuleRegistry.refresh`."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from share_export.rules.models import ParsingRule

logger = logging.getLogger(__name__)

_RULE_LIST = TypeAdapter(list[ParsingRule])


def parse_rule_payload(payload: Any) -> list[ParsingRule]:
    """Accept either a bare list of rules or ``{"rules": [...]}``.

    Entries that fail validation are skipped individually so one bad
    record does not poison the whole feed.
    """
    items = payload.get("rules", []) if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        logger.warning("Rule feed payload is not a list; ignoring")
        return []

    try:
        return _RULE_LIST.validate_python(items)
    except ValidationError:
        pass

    rules: list[ParsingRule] = []
    for item in items:
        try:
            rules.append(ParsingRule.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping malformed rule: %s", exc.errors()[0]["msg"])
    return rules


class RuleFeed(ABC):
    @abstractmethod
    async def fetch_rules(self) -> list[ParsingRule]: ...


class StaticRuleFeed(RuleFeed):
    """In-process list, mostly useful in tests and for pinned deployments."""

    def __init__(self, rules: Iterable[ParsingRule] = ()) -> None:
        self._rules = list(rules)

    async def fetch_rules(self) -> list[ParsingRule]:
        return list(self._rules)


class FileRuleFeed(RuleFeed):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def fetch_rules(self) -> list[ParsingRule]:
        if not self.path.exists():
            logger.warning("Rule file %s does not exist", self.path)
            return []
        with open(self.path, encoding="utf-8") as f:
            payload = json.load(f)
        return parse_rule_payload(payload)


class HttpRuleFeed(RuleFeed):
    """Fetches a JSON rule list over HTTPS."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        wait=wait_exponential_jitter(initial=1, max=10),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    async def _get(self) -> Any:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            response = await client.get(self.url, headers={"Accept": "application/json"})
            response.raise_for_status()
            return response.json()

    async def fetch_rules(self) -> list[ParsingRule]:
        payload = await self._get()
        rules = parse_rule_payload(payload)
        logger.info("Fetched %d rules from %s", len(rules), self.url)
        return rules
