from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from share_export.models import Conversation, Platform
from share_export.rules.models import ParsingRule

EndpointParser = Callable[[Any, str], Conversation]
"""``(decoded_json, source_url) -> Conversation``; raises on unexpected shape."""


@dataclass(frozen=True)
class EndpointSpec:
    """One structured-data endpoint worth probing for a share id."""

    url_template: str
    parse: EndpointParser

    def url_for(self, share_id: str) -> str:
        return self.url_template.format(share_id=share_id)


@dataclass(frozen=True)
class PlatformConfig:
    """Everything the extraction layer knows about one platform.

    ``pattern`` must capture the opaque share id in its first group.
    ``seed_rules`` are loaded into every new :class:`RuleRegistry`;
    ``endpoints`` are probed in order by the structured-endpoint strategy
    and may be empty.
    """

    platform: Platform
    display_name: str
    pattern: re.Pattern[str]
    base_url: str
    seed_rules: tuple[ParsingRule, ...] = ()
    endpoints: tuple[EndpointSpec, ...] = ()

    @property
    def default_title(self) -> str:
        return f"{self.display_name} Conversation"
