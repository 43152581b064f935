"""Platform registry -- maps Platform enum values to their share-link config"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from share_export.core.exceptions import InvalidUrlError, UnsupportedPlatformError
from share_export.models import Platform
from share_export.providers.chatgpt import CHATGPT
from share_export.providers.claude import CLAUDE
from share_export.providers.gemini import GEMINI
from share_export.providers.perplexity import PERPLEXITY
from share_export.providers.types import PlatformConfig

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

# Declaration order is the tie-break when more than one pattern matches.
PLATFORM_REGISTRY: dict[Platform, PlatformConfig] = {
    Platform.CHATGPT: CHATGPT,
    Platform.CLAUDE: CLAUDE,
    Platform.GEMINI: GEMINI,
    Platform.PERPLEXITY: PERPLEXITY,
}


def get_platform_config(platform: Platform) -> PlatformConfig:
    """Look up the platform config. Raises ``KeyError`` for unknown platforms."""
    return PLATFORM_REGISTRY[platform]


def supported_platforms() -> list[str]:
    return [cfg.display_name for cfg in PLATFORM_REGISTRY.values()]


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlatformMatch:
    platform: Platform
    share_id: str
    url: str

    @property
    def config(self) -> PlatformConfig:
        return PLATFORM_REGISTRY[self.platform]


def match_share_url(url: str) -> PlatformMatch:
    """Match *url* against every platform pattern, first match wins.

    Raises :class:`UnsupportedPlatformError` when nothing matches.
    """
    candidate = url.strip()
    for platform, cfg in PLATFORM_REGISTRY.items():
        match = cfg.pattern.match(candidate)
        if match:
            return PlatformMatch(
                platform=platform, share_id=match.group(1), url=candidate
            )
    raise UnsupportedPlatformError(url, supported_platforms())


def detect(url: str) -> Platform:
    """Classify *url* into a known platform.  Pure and idempotent."""
    return match_share_url(url).platform


def validate_share_url(url: str) -> PlatformMatch:
    """Input-boundary check run before any network activity.

    The URL must be absolute, use HTTPS and match a supported share-link
    pattern exactly.
    """
    if not url or not url.strip():
        raise InvalidUrlError("Please enter a valid shared chat URL")

    candidate = url.strip()
    try:
        parts = urlsplit(candidate)
    except ValueError as exc:
        raise InvalidUrlError(f"Malformed URL: {exc}") from exc

    if not parts.scheme or not parts.netloc:
        raise InvalidUrlError(
            "Please enter a valid shared chat URL",
            suggestions=[
                "Make sure the URL starts with https://",
                "Check that the URL is complete and properly formatted",
            ],
        )
    if parts.scheme.lower() != "https":
        raise InvalidUrlError(
            "Shared chat URLs must use HTTPS",
            suggestions=["Make sure the URL starts with https://"],
        )

    return match_share_url(candidate)
