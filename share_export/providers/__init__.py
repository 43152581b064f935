from share_export.providers.registry import (
    PLATFORM_REGISTRY,
    PlatformMatch,
    detect,
    get_platform_config,
    match_share_url,
    supported_platforms,
    validate_share_url,
)
from share_export.providers.types import EndpointSpec, PlatformConfig

__all__ = [
    "PLATFORM_REGISTRY",
    "EndpointSpec",
    "PlatformConfig",
    "PlatformMatch",
    "detect",
    "get_platform_config",
    "match_share_url",
    "supported_platforms",
    "validate_share_url",
]
