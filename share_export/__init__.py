from share_export.core.exceptions import (
    AllStrategiesFailedError,
    ExportFailedException,
    ExtractionFailedException,
    InvalidResultError,
    InvalidUrlError,
    UnsupportedPlatformError,
)
from share_export.export.base import ExportFormat, ExportOptions
from share_export.extraction.base import StrategyName
from share_export.facade.core import ShareExport
from share_export.facade.types import ExportResult
from share_export.models import (
    Artifact,
    ArtifactType,
    Conversation,
    Message,
    MessageContent,
    Platform,
    Role,
)

__all__ = [
    "AllStrategiesFailedError",
    "Artifact",
    "ArtifactType",
    "Conversation",
    "ExportFailedException",
    "ExportFormat",
    "ExportOptions",
    "ExportResult",
    "ExtractionFailedException",
    "InvalidResultError",
    "InvalidUrlError",
    "Message",
    "MessageContent",
    "Platform",
    "Role",
    "ShareExport",
    "StrategyName",
    "UnsupportedPlatformError",
]
