"""Public return types for the share_export API."""

from __future__ import annotations

from dataclasses import dataclass

from share_export.export.base import ExportFormat
from share_export.models import Conversation


@dataclass
class ExportResult:
    """Result from :meth:`ShareExport.export`."""

    content: bytes
    filename: str
    content_type: str
    format: ExportFormat
    message_count: int
    processing_time: float
    conversation: Conversation

    @property
    def size(self) -> int:
        return len(self.content)
