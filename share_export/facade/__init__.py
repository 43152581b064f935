from share_export.facade.core import ShareExport, default_strategies
from share_export.facade.types import ExportResult

__all__ = [
    "ExportResult",
    "ShareExport",
    "default_strategies",
]
