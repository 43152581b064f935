from __future__ import annotations

from share_export.export.base import ExportFormat, ExportGenerator
from share_export.export.markdown import MarkdownGenerator
from share_export.export.pdf import PDFGenerator
from share_export.export.structured import CSVGenerator, JSONGenerator
from share_export.export.text import TextGenerator

GENERATOR_REGISTRY: dict[ExportFormat, type[ExportGenerator]] = {
    ExportFormat.PDF: PDFGenerator,
    ExportFormat.MARKDOWN: MarkdownGenerator,
    ExportFormat.JSON: JSONGenerator,
    ExportFormat.CSV: CSVGenerator,
    ExportFormat.TEXT: TextGenerator,
}


def create_export_generator(fmt: ExportFormat | str) -> ExportGenerator:
    """Instantiate the generator for *fmt*.  Raises ``ValueError`` if unknown."""
    try:
        export_format = ExportFormat(fmt)
    except ValueError:
        raise ValueError(
            f"Unsupported export format: {fmt}. "
            f"Available: {[f.value for f in ExportFormat]}"
        ) from None
    return GENERATOR_REGISTRY[export_format]()
