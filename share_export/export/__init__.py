from share_export.export.base import (
    ExportFormat,
    ExportGenerator,
    ExportOptions,
    safe_filename,
)
from share_export.export.markdown import MarkdownGenerator
from share_export.export.pdf import PDFGenerator
from share_export.export.registry import GENERATOR_REGISTRY, create_export_generator
from share_export.export.structured import CSVGenerator, JSONGenerator
from share_export.export.text import TextGenerator

__all__ = [
    "GENERATOR_REGISTRY",
    "CSVGenerator",
    "ExportFormat",
    "ExportGenerator",
    "ExportOptions",
    "JSONGenerator",
    "MarkdownGenerator",
    "PDFGenerator",
    "TextGenerator",
    "create_export_generator",
    "safe_filename",
]
