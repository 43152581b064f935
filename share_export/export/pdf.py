from __future__ import annotations

import pymupdf

from share_export.export.base import (
    ExportFormat,
    ExportGenerator,
    ExportOptions,
    format_short,
    metadata_lines,
    role_label,
)
from share_export.models import Conversation

MARGIN = 56.0
BODY_FONT = "helv"
BOLD_FONT = "hebo"
CODE_FONT = "cour"
LINE_SPACING = 1.4

_PAPER = {"A4": "a4", "Letter": "letter"}


def wrap_line(text: str, fontname: str, fontsize: float, max_width: float) -> list[str]:
    """Greedy word wrap of a single line; over-long words are split."""
    if not text.strip():
        return [""]

    def fits(candidate: str) -> bool:
        return pymupdf.get_text_length(candidate, fontname=fontname, fontsize=fontsize) <= max_width

    lines: list[str] = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if fits(candidate):
            current = candidate
            continue
        if current:
            lines.append(current)
        while not fits(word) and len(word) > 1:
            cut = len(word) - 1
            while cut > 1 and not fits(word[:cut]):
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    lines.append(current)
    return lines


def wrap_text(text: str, fontname: str, fontsize: float, max_width: float) -> list[str]:
    lines: list[str] = []
    for paragraph in text.split("\n"):
        lines.extend(wrap_line(paragraph.expandtabs(4), fontname, fontsize, max_width))
    return lines


class _PageWriter:
    """Tracks the cursor and adds pages as text runs past the bottom margin."""

    def __init__(self, doc: pymupdf.Document, paper: str) -> None:
        self.doc = doc
        self.rect = pymupdf.paper_rect(paper)
        self.width = self.rect.width - 2 * MARGIN
        self.page = doc.new_page(width=self.rect.width, height=self.rect.height)
        self.y = MARGIN

    def _ensure_room(self, height: float) -> None:
        if self.y + height > self.rect.height - MARGIN:
            self.page = self.doc.new_page(width=self.rect.width, height=self.rect.height)
            self.y = MARGIN

    def write(self, text: str, *, fontname: str = BODY_FONT, fontsize: float = 12) -> None:
        line_height = fontsize * LINE_SPACING
        for line in wrap_text(text, fontname, fontsize, self.width):
            self._ensure_room(line_height)
            self.y += fontsize
            self.page.insert_text(
                (MARGIN, self.y), line, fontname=fontname, fontsize=fontsize
            )
            self.y += line_height - fontsize
        self.space(fontsize * 0.4)

    def space(self, amount: float) -> None:
        self.y += amount

    def rule(self, gray: float = 0.85) -> None:
        self._ensure_room(12)
        self.page.draw_line(
            (MARGIN, self.y),
            (self.rect.width - MARGIN, self.y),
            color=(gray, gray, gray),
            width=0.5,
        )
        self.y += 12


class PDFGenerator(ExportGenerator):
    format = ExportFormat.PDF
    content_type = "application/pdf"
    file_extension = "pdf"

    def generate(
        self, conversation: Conversation, options: ExportOptions | None = None
    ) -> bytes:
        options = options or ExportOptions()
        size = options.font_size

        with pymupdf.open() as doc:
            doc.set_metadata(
                {
                    "title": conversation.title,
                    "subject": f"{conversation.platform.value} conversation",
                    "creator": "share-export",
                }
            )
            out = _PageWriter(doc, _PAPER[options.page_size])

            out.write(conversation.title, fontname=BOLD_FONT, fontsize=size * 1.5)
            out.space(size)

            if options.include_metadata:
                for label, value in metadata_lines(conversation):
                    out.write(f"{label}: {value}", fontsize=size)
                out.space(size / 2)
                out.rule(gray=0.8)

            for message in conversation.messages:
                header = role_label(message.role)
                if options.include_timestamps:
                    header += f" - {format_short(message.timestamp)}"
                out.write(header, fontname=BOLD_FONT, fontsize=size + 2)
                out.write(message.content.text, fontsize=size - 1)

                if options.include_artifacts:
                    for artifact in message.content.code_artifacts():
                        language = f" - {artifact.language}" if artifact.language else ""
                        out.write(f"[Code{language}]:", fontname=BOLD_FONT, fontsize=size - 2)
                        out.write(artifact.content, fontname=CODE_FONT, fontsize=max(size - 3, 6))

                out.rule(gray=0.94)

            return doc.tobytes(garbage=3, deflate=True)
