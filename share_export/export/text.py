from __future__ import annotations

from share_export.export.base import (
    ExportFormat,
    ExportGenerator,
    ExportOptions,
    format_short,
    metadata_lines,
    role_label,
)
from share_export.models import Conversation

SEPARATOR = "-" * 50


class TextGenerator(ExportGenerator):
    format = ExportFormat.TEXT
    content_type = "text/plain"
    file_extension = "txt"

    def generate(
        self, conversation: Conversation, options: ExportOptions | None = None
    ) -> bytes:
        options = options or ExportOptions()
        title = conversation.title
        parts: list[str] = [f"{title}\n", "=" * len(title) + "\n\n"]

        if options.include_metadata:
            for label, value in metadata_lines(conversation):
                parts.append(f"{label}: {value}\n")
            parts.append("\n")

        for message in conversation.messages:
            header = role_label(message.role)
            if options.include_timestamps:
                header += f" ({format_short(message.timestamp)})"
            parts.append(header + ":\n")
            parts.append(message.content.text + "\n\n")

            if options.include_artifacts:
                for artifact in message.content.code_artifacts():
                    language = f" - {artifact.language}" if artifact.language else ""
                    parts.append(f"[Code{language}]:\n")
                    parts.append(artifact.content + "\n\n")

            parts.append(SEPARATOR + "\n\n")

        return "".join(parts).encode("utf-8")
