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


class MarkdownGenerator(ExportGenerator):
    format = ExportFormat.MARKDOWN
    content_type = "text/markdown"
    file_extension = "md"

    def generate(
        self, conversation: Conversation, options: ExportOptions | None = None
    ) -> bytes:
        options = options or ExportOptions()
        parts: list[str] = [f"# {conversation.title}\n\n"]

        if options.include_metadata:
            for label, value in metadata_lines(conversation):
                parts.append(f"**{label}:** {value}\n")
            parts.append("\n---\n\n")

        for message in conversation.messages:
            header = f"## **{role_label(message.role)}**"
            if options.include_timestamps:
                header += f" - {format_short(message.timestamp)}"
            parts.append(header + "\n\n")
            parts.append(message.content.text + "\n\n")

            if options.include_artifacts:
                for artifact in message.content.code_artifacts():
                    parts.append(f"```{artifact.language or ''}\n")
                    parts.append(artifact.content + "\n")
                    parts.append("```\n\n")

            parts.append("---\n\n")

        return "".join(parts).encode("utf-8")
