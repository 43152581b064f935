"""Machine-readable exports: JSON (lossless) and CSV (one row per message)."""

from __future__ import annotations

import csv
import io
import json

from share_export.export.base import ExportFormat, ExportGenerator, ExportOptions
from share_export.models import Conversation

CSV_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class JSONGenerator(ExportGenerator):
    """camelCase wire form of the conversation.

    With default options the output parses back into an equal
    :class:`Conversation` via ``Conversation.model_validate_json``.
    """

    format = ExportFormat.JSON
    content_type = "application/json"
    file_extension = "json"

    def generate(
        self, conversation: Conversation, options: ExportOptions | None = None
    ) -> bytes:
        options = options or ExportOptions()
        data = conversation.to_wire()
        if not options.include_metadata:
            data.pop("metadata", None)
        if not options.include_artifacts:
            for message in data["messages"]:
                message["content"]["artifacts"] = []
        return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


class CSVGenerator(ExportGenerator):
    format = ExportFormat.CSV
    content_type = "text/csv"
    file_extension = "csv"

    def generate(
        self, conversation: Conversation, options: ExportOptions | None = None
    ) -> bytes:
        options = options or ExportOptions()
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")

        header = ["Role", "Content"]
        if options.include_timestamps:
            header.append("Timestamp")
        writer.writerow(header)

        for message in conversation.messages:
            row = [message.role.value, message.content.text]
            if options.include_timestamps:
                row.append(message.timestamp.strftime(CSV_TIMESTAMP_FORMAT))
            writer.writerow(row)

        return buffer.getvalue().encode("utf-8")
