from __future__ import annotations

from share_export.core.exceptions import InvalidResultError
from share_export.models import Conversation, Role


def validate_conversation(conversation: Conversation) -> Conversation:
    """Raise :class:`InvalidResultError` unless *conversation* is usable.

    A usable conversation has a non-blank title and at least one message;
    every message has non-blank text and a known role.
    """
    if not conversation.title.strip():
        raise InvalidResultError("blank title")
    if not conversation.messages:
        raise InvalidResultError("no messages")
    for position, message in enumerate(conversation.messages):
        if not message.content.text.strip():
            raise InvalidResultError(f"message {position} has no text")
        if message.role not in Role:
            raise InvalidResultError(f"message {position} has role {message.role!r}")
    return conversation
