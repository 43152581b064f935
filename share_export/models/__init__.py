from share_export.models.conversation import (
    MIN_ARTIFACT_LENGTH,
    Artifact,
    ArtifactType,
    Conversation,
    ConversationMetadata,
    Formatting,
    Message,
    MessageContent,
    Platform,
    Role,
)
from share_export.models.utils import generate_id, utc_now

__all__ = [
    "MIN_ARTIFACT_LENGTH",
    "Artifact",
    "ArtifactType",
    "Conversation",
    "ConversationMetadata",
    "Formatting",
    "Message",
    "MessageContent",
    "Platform",
    "Role",
    "generate_id",
    "utc_now",
]
