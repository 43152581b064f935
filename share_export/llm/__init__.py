from share_export.llm.base import BaseLLMClient
from share_export.llm.litellm import LiteLLMClient
from share_export.llm.models import OpenAIModel

__all__ = [
    "BaseLLMClient",
    "LiteLLMClient",
    "OpenAIModel",
]
