from enum import StrEnum


class OpenAIModel(StrEnum):
    """litellm model ids usable for the semantic fallback."""

    GPT_4O = "openai/gpt-4o"
    GPT_4O_MINI = "openai/gpt-4o-mini"
    GPT_4_1_MINI = "openai/gpt-4.1-mini"
