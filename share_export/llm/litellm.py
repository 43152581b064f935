from __future__ import annotations

import logging
from typing import Any, cast

import litellm
from litellm.exceptions import APIError
from litellm.types.utils import Choices, ModelResponse
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from share_export.llm.base import BaseLLMClient
from share_export.llm.models import OpenAIModel

logger = logging.getLogger(__name__)


class LiteLLMClient(BaseLLMClient):
    def __init__(self, model: OpenAIModel, api_key: str) -> None:
        self._model = model.value
        self._api_key = api_key

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> LiteLLMClient:
        model = OpenAIModel(config.get("model", OpenAIModel.GPT_4O_MINI))
        return cls(model=model, api_key=config["api_key"])

    @retry(
        retry=retry_if_exception_type(APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential_jitter(initial=2, max=20, jitter=2),
    )
    async def structured_completion(self, prompt: str, response_schema: dict) -> str:
        response = cast(
            ModelResponse,
            await litellm.acompletion(
                model=self._model,
                api_key=self._api_key,
                messages=[{"role": "user", "content": prompt}],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "conversation",
                        "schema": response_schema,
                    },
                },
            ),
        )

        choices = cast(list[Choices], response.choices)
        text = choices[0].message.content
        if not text:
            raise ValueError(f"Empty response from {self._model}")
        logger.debug("LLM reply from %s: %d chars", self._model, len(text))
        return text.strip()
