"""
OpenAI provider implementation.
"""

from typing import Any

from openai import AsyncOpenAI

from orchestra.llm.models import LLMRequest, LLMResponse, TokenUsage
from orchestra.llm.provider import LLMProviderBase


class OpenAIProvider(LLMProviderBase):
    """OpenAI GPT provider."""

    def __init__(self, api_key: str, model_id: str, **kwargs: Any) -> None:
        super().__init__(api_key, model_id, **kwargs)
        self.client = AsyncOpenAI(
            api_key=api_key,
            max_retries=0,
            timeout=kwargs.get("timeout_seconds", 60),
        )

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate completion using OpenAI API.

        Args:
            request: LLM request

        Returns:
            LLM response
        """
        messages = [{"role": msg.role, "content": msg.content} for msg in request.messages]

        response = await self.client.chat.completions.create(
            model=self.model_id,
            messages=messages,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            stop=request.stop_sequences,
        )

        usage = response.usage
        choice = response.choices[0] if response.choices else None
        return LLMResponse(
            content=(choice.message.content if choice else None) or "",
            model=response.model,
            usage=TokenUsage(
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
            finish_reason=choice.finish_reason if choice else None,
        )
