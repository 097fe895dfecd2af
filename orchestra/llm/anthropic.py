"""
Anthropic Claude provider implementation.
"""

from typing import Any

from anthropic import AsyncAnthropic

from orchestra.llm.models import LLMRequest, LLMResponse, TokenUsage
from orchestra.llm.provider import LLMProviderBase


class AnthropicProvider(LLMProviderBase):
    """Anthropic Claude provider."""

    def __init__(self, api_key: str, model_id: str, **kwargs: Any) -> None:
        super().__init__(api_key, model_id, **kwargs)
        # Retries are the Dispatcher's concern
        self.client = AsyncAnthropic(
            api_key=api_key,
            max_retries=0,
            timeout=kwargs.get("timeout_seconds", 60),
        )

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate completion using Anthropic API.

        Args:
            request: LLM request

        Returns:
            LLM response
        """
        # Convert messages (extract system message if present)
        system_message = None
        messages = []
        for msg in request.messages:
            if msg.role == "system":
                system_message = msg.content
            else:
                messages.append({"role": msg.role, "content": msg.content})

        params: dict[str, Any] = {
            "model": self.model_id,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": messages,
        }
        if system_message:
            params["system"] = system_message
        if request.stop_sequences:
            params["stop_sequences"] = request.stop_sequences

        response = await self.client.messages.create(**params)

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return LLMResponse(
            content=text,
            model=response.model,
            usage=TokenUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            ),
            finish_reason=response.stop_reason,
        )
