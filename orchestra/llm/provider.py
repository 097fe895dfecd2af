"""
Abstract LLM provider interface.

This module defines the base interface that all LLM providers must implement.
Providers raise their SDK's exceptions; mapping those to execution results is
the model adapter's job.
"""

from abc import ABC, abstractmethod
from typing import Any

from orchestra.llm.models import LLMProvider, LLMRequest, LLMResponse


class LLMProviderBase(ABC):
    """Abstract base class for LLM providers."""

    def __init__(self, api_key: str, model_id: str, **kwargs: Any) -> None:
        self.api_key = api_key
        self.model_id = model_id
        self.kwargs = kwargs

    @abstractmethod
    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate completion.

        Args:
            request: LLM request with messages and parameters

        Returns:
            LLM response with content and metadata
        """


class LLMProviderFactory:
    """Factory for creating LLM providers."""

    @staticmethod
    def create(provider: str, api_key: str, model_id: str, **kwargs: Any) -> LLMProviderBase:
        """
        Create LLM provider.

        Args:
            provider: Provider name ("anthropic", "openai")
            api_key: API key for provider
            model_id: Model identifier
            **kwargs: Additional provider-specific config (e.g. timeout_seconds)

        Returns:
            Configured LLM provider instance

        Raises:
            ValueError: If provider is unknown
        """
        from orchestra.llm.anthropic import AnthropicProvider
        from orchestra.llm.openai import OpenAIProvider

        providers: dict[str, type[LLMProviderBase]] = {
            LLMProvider.ANTHROPIC: AnthropicProvider,
            LLMProvider.OPENAI: OpenAIProvider,
        }

        if provider not in providers:
            raise ValueError(
                f"Unknown provider: {provider}. Supported providers: {', '.join(providers.keys())}"
            )

        return providers[provider](api_key=api_key, model_id=model_id, **kwargs)
