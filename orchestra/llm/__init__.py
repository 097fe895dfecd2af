"""
LLM transport layer.

Provider-agnostic request/response models and thin async providers over the
official Anthropic and OpenAI SDKs. The model-call adapter drives these.
"""

from orchestra.llm.models import LLMProvider, LLMRequest, LLMResponse, Message, TokenUsage
from orchestra.llm.provider import LLMProviderBase, LLMProviderFactory

__all__ = [
    "LLMProvider",
    "LLMProviderBase",
    "LLMProviderFactory",
    "LLMRequest",
    "LLMResponse",
    "Message",
    "TokenUsage",
]
