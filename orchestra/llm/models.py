"""
Shared LLM models and types.

This module defines the request/response shapes used by every model provider.
"""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


class LLMProvider(StrEnum):
    """Supported LLM providers."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"


class Message(BaseModel):
    """Chat message."""

    role: Literal["system", "user", "assistant"]
    content: str


class LLMRequest(BaseModel):
    """LLM generation request."""

    messages: list[Message] = Field(..., min_length=1)
    max_tokens: int = Field(default=4096, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    stop_sequences: list[str] | None = None


class TokenUsage(BaseModel):
    """Token usage tracking."""

    input_tokens: int
    output_tokens: int
    total_tokens: int


class LLMResponse(BaseModel):
    """LLM generation response."""

    content: str
    model: str
    usage: TokenUsage
    finish_reason: str | None = None
