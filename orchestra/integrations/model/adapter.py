"""
Model-call adapter.

Treats a language-model endpoint as one more tool provider. The provider
transport (orchestra.llm) raises SDK exceptions; this adapter classifies them
into ExecutionResult failures. The Anthropic and OpenAI SDKs share one
exception shape (connection/timeout errors, and status errors carrying
``status_code`` and a decoded ``body``), so both map through the same path.
"""

import logging
from typing import Any

import anthropic
import openai
from pydantic import BaseModel, Field

from orchestra.execution.normalizer import ProviderErrorPayload, normalize
from orchestra.execution.request import ProviderType
from orchestra.execution.result import ErrorKind, ExecutionResult
from orchestra.integrations.base import ToolAdapter, classify_status, truncate_detail
from orchestra.llm.models import LLMRequest, Message
from orchestra.llm.provider import LLMProviderBase

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_MESSAGE = "Model returned an empty response"

_TIMEOUT_ERRORS = (anthropic.APITimeoutError, openai.APITimeoutError)
_CONNECTION_ERRORS = (anthropic.APIConnectionError, openai.APIConnectionError)
_STATUS_ERRORS = (anthropic.APIStatusError, openai.APIStatusError)
_SDK_ERRORS = (anthropic.APIError, openai.APIError)


class ModelCall(BaseModel):
    """Payload accepted by the model adapter."""

    messages: list[Message] = Field(..., min_length=1)
    max_tokens: int = Field(default=1024, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    stop_sequences: list[str] | None = None


def payload_from_model_error(body: Any) -> ProviderErrorPayload:
    """
    Build a ProviderErrorPayload from a model API error body.

    Handles both ``{"error": {"message": ...}}`` (Anthropic) and
    ``{"message": ..., "param": ...}`` (OpenAI). A message tied to a request
    parameter becomes a field error.
    """
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        body = body["error"]
    if not isinstance(body, dict):
        return ProviderErrorPayload()

    message = body.get("message")
    if not isinstance(message, str) or not message.strip():
        return ProviderErrorPayload()

    param = body.get("param")
    if isinstance(param, str) and param:
        return ProviderErrorPayload(field_errors={param: message})
    return ProviderErrorPayload(general_messages=[message])


class ModelToolAdapter(ToolAdapter):
    """Adapter over an LLMProviderBase."""

    provider = ProviderType.MODEL

    def __init__(self, llm: LLMProviderBase) -> None:
        self._llm = llm

    async def invoke(self, payload: dict[str, Any]) -> ExecutionResult:
        call = self.parse_payload(ModelCall, payload)
        if isinstance(call, ExecutionResult):
            return call

        request = LLMRequest(
            messages=call.messages,
            max_tokens=call.max_tokens,
            temperature=call.temperature,
            stop_sequences=call.stop_sequences,
        )
        log_extra = {"provider": self.provider.value, "model_id": self._llm.model_id}

        try:
            response = await self._llm.generate(request)
        except _TIMEOUT_ERRORS:
            logger.warning("Model call timed out", extra=log_extra)
            return ExecutionResult.failure(
                "Timed out waiting for the model provider. Please try again later.",
                ErrorKind.TRANSIENT,
            )
        except _CONNECTION_ERRORS:
            logger.warning("Failed to connect to model provider", exc_info=True, extra=log_extra)
            return ExecutionResult.failure(
                "Failed to connect to the model provider. Please try again later.",
                ErrorKind.TRANSIENT,
            )
        except _STATUS_ERRORS as e:
            return self._map_status_error(e.status_code, e.body, log_extra)
        except _SDK_ERRORS as e:
            logger.error(f"Unrecognised model provider error: {e}", extra=log_extra)
            return ExecutionResult.failure(
                f"Model provider error: {type(e).__name__}", ErrorKind.UNKNOWN
            )

        content = (response.content or "").strip()
        logger.info(
            "Model call completed",
            extra={**log_extra, "total_tokens": response.usage.total_tokens},
        )
        return ExecutionResult.success(content or EMPTY_RESPONSE_MESSAGE)

    def _map_status_error(
        self, status_code: int, body: Any, log_extra: dict[str, Any]
    ) -> ExecutionResult:
        kind = classify_status(status_code) or ErrorKind.UNKNOWN
        log_extra = {**log_extra, "status_code": status_code, "error_kind": kind.value}
        model_id = self._llm.model_id

        if kind is ErrorKind.VALIDATION:
            message = normalize(payload_from_model_error(body))
            logger.warning(f"Model provider rejected request: {message}", extra=log_extra)
            return ExecutionResult.failure(message, kind)

        logger.warning(f"Model call failed with status {status_code}", extra=log_extra)
        if kind is ErrorKind.AUTH:
            if status_code == 401:
                return ExecutionResult.failure(
                    "Model provider rejected the API key. Please verify the credentials.", kind
                )
            return ExecutionResult.failure(
                f"Access to model '{model_id}' is not permitted for this API key.", kind
            )
        if kind is ErrorKind.NOT_FOUND:
            return ExecutionResult.failure(f"Model '{model_id}' not found.", kind)
        if kind is ErrorKind.TRANSIENT:
            if status_code == 429:
                return ExecutionResult.failure(
                    "Model provider rate limit exceeded. Please try again later.", kind
                )
            return ExecutionResult.failure(
                "Model provider is unavailable. Please try again later.", kind
            )

        payload = payload_from_model_error(body)
        detail = truncate_detail(normalize(payload)) if not payload.is_empty else "no error detail"
        return ExecutionResult.failure(
            f"Unexpected model provider response ({status_code}): {detail}", kind
        )
