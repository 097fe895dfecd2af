"""
Tool adapter abstract base class.

Each provider (Jira, language model, ...) implements this interface. An
adapter performs the provider call and maps whatever comes back, success or
failure, into an ExecutionResult. Provider-specific shapes stop here.
"""

from abc import ABC, abstractmethod
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from orchestra.execution.normalizer import normalize_validation_error
from orchestra.execution.request import ProviderType
from orchestra.execution.result import ErrorKind, ExecutionResult

# Upper bound on raw provider text carried in an Unknown failure
MAX_RAW_DETAIL_CHARS = 500

M = TypeVar("M", bound=BaseModel)


def classify_status(status_code: int) -> ErrorKind | None:
    """Map an HTTP status to an ErrorKind. Returns None for non-error statuses."""
    if status_code < 400:
        return None
    if status_code in (400, 409, 422):
        return ErrorKind.VALIDATION
    if status_code in (401, 403):
        return ErrorKind.AUTH
    if status_code in (404, 410):
        return ErrorKind.NOT_FOUND
    if status_code in (408, 429) or status_code >= 500:
        return ErrorKind.TRANSIENT
    return ErrorKind.UNKNOWN


def truncate_detail(detail: str, limit: int = MAX_RAW_DETAIL_CHARS) -> str:
    """Trim raw provider text so it stays readable in an error message."""
    detail = " ".join(detail.split())
    if len(detail) <= limit:
        return detail
    return detail[: limit - 3] + "..."


class ToolAdapter(ABC):
    """Abstract base class for tool provider adapters.

    ``invoke`` must never raise for provider or business failures: every
    outcome comes back as an ExecutionResult. Only programming errors may
    escape, and the Dispatcher treats those as Unknown failures.
    """

    provider: ProviderType

    @abstractmethod
    async def invoke(self, payload: dict[str, Any]) -> ExecutionResult:
        """Perform one provider call.

        Args:
            payload: Provider-specific input, validated by the adapter.

        Returns:
            ExecutionResult describing the outcome.
        """

    async def shutdown(self) -> None:
        """Clean up adapter resources. Default is no-op."""

    @staticmethod
    def parse_payload(model: type[M], payload: dict[str, Any]) -> M | ExecutionResult:
        """Validate ``payload`` against ``model``.

        Returns:
            The parsed model, or a Validation failure the agent can act on.
        """
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            return ExecutionResult.failure(normalize_validation_error(e), ErrorKind.VALIDATION)
