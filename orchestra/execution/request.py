"""
orchestra.execution.request - Execution Requests
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProviderType(StrEnum):
    """Supported tool providers."""

    JIRA = "jira"  # Issue tracker
    MODEL = "model"  # Language-model endpoint


class ExecutionRequest(BaseModel):
    """
    One unit of work asking a provider to perform an action.

    ``provider`` accepts any string so that a misrouted request reaches the
    Dispatcher, which rejects it as a programming error. ``payload`` is opaque
    to the Dispatcher and interpreted only by the selected adapter.

    Example:
        >>> request = ExecutionRequest(
        ...     id="ticket-42:create",
        ...     provider=ProviderType.JIRA,
        ...     payload={"action": "get_issue", "issue_key": "PROJ-1"},
        ...     max_attempts=5,
        ... )
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Correlation / idempotency id")
    provider: ProviderType | str = Field(..., description="Provider tag selecting the adapter")
    payload: dict[str, Any] = Field(default_factory=dict, description="Provider-specific input")
    max_attempts: int = Field(default=3, ge=1, description="Upper bound on adapter calls")
