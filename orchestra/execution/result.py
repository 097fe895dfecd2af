"""
orchestra.execution.result - Uniform Execution Outcome

Every tool invocation, whatever provider it targets and however it fails,
ends in one ExecutionResult. Orchestrators (and ultimately the model driving
the agent) only ever reason about this shape.

Example:
    >>> ok = ExecutionResult.success("Successfully created Jira issue PROJ-1")
    >>> ok.is_success
    True
    >>> bad = ExecutionResult.failure("summary: is required", ErrorKind.VALIDATION)
    >>> bad.error_kind
    <ErrorKind.VALIDATION: 'validation'>
"""

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

UNKNOWN_ERROR = "Unknown error"


class ErrorKind(StrEnum):
    """Classification of a failed invocation. Drives the retry policy."""

    VALIDATION = "validation"  # Provider rejected the business input
    TRANSIENT = "transient"  # Network / availability problem
    AUTH = "auth"  # Credential or permission problem
    NOT_FOUND = "not_found"  # Referenced resource absent
    UNKNOWN = "unknown"  # Unrecognised failure shape


class ExecutionResult(BaseModel):
    """
    Outcome of one tool invocation.

    Exactly one of ``message`` (success) and ``error_message`` (failure) is
    set. Build instances with :meth:`success` / :meth:`failure`; the model
    validator rejects any other combination, and the model is frozen so the
    invariant holds for the lifetime of the value.
    """

    model_config = ConfigDict(frozen=True)

    is_success: bool = Field(..., description="Whether the invocation succeeded")
    message: str | None = Field(default=None, description="Summary of what happened")
    error_message: str | None = Field(default=None, description="Normalized error text")
    error_kind: ErrorKind | None = Field(default=None, description="Failure classification")

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> Self:
        if self.is_success:
            if self.message is None or self.error_message is not None or self.error_kind:
                raise ValueError("successful result must carry a message and no error")
        else:
            if self.error_message is None or self.message is not None:
                raise ValueError("failed result must carry an error_message and no message")
            if self.error_kind is None:
                raise ValueError("failed result must carry an error_kind")
        return self

    @classmethod
    def success(cls, message: str) -> "ExecutionResult":
        """Build a successful result."""
        return cls(is_success=True, message=message)

    @classmethod
    def failure(cls, error_message: str, kind: ErrorKind) -> "ExecutionResult":
        """Build a failed result. A blank message degrades to ``"Unknown error"``."""
        if not error_message or not error_message.strip():
            error_message = UNKNOWN_ERROR
        return cls(is_success=False, error_message=error_message, error_kind=kind)

    @property
    def is_retryable(self) -> bool:
        """True for failures whose kind may change on a later attempt."""
        return not self.is_success and self.error_kind in (
            ErrorKind.TRANSIENT,
            ErrorKind.UNKNOWN,
        )
