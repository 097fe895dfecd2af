"""
orchestra.execution.events - Attempt Events

The Dispatcher reports every attempt as an ExecutionEvent. Persisting
execution history is the sink's job; the Dispatcher only emits.
"""

from datetime import UTC, datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from orchestra.execution.result import ExecutionResult


class ExecutionEvent(BaseModel):
    """Outcome of a single attempt of a request."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    provider: str
    attempt: int = Field(..., ge=1)
    result: ExecutionResult
    # Delay scheduled before the next attempt, None when the attempt was final
    retry_delay_seconds: float | None = None
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ExecutionEventSink(Protocol):
    """
    Protocol for execution history consumers.

    Implementations must not rely on being called in request order; events of
    different requests interleave. Exceptions raised here are logged by the
    Dispatcher and never reach the caller of ``submit``.
    """

    async def record(self, event: ExecutionEvent) -> None: ...


class InMemoryEventSink:
    """Keeps events in a list. Useful for tests and local runs."""

    def __init__(self) -> None:
        self.events: list[ExecutionEvent] = []

    async def record(self, event: ExecutionEvent) -> None:
        self.events.append(event)

    def for_request(self, request_id: str) -> list[ExecutionEvent]:
        return [e for e in self.events if e.request_id == request_id]
