"""
orchestra.execution.dispatcher - Execution Dispatcher

Runs execution requests through the matching tool adapter with a retry
policy keyed on the failure's ErrorKind, and always hands back exactly one
terminal ExecutionResult per request.

Features:
- Bounded worker pool across requests; attempts within one request are
  strictly sequential
- Exponential backoff with jitter between retries, capped at a maximum delay
- Per-provider concurrency / rate limits through ProviderLimiter
- Cancellation by request id, observed at the next suspension point
- Attempt events emitted to an optional sink for execution history

Example:
    >>> dispatcher = Dispatcher({ProviderType.JIRA: jira_adapter})
    >>> result = await dispatcher.submit(
    ...     ExecutionRequest(
    ...         id="ticket-42",
    ...         provider=ProviderType.JIRA,
    ...         payload={"action": "get_issue", "issue_key": "PROJ-1"},
    ...     )
    ... )
    >>> if result.is_success:
    ...     print(result.message)
    ... else:
    ...     print(f"{result.error_kind}: {result.error_message}")
"""

import asyncio
import logging
import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from orchestra.exceptions import DuplicateRequestError, UnknownProviderError
from orchestra.execution.config import DispatcherConfig
from orchestra.execution.events import ExecutionEvent, ExecutionEventSink
from orchestra.execution.ratelimit import ProviderLimiter, wait_unless_cancelled
from orchestra.execution.request import ExecutionRequest
from orchestra.execution.result import ErrorKind, ExecutionResult

if TYPE_CHECKING:
    from orchestra.integrations.base import ToolAdapter

logger = logging.getLogger(__name__)

# Keeps 2 ** (attempt - 1) inside float range for absurd max_attempts values
_MAX_BACKOFF_EXPONENT = 32


class RequestState(StrEnum):
    """Lifecycle of a request inside the Dispatcher."""

    PENDING = "pending"
    RUNNING = "running"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class _InFlight:
    """Bookkeeping for one submitted request."""

    request: ExecutionRequest
    cancelled: asyncio.Event = field(default_factory=asyncio.Event)
    state: RequestState = RequestState.PENDING
    attempts: int = 0


def cancelled_result(request_id: str) -> ExecutionResult:
    return ExecutionResult.failure(f"Execution '{request_id}' was cancelled", ErrorKind.UNKNOWN)


class Dispatcher:
    """
    Executes requests concurrently with bounded retry and backoff.

    ``submit`` never raises for provider failures; those come back as failed
    results. It raises only for programming errors: an unrecognised provider
    tag (UnknownProviderError) or an id already in flight
    (DuplicateRequestError).
    """

    def __init__(
        self,
        adapters: Mapping[str, "ToolAdapter"],
        config: DispatcherConfig | None = None,
        *,
        limiter: ProviderLimiter | None = None,
        event_sink: ExecutionEventSink | None = None,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            adapters: Adapter per provider tag
            config: Pool size and backoff parameters (defaults if omitted)
            limiter: Per-provider concurrency / rate limits (unbounded defaults if omitted)
            event_sink: Receives one ExecutionEvent per attempt
        """
        self._adapters: dict[str, ToolAdapter] = {str(k): v for k, v in adapters.items()}
        self.config = config or DispatcherConfig()
        self.limiter = limiter or ProviderLimiter()
        self._event_sink = event_sink
        self._pool = asyncio.Semaphore(self.config.pool_size)
        self._in_flight: dict[str, _InFlight] = {}

    # -- Public API ------------------------------------------------------------

    async def submit(self, request: ExecutionRequest) -> ExecutionResult:
        """
        Execute one request to a terminal result.

        Args:
            request: The request to execute

        Returns:
            Terminal ExecutionResult (last attempt's outcome, or a cancellation)

        Raises:
            UnknownProviderError: No adapter registered for ``request.provider``
            DuplicateRequestError: A request with the same id is in flight
        """
        adapter = self._resolve_adapter(request)
        if request.id in self._in_flight:
            raise DuplicateRequestError(f"Request '{request.id}' is already in flight")

        entry = _InFlight(request=request)
        self._in_flight[request.id] = entry
        try:
            if not await wait_unless_cancelled(self._pool.acquire(), entry.cancelled):
                return self._finish_cancelled(entry)
            try:
                return await self._run(entry, adapter)
            finally:
                self._pool.release()
        finally:
            del self._in_flight[request.id]

    async def submit_many(self, requests: Iterable[ExecutionRequest]) -> list[ExecutionResult]:
        """
        Execute requests concurrently.

        Every request is validated before any is started, so a routing error
        fails the whole batch up front.

        Returns:
            Terminal results in the same order as ``requests``
        """
        batch = list(requests)
        seen: set[str] = set()
        for request in batch:
            self._resolve_adapter(request)
            if request.id in seen or request.id in self._in_flight:
                raise DuplicateRequestError(f"Request '{request.id}' is already in flight")
            seen.add(request.id)

        return list(await asyncio.gather(*(self.submit(r) for r in batch)))

    def cancel(self, request_id: str) -> bool:
        """
        Cancel a pending or running request.

        Takes effect at the request's next suspension point. Waiting for a
        pool slot, for provider capacity or for a backoff delay is abandoned
        immediately and no further provider call is started. An in-flight
        provider call is allowed to finish and its result discarded.

        Returns:
            True if the request was found, False otherwise
        """
        entry = self._in_flight.get(request_id)
        if entry is None:
            return False
        entry.cancelled.set()
        logger.info(
            f"Cancellation requested for {request_id}",
            extra={"request_id": request_id, "state": entry.state.value},
        )
        return True

    def state(self, request_id: str) -> RequestState | None:
        """Current state of an in-flight request, or None if not in flight."""
        entry = self._in_flight.get(request_id)
        return entry.state if entry else None

    def backoff_delay(self, attempt: int) -> float:
        """
        Delay before the retry that follows ``attempt``.

        ``base * 2^(attempt-1)`` plus up to ``jitter_ratio`` of that, capped at
        ``max_delay_seconds``. With ``jitter_ratio <= 1`` successive delays
        never decrease.
        """
        exponent = min(max(attempt, 1) - 1, _MAX_BACKOFF_EXPONENT)
        delay = self.config.base_delay_seconds * (2**exponent)
        jitter = delay * self.config.jitter_ratio * random.random()
        return min(delay + jitter, self.config.max_delay_seconds)

    async def shutdown(self) -> None:
        """Release adapter resources."""
        for adapter in self._adapters.values():
            await adapter.shutdown()

    # -- Execution loop --------------------------------------------------------

    def _resolve_adapter(self, request: ExecutionRequest) -> "ToolAdapter":
        adapter = self._adapters.get(str(request.provider))
        if adapter is None:
            raise UnknownProviderError(
                f"No adapter registered for provider '{request.provider}'. "
                f"Registered providers: {', '.join(self._adapters) or 'none'}"
            )
        return adapter

    async def _run(self, entry: _InFlight, adapter: "ToolAdapter") -> ExecutionResult:
        request = entry.request
        log_extra = {"request_id": request.id, "provider": str(request.provider)}
        unknown_retries = 0
        attempt = 0

        while True:
            if entry.cancelled.is_set():
                return self._finish_cancelled(entry)

            attempt += 1
            entry.attempts = attempt
            entry.state = RequestState.RUNNING
            if attempt > 1:
                logger.info(
                    f"Retrying {request.id} (attempt {attempt}/{request.max_attempts})",
                    extra={**log_extra, "attempt": attempt},
                )

            result = await self._attempt(adapter, request, attempt, entry.cancelled)
            if result is None:
                # Cancelled while waiting for provider capacity; no call was made
                entry.attempts = attempt - 1
                return self._finish_cancelled(entry)

            if entry.cancelled.is_set():
                # The provider call finished but its result is no longer wanted
                await self._emit(request, attempt, result, None)
                return self._finish_cancelled(entry)

            retry_delay = None
            if self._should_retry(result, attempt, request.max_attempts, unknown_retries):
                if result.error_kind is ErrorKind.UNKNOWN:
                    unknown_retries += 1
                retry_delay = self.backoff_delay(attempt)

            await self._emit(request, attempt, result, retry_delay)

            if retry_delay is None:
                return self._finish(entry, result)

            entry.state = RequestState.RETRYING
            logger.warning(
                f"{request.id} failed ({result.error_kind}), retrying in {retry_delay:.2f}s",
                extra={
                    **log_extra,
                    "attempt": attempt,
                    "error_kind": str(result.error_kind),
                    "retry_delay_seconds": retry_delay,
                },
            )
            if await self._wait_or_cancel(entry.cancelled, retry_delay):
                return self._finish_cancelled(entry)

    async def _attempt(
        self,
        adapter: "ToolAdapter",
        request: ExecutionRequest,
        attempt: int,
        cancelled: asyncio.Event,
    ) -> ExecutionResult | None:
        """Run one adapter call. Returns None if cancelled before the call started."""
        provider = str(request.provider)
        try:
            async with self.limiter.slot(provider, cancelled) as acquired:
                if not acquired:
                    return None
                result = await adapter.invoke(dict(request.payload))
        except Exception:
            # Adapters must not raise; treat a leak as an unrecognised failure
            logger.error(
                f"Adapter for {provider} raised on {request.id}",
                exc_info=True,
                extra={"request_id": request.id, "provider": provider, "attempt": attempt},
            )
            return ExecutionResult.failure(
                f"Unexpected error invoking {provider} provider", ErrorKind.UNKNOWN
            )

        if not isinstance(result, ExecutionResult):
            logger.error(
                f"Adapter for {provider} returned {type(result).__name__}",
                extra={"request_id": request.id, "provider": provider, "attempt": attempt},
            )
            return ExecutionResult.failure(
                f"Unexpected response from {provider} provider", ErrorKind.UNKNOWN
            )
        return result

    def _should_retry(
        self,
        result: ExecutionResult,
        attempt: int,
        max_attempts: int,
        unknown_retries: int,
    ) -> bool:
        """
        Decide whether a failed attempt earns another try.

        Validation, Auth and NotFound are terminal: retrying cannot change a
        provider's decision. Transient retries until attempts run out. Unknown
        retries at most ``max_unknown_retries`` times so persistent bugs are
        not masked as noise.
        """
        if result.is_success or attempt >= max_attempts:
            return False
        if result.error_kind is ErrorKind.TRANSIENT:
            return True
        if result.error_kind is ErrorKind.UNKNOWN:
            return unknown_retries < self.config.max_unknown_retries
        return False

    @staticmethod
    async def _wait_or_cancel(cancelled: asyncio.Event, delay: float) -> bool:
        """Sleep for ``delay`` seconds. Returns True if cancelled meanwhile."""
        try:
            await asyncio.wait_for(cancelled.wait(), timeout=delay)
        except TimeoutError:
            return False
        return True

    def _finish(self, entry: _InFlight, result: ExecutionResult) -> ExecutionResult:
        request = entry.request
        log_extra = {
            "request_id": request.id,
            "provider": str(request.provider),
            "attempts": entry.attempts,
        }
        if result.is_success:
            entry.state = RequestState.SUCCEEDED
            logger.info(f"{request.id} succeeded", extra=log_extra)
        else:
            entry.state = RequestState.FAILED
            logger.error(
                f"{request.id} failed after {entry.attempts} attempt(s): {result.error_message}",
                extra={**log_extra, "error_kind": str(result.error_kind)},
            )
        return result

    def _finish_cancelled(self, entry: _InFlight) -> ExecutionResult:
        entry.state = RequestState.FAILED
        logger.info(
            f"{entry.request.id} cancelled after {entry.attempts} attempt(s)",
            extra={"request_id": entry.request.id, "attempts": entry.attempts},
        )
        return cancelled_result(entry.request.id)

    async def _emit(
        self,
        request: ExecutionRequest,
        attempt: int,
        result: ExecutionResult,
        retry_delay: float | None,
    ) -> None:
        if self._event_sink is None:
            return
        event = ExecutionEvent(
            request_id=request.id,
            provider=str(request.provider),
            attempt=attempt,
            result=result,
            retry_delay_seconds=retry_delay,
        )
        try:
            await self._event_sink.record(event)
        except Exception:
            logger.warning(
                f"Failed to record execution event for {request.id}",
                exc_info=True,
                extra={"request_id": request.id, "attempt": attempt},
            )
