"""
orchestra.execution.ratelimit - Per-Provider Concurrency and Rate Limits

Bounds how hard concurrently dispatched requests may hit one provider.
Each provider gets its own semaphore (concurrent calls) and, optionally, a
sliding-window request budget guarded by its own lock, so requests to
different providers never contend with each other.

Usage:
    limiter = ProviderLimiter({"jira": ProviderLimits(max_concurrency=4, max_requests=100)})

    async with limiter.slot("jira"):
        response = await client.get(...)
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


async def wait_unless_cancelled(aw: Awaitable[Any], cancelled: asyncio.Event) -> bool:
    """
    Await ``aw`` unless ``cancelled`` is set first.

    Whatever ``aw`` was waiting for is abandoned when the cancel wins.

    Returns:
        True if ``aw`` completed, False if it was abandoned
    """
    task = asyncio.ensure_future(aw)
    cancel_wait = asyncio.ensure_future(cancelled.wait())
    try:
        await asyncio.wait({task, cancel_wait}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        cancel_wait.cancel()
        if not task.done():
            task.cancel()

    # The task may still finish normally if it completed before the cancel landed
    await asyncio.wait({task})
    if task.cancelled():
        return False
    task.result()
    return True


class ProviderLimits(BaseModel):
    """Limits applied to one provider."""

    max_concurrency: int = Field(default=8, ge=1, description="Concurrent in-flight calls")
    max_requests: int | None = Field(
        default=None, ge=1, description="Calls allowed per window (None = unlimited)"
    )
    window_seconds: float = Field(default=60.0, gt=0, description="Sliding window size")


@dataclass
class _ProviderState:
    """Mutable limiter state for a single provider."""

    limits: ProviderLimits
    semaphore: asyncio.Semaphore
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    request_times: list[float] = field(default_factory=list)
    in_flight: int = 0
    peak_in_flight: int = 0


class ProviderLimiter:
    """
    Sliding-window rate limiter plus concurrency cap, keyed by provider.

    Attributes:
        default_limits: Limits for providers without an explicit entry

    Example:
        >>> limiter = ProviderLimiter({"jira": ProviderLimits(max_concurrency=2)})
        >>> async with limiter.slot("jira"):
        ...     ...
        >>> limiter.peak_in_flight("jira") <= 2
        True
    """

    def __init__(
        self,
        limits: Mapping[str, ProviderLimits] | None = None,
        default_limits: ProviderLimits | None = None,
    ) -> None:
        self._limits = dict(limits or {})
        self.default_limits = default_limits or ProviderLimits()
        self._states: dict[str, _ProviderState] = {}

    def _state(self, provider: str) -> _ProviderState:
        state = self._states.get(provider)
        if state is None:
            limits = self._limits.get(provider, self.default_limits)
            state = _ProviderState(
                limits=limits,
                semaphore=asyncio.Semaphore(limits.max_concurrency),
            )
            self._states[provider] = state
        return state

    @asynccontextmanager
    async def slot(
        self, provider: str, cancelled: asyncio.Event | None = None
    ) -> AsyncIterator[bool]:
        """
        Hold one call slot for ``provider`` for the duration of the block.

        Args:
            provider: Provider tag
            cancelled: Abandons the wait for capacity when set

        Yields:
            True while holding the slot. False if ``cancelled`` was set before
            capacity became available; nothing is held or counted then.
        """
        state = self._state(provider)
        if not await self._acquire(state.semaphore, cancelled):
            yield False
            return

        try:
            if not await self._reserve(provider, state, cancelled):
                yield False
                return
            state.in_flight += 1
            state.peak_in_flight = max(state.peak_in_flight, state.in_flight)
            try:
                yield True
            finally:
                state.in_flight -= 1
        finally:
            state.semaphore.release()

    @staticmethod
    async def _acquire(semaphore: asyncio.Semaphore, cancelled: asyncio.Event | None) -> bool:
        if cancelled is None:
            await semaphore.acquire()
            return True
        if not await wait_unless_cancelled(semaphore.acquire(), cancelled):
            return False
        if cancelled.is_set():
            semaphore.release()
            return False
        return True

    async def _reserve(
        self, provider: str, state: _ProviderState, cancelled: asyncio.Event | None
    ) -> bool:
        max_requests = state.limits.max_requests
        if max_requests is None:
            return True

        window = state.limits.window_seconds
        while True:
            if cancelled is not None and cancelled.is_set():
                return False
            async with state.lock:
                now = time.monotonic()
                cutoff = now - window
                state.request_times = [t for t in state.request_times if t > cutoff]
                if len(state.request_times) < max_requests:
                    state.request_times.append(now)
                    return True
                wait_seconds = max(0.0, min(state.request_times) + window - now)

            logger.debug(
                f"Rate limit reached for provider {provider}, waiting {wait_seconds:.2f}s",
                extra={"provider": provider, "wait_seconds": wait_seconds},
            )
            if cancelled is None:
                await asyncio.sleep(wait_seconds)
            elif not await wait_unless_cancelled(asyncio.sleep(wait_seconds), cancelled):
                return False

    def in_flight(self, provider: str) -> int:
        """Number of calls currently holding a slot for ``provider``."""
        state = self._states.get(provider)
        return state.in_flight if state else 0

    def peak_in_flight(self, provider: str) -> int:
        """Highest number of simultaneous calls observed for ``provider``."""
        state = self._states.get(provider)
        return state.peak_in_flight if state else 0

    def get_remaining(self, provider: str) -> int | None:
        """
        Calls left in the current window for ``provider``.

        Returns:
            Remaining budget, or None if the provider has no request budget
        """
        state = self._state(provider)
        if state.limits.max_requests is None:
            return None
        cutoff = time.monotonic() - state.limits.window_seconds
        current = len([t for t in state.request_times if t > cutoff])
        return max(0, state.limits.max_requests - current)
