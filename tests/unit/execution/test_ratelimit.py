"""
Tests for orchestra.execution.ratelimit.

Tests:
- Concurrency cap per provider
- Sliding window request budget
- Providers tracked separately
"""

import asyncio

import pytest

from orchestra.execution.ratelimit import ProviderLimiter, ProviderLimits


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_never_exceeds_max_concurrency(self):
        limiter = ProviderLimiter({"jira": ProviderLimits(max_concurrency=2)})

        async def call():
            async with limiter.slot("jira"):
                assert limiter.in_flight("jira") <= 2
                await asyncio.sleep(0.01)

        await asyncio.gather(*(call() for _ in range(10)))

        assert limiter.peak_in_flight("jira") == 2
        assert limiter.in_flight("jira") == 0

    @pytest.mark.asyncio
    async def test_providers_do_not_contend(self):
        limiter = ProviderLimiter(
            {
                "jira": ProviderLimits(max_concurrency=1),
                "model": ProviderLimits(max_concurrency=1),
            }
        )
        jira_entered = asyncio.Event()
        release_jira = asyncio.Event()

        async def hold_jira():
            async with limiter.slot("jira"):
                jira_entered.set()
                await release_jira.wait()

        holder = asyncio.create_task(hold_jira())
        await jira_entered.wait()

        # The model slot is free even though jira's only slot is held
        async with limiter.slot("model"):
            assert limiter.in_flight("model") == 1
            assert limiter.in_flight("jira") == 1

        release_jira.set()
        await holder

    @pytest.mark.asyncio
    async def test_releases_slot_on_error(self):
        limiter = ProviderLimiter({"jira": ProviderLimits(max_concurrency=1)})

        with pytest.raises(RuntimeError):
            async with limiter.slot("jira"):
                raise RuntimeError("boom")

        assert limiter.in_flight("jira") == 0
        async with limiter.slot("jira"):
            pass

    @pytest.mark.asyncio
    async def test_unknown_provider_uses_default_limits(self):
        limiter = ProviderLimiter(default_limits=ProviderLimits(max_concurrency=3))

        async def call():
            async with limiter.slot("other"):
                await asyncio.sleep(0.01)

        await asyncio.gather(*(call() for _ in range(6)))

        assert limiter.peak_in_flight("other") == 3


class TestRequestBudget:
    def test_no_budget_reports_none(self):
        limiter = ProviderLimiter({"jira": ProviderLimits()})
        assert limiter.get_remaining("jira") is None

    @pytest.mark.asyncio
    async def test_remaining_decreases(self):
        limiter = ProviderLimiter({"jira": ProviderLimits(max_requests=3, window_seconds=60)})

        assert limiter.get_remaining("jira") == 3
        async with limiter.slot("jira"):
            pass
        assert limiter.get_remaining("jira") == 2

    @pytest.mark.asyncio
    async def test_waits_for_window_when_budget_exhausted(self):
        limiter = ProviderLimiter(
            {"jira": ProviderLimits(max_concurrency=5, max_requests=2, window_seconds=0.1)}
        )
        loop = asyncio.get_running_loop()
        start = loop.time()

        for _ in range(3):
            async with limiter.slot("jira"):
                pass

        # Third call had to wait for the first to leave the window
        assert loop.time() - start >= 0.09

    def test_limits_validation(self):
        with pytest.raises(ValueError):
            ProviderLimits(max_concurrency=0)


class TestCancellableSlot:
    @pytest.mark.asyncio
    async def test_cancel_abandons_concurrency_wait(self):
        limiter = ProviderLimiter({"jira": ProviderLimits(max_concurrency=1)})
        cancelled = asyncio.Event()
        release = asyncio.Event()
        entered = asyncio.Event()

        async def hold():
            async with limiter.slot("jira"):
                entered.set()
                await release.wait()

        async def wait_for_slot():
            async with limiter.slot("jira", cancelled) as acquired:
                return acquired

        holder = asyncio.create_task(hold())
        await entered.wait()
        waiter = asyncio.create_task(wait_for_slot())
        await asyncio.sleep(0.01)

        cancelled.set()
        assert await asyncio.wait_for(waiter, timeout=1) is False
        assert limiter.in_flight("jira") == 1

        release.set()
        await holder
        # The abandoned wait did not leak or consume a permit
        async with limiter.slot("jira", asyncio.Event()) as acquired:
            assert acquired is True
        assert limiter.in_flight("jira") == 0

    @pytest.mark.asyncio
    async def test_cancel_abandons_window_wait(self):
        limiter = ProviderLimiter({"jira": ProviderLimits(max_requests=1, window_seconds=30)})
        cancelled = asyncio.Event()

        async with limiter.slot("jira"):
            pass

        async def wait_for_slot():
            async with limiter.slot("jira", cancelled) as acquired:
                return acquired

        waiter = asyncio.create_task(wait_for_slot())
        await asyncio.sleep(0.01)
        cancelled.set()

        assert await asyncio.wait_for(waiter, timeout=1) is False
        assert limiter.get_remaining("jira") == 0
        assert limiter.in_flight("jira") == 0

    @pytest.mark.asyncio
    async def test_already_cancelled_does_not_reserve(self):
        limiter = ProviderLimiter({"jira": ProviderLimits(max_requests=2)})
        cancelled = asyncio.Event()
        cancelled.set()

        async with limiter.slot("jira", cancelled) as acquired:
            assert acquired is False

        assert limiter.get_remaining("jira") == 2
        assert limiter.peak_in_flight("jira") == 0
