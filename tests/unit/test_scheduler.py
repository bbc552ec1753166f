"""Unit tests for the bounded-concurrency probe scheduler."""

from __future__ import annotations

import asyncio

import pytest

from warpscan.errors import ConfigurationError
from warpscan.models.endpoint import AttemptOutcome, AttemptStatus
from warpscan.services.scheduler import ProbeScheduler


class TestAggregation:
    @pytest.mark.asyncio
    async def test_always_responding_endpoint_averages_latencies(self, scripted_prober, endpoints):
        [ep] = endpoints(1)
        prober = scripted_prober({ep: [10, 20, 33]})
        scheduler = ProbeScheduler(prober, probe_timeout_seconds=1.0)

        scores = await scheduler.run([ep], attempts_per_endpoint=3, max_concurrency=1)

        assert len(scores) == 1
        assert scores[0].endpoint == ep
        assert scores[0].average_latency_ms == (10 + 20 + 33) // 3

    @pytest.mark.asyncio
    async def test_never_responding_endpoint_is_dropped(self, scripted_prober, endpoints):
        prober = scripted_prober(default=None)
        scheduler = ProbeScheduler(prober)

        scores = await scheduler.run(endpoints(1), attempts_per_endpoint=3, max_concurrency=1)

        assert scores == []
        assert len(prober.calls) == 3

    @pytest.mark.asyncio
    async def test_average_ignores_failed_attempts(self, scripted_prober, endpoints):
        [ep] = endpoints(1)
        prober = scripted_prober({ep: [None, 40, "refused", 60]})
        scheduler = ProbeScheduler(prober)

        scores = await scheduler.run([ep], attempts_per_endpoint=4, max_concurrency=1)

        assert scores[0].average_latency_ms == 50

    @pytest.mark.asyncio
    async def test_mixed_endpoints(self, scripted_prober, endpoints):
        eps = endpoints(4)
        prober = scripted_prober(
            {
                eps[0]: [5, 5],
                eps[1]: [None, None],
                eps[2]: ["err", 7],
                eps[3]: ["err", "err"],
            }
        )
        scheduler = ProbeScheduler(prober)

        scores = await scheduler.run(eps, attempts_per_endpoint=2, max_concurrency=4)

        assert {s.endpoint for s in scores} == {eps[0], eps[2]}

    @pytest.mark.asyncio
    async def test_no_retries_beyond_configured_attempts(self, scripted_prober, endpoints):
        prober = scripted_prober(default="err")
        scheduler = ProbeScheduler(prober)

        await scheduler.run(endpoints(3), attempts_per_endpoint=2, max_concurrency=2)

        assert len(prober.calls) == 6

    @pytest.mark.asyncio
    async def test_timeout_passed_to_prober(self, scripted_prober, endpoints):
        prober = scripted_prober(default=1)
        scheduler = ProbeScheduler(prober, probe_timeout_seconds=0.25)

        await scheduler.run(endpoints(2), attempts_per_endpoint=2, max_concurrency=2)

        assert prober.timeouts_seen == [0.25] * 4

    @pytest.mark.asyncio
    async def test_empty_candidate_set(self, scripted_prober):
        scheduler = ProbeScheduler(scripted_prober())
        assert await scheduler.run([], attempts_per_endpoint=3, max_concurrency=5) == []


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_prober_exception_is_absorbed(self, scripted_prober, endpoints):
        [ep] = endpoints(1)
        prober = scripted_prober({ep: [RuntimeError("socket exploded"), 12, 14]})
        scheduler = ProbeScheduler(prober)
        outcomes: list[AttemptOutcome] = []

        scores = await scheduler.run(
            [ep], attempts_per_endpoint=3, max_concurrency=1, on_progress=outcomes.append
        )

        assert scores[0].average_latency_ms == 13
        assert outcomes[0].status is AttemptStatus.TRANSPORT_ERROR
        assert "socket exploded" in (outcomes[0].error or "")

    @pytest.mark.asyncio
    async def test_progress_callback_error_is_ignored(self, scripted_prober, endpoints):
        def broken(_outcome: AttemptOutcome) -> None:
            raise ValueError("observer bug")

        scheduler = ProbeScheduler(scripted_prober(default=3))

        scores = await scheduler.run(
            endpoints(2), attempts_per_endpoint=2, max_concurrency=2, on_progress=broken
        )

        assert len(scores) == 2


class TestProgress:
    @pytest.mark.asyncio
    async def test_one_tick_per_attempt_regardless_of_outcome(self, scripted_prober, endpoints):
        eps = endpoints(3)
        prober = scripted_prober({eps[0]: [1, 1, 1], eps[1]: [None] * 3, eps[2]: ["e"] * 3})
        scheduler = ProbeScheduler(prober)
        outcomes: list[AttemptOutcome] = []

        await scheduler.run(eps, attempts_per_endpoint=3, max_concurrency=2, on_progress=outcomes.append)

        assert len(outcomes) == 9
        statuses = [o.status for o in outcomes]
        assert statuses.count(AttemptStatus.SUCCESS) == 3
        assert statuses.count(AttemptStatus.TIMEOUT) == 3
        assert statuses.count(AttemptStatus.TRANSPORT_ERROR) == 3

    @pytest.mark.asyncio
    async def test_runs_without_observer(self, scripted_prober, endpoints):
        scheduler = ProbeScheduler(scripted_prober(default=2))
        scores = await scheduler.run(endpoints(2), attempts_per_endpoint=1, max_concurrency=1)
        assert len(scores) == 2

    @pytest.mark.asyncio
    async def test_stats(self, scripted_prober, endpoints):
        eps = endpoints(2)
        prober = scripted_prober({eps[0]: [1, None], eps[1]: ["e", 4]})
        scheduler = ProbeScheduler(prober)

        await scheduler.run(eps, attempts_per_endpoint=2, max_concurrency=2)

        assert scheduler.get_stats() == {
            "active_workers": 0,
            "endpoints_completed": 2,
            "attempts": 4,
            "successes": 2,
            "timeouts": 1,
            "transport_errors": 1,
        }


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrency_never_exceeds_limit(self, scripted_prober, endpoints):
        prober = scripted_prober(default=1, delay=0.01)
        scheduler = ProbeScheduler(prober)

        await scheduler.run(endpoints(20), attempts_per_endpoint=2, max_concurrency=4)

        assert prober.max_in_flight == 4

    @pytest.mark.asyncio
    async def test_concurrency_capped_by_candidate_count(self, scripted_prober, endpoints):
        prober = scripted_prober(default=1, delay=0.01)
        scheduler = ProbeScheduler(prober)

        await scheduler.run(endpoints(3), attempts_per_endpoint=1, max_concurrency=100)

        assert prober.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_attempts_within_endpoint_are_sequential(self, scripted_prober, endpoints):
        prober = scripted_prober(default=1, delay=0.005)
        scheduler = ProbeScheduler(prober)

        await scheduler.run(endpoints(6), attempts_per_endpoint=3, max_concurrency=6)

        assert prober.overlapping_attempts == 0
        assert len(prober.calls) == 18

    @pytest.mark.asyncio
    async def test_sequential_with_single_worker(self, scripted_prober, endpoints):
        eps = endpoints(3)
        prober = scripted_prober(default=1)
        scheduler = ProbeScheduler(prober)

        await scheduler.run(eps, attempts_per_endpoint=2, max_concurrency=1)

        # One worker finishes every attempt of an endpoint before the next
        assert prober.calls == [eps[0], eps[0], eps[1], eps[1], eps[2], eps[2]]


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_before_start_sends_nothing(self, scripted_prober, endpoints):
        prober = scripted_prober(default=1)
        scheduler = ProbeScheduler(prober)
        cancel = asyncio.Event()
        cancel.set()

        scores = await scheduler.run(
            endpoints(5), attempts_per_endpoint=3, max_concurrency=2, cancel_event=cancel
        )

        assert scores == []
        assert prober.calls == []

    @pytest.mark.asyncio
    async def test_cancel_stops_new_attempts(self, scripted_prober, endpoints):
        prober = scripted_prober(default=1)
        scheduler = ProbeScheduler(prober)
        cancel = asyncio.Event()
        ticks: list[AttemptOutcome] = []

        def on_progress(outcome: AttemptOutcome) -> None:
            ticks.append(outcome)
            if len(ticks) == 4:
                cancel.set()

        scores = await scheduler.run(
            endpoints(10),
            attempts_per_endpoint=3,
            max_concurrency=1,
            on_progress=on_progress,
            cancel_event=cancel,
        )

        assert len(prober.calls) == 4
        # First endpoint finished, second answered once before the stop
        assert len(scores) == 2
        # Only the endpoint that ran all its attempts counts as completed
        assert scheduler.get_stats()["endpoints_completed"] == 1
        assert scheduler.get_stats()["attempts"] == 4


class TestValidation:
    @pytest.mark.asyncio
    async def test_zero_attempts_rejected(self, scripted_prober, endpoints):
        scheduler = ProbeScheduler(scripted_prober())
        with pytest.raises(ConfigurationError):
            await scheduler.run(endpoints(1), attempts_per_endpoint=0, max_concurrency=1)

    @pytest.mark.asyncio
    async def test_zero_concurrency_rejected(self, scripted_prober, endpoints):
        prober = scripted_prober()
        scheduler = ProbeScheduler(prober)
        with pytest.raises(ConfigurationError):
            await scheduler.run(endpoints(1), attempts_per_endpoint=1, max_concurrency=0)
        assert prober.calls == []
