"""Bounded-concurrency probe scheduler.

Fans probing out across the candidate set with a fixed pool of asyncio
workers pulling endpoints from a queue, so at most ``max_concurrency``
endpoints are being probed at any time. Each worker runs the attempts for
its endpoint strictly one after another and turns the successful latencies
into an ``EndpointScore``; endpoints without a single success are dropped.

Per-attempt failures never escape: timeouts and transport errors are failed
attempts, and an unexpected exception from the prober is logged and counted
as a transport error. Completion order across endpoints is unspecified.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable

from warpscan.errors import ConfigurationError
from warpscan.models.endpoint import AttemptOutcome, AttemptStatus, Endpoint, EndpointScore
from warpscan.probe.base import Prober

logger = logging.getLogger(__name__)


class ProbeScheduler:
    """Runs repeated probes across many endpoints with bounded concurrency.

    Parameters
    ----------
    prober:
        Performs single attempts against an endpoint.
    probe_timeout_seconds:
        Per-attempt response window.
    """

    def __init__(self, prober: Prober, probe_timeout_seconds: float = 1.0) -> None:
        self._prober = prober
        self._timeout = probe_timeout_seconds

        self._active_workers = 0
        self._endpoints_completed = 0
        self._attempts = 0
        self._counts: dict[AttemptStatus, int] = dict.fromkeys(AttemptStatus, 0)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        endpoints: Iterable[Endpoint],
        attempts_per_endpoint: int,
        max_concurrency: int,
        on_progress: Callable[[AttemptOutcome], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[EndpointScore]:
        """Probe every endpoint and return scores for those that answered.

        Parameters
        ----------
        endpoints:
            Candidates to probe.
        attempts_per_endpoint:
            Sequential attempts made against each endpoint.
        max_concurrency:
            Maximum number of endpoints probed at the same time.
        on_progress:
            Called once per attempt with its outcome, whatever the result.
        cancel_event:
            When set, no further attempts are started. In-flight attempts
            are awaited; endpoints that already succeeded keep their score.

        Raises
        ------
        ConfigurationError
            If ``attempts_per_endpoint`` or ``max_concurrency`` is below 1.
        """
        if attempts_per_endpoint < 1:
            raise ConfigurationError(
                f"attempts_per_endpoint must be at least 1 (got {attempts_per_endpoint})"
            )
        if max_concurrency < 1:
            raise ConfigurationError(
                f"max_concurrency must be at least 1 (got {max_concurrency})"
            )

        self._reset_stats()

        queue: asyncio.Queue[Endpoint] = asyncio.Queue()
        for endpoint in endpoints:
            queue.put_nowait(endpoint)

        if queue.empty():
            return []

        cancel_event = cancel_event or asyncio.Event()
        results: list[EndpointScore] = []
        worker_count = min(max_concurrency, queue.qsize())
        start_time = time.monotonic()

        workers = [
            asyncio.create_task(
                self._worker_loop(
                    i, queue, results, attempts_per_endpoint, on_progress, cancel_event
                ),
                name=f"probe-worker-{i}",
            )
            for i in range(worker_count)
        ]
        await asyncio.gather(*workers)

        logger.info(
            "Probed %d endpoints with %d workers in %.1fs (%d responsive)",
            self._endpoints_completed,
            worker_count,
            time.monotonic() - start_time,
            len(results),
            extra={"candidates": self._endpoints_completed, "working": len(results)},
        )
        if cancel_event.is_set():
            logger.warning(
                "Scan cancelled, %d endpoints left unprobed", queue.qsize()
            )
        return results

    def get_stats(self) -> dict:
        """Return counters for the current or most recent run.

        Returns
        -------
        dict with keys:
            active_workers, endpoints_completed, attempts, successes,
            timeouts, transport_errors
        """
        return {
            "active_workers": self._active_workers,
            "endpoints_completed": self._endpoints_completed,
            "attempts": self._attempts,
            "successes": self._counts[AttemptStatus.SUCCESS],
            "timeouts": self._counts[AttemptStatus.TIMEOUT],
            "transport_errors": self._counts[AttemptStatus.TRANSPORT_ERROR],
        }

    # ------------------------------------------------------------------
    # Worker loop
    # ------------------------------------------------------------------

    async def _worker_loop(
        self,
        worker_id: int,
        queue: asyncio.Queue[Endpoint],
        results: list[EndpointScore],
        attempts: int,
        on_progress: Callable[[AttemptOutcome], None] | None,
        cancel_event: asyncio.Event,
    ) -> None:
        """Worker coroutine; pulls endpoints from the queue until it is empty."""
        logger.debug("Worker %d started", worker_id)

        while not cancel_event.is_set():
            try:
                endpoint = queue.get_nowait()
            except asyncio.QueueEmpty:
                break

            self._active_workers += 1
            try:
                score = await self._probe_endpoint(
                    endpoint, attempts, on_progress, cancel_event
                )
            finally:
                self._active_workers -= 1

            if score is not None:
                results.append(score)

        logger.debug("Worker %d stopped", worker_id)

    async def _probe_endpoint(
        self,
        endpoint: Endpoint,
        attempts: int,
        on_progress: Callable[[AttemptOutcome], None] | None,
        cancel_event: asyncio.Event,
    ) -> EndpointScore | None:
        latencies: list[int] = []
        made = 0

        for attempt in range(1, attempts + 1):
            if cancel_event.is_set():
                break

            outcome = await self._attempt(endpoint, attempt)
            made += 1
            self._attempts += 1
            self._counts[outcome.status] += 1

            if outcome.succeeded and outcome.latency_ms is not None:
                latencies.append(outcome.latency_ms)

            if on_progress is not None:
                try:
                    on_progress(outcome)
                except Exception:
                    logger.exception("on_progress callback error for %s", endpoint)

        # Endpoints cut short by cancellation are not counted as completed
        if made == attempts:
            self._endpoints_completed += 1

        if not latencies:
            return None

        score = EndpointScore.from_latencies(endpoint, latencies)
        logger.debug(
            "%s answered %d/%d attempts, average %d ms",
            endpoint,
            len(latencies),
            attempts,
            score.average_latency_ms,
            extra={"endpoint": str(endpoint), "latency_ms": score.average_latency_ms},
        )
        return score

    async def _attempt(self, endpoint: Endpoint, attempt: int) -> AttemptOutcome:
        try:
            return await self._prober.probe(endpoint, self._timeout)
        except Exception as exc:
            logger.error(
                "Unexpected error probing %s (attempt %d): %s",
                endpoint,
                attempt,
                exc,
                extra={
                    "endpoint": str(endpoint),
                    "attempt": attempt,
                    "error_reason": exc,
                },
            )
            return AttemptOutcome.transport_error(endpoint, str(exc))

    def _reset_stats(self) -> None:
        self._active_workers = 0
        self._endpoints_completed = 0
        self._attempts = 0
        self._counts = dict.fromkeys(AttemptStatus, 0)
