"""Scan entry point.

Startup: load settings from the environment, configure logging, resolve the
address pool for the requested family and sample candidates.
Run: probe every candidate through the bounded scheduler, reporting one
progress tick per attempt. SIGINT/SIGTERM stop new attempts.
Shutdown: rank the responsive endpoints and log the summary.
"""

from __future__ import annotations

import asyncio
import logging
import random
import signal
import sys
from collections.abc import Callable

from pydantic import ValidationError

from warpscan.config.address_pool import load_address_pool
from warpscan.config.settings import ScanSettings
from warpscan.errors import ConfigurationError
from warpscan.logging_config import configure_logging
from warpscan.models.endpoint import AttemptOutcome, ScanReport
from warpscan.pool.generator import AddressPool
from warpscan.probe.base import Prober
from warpscan.probe.udp import UdpProber
from warpscan.services.progress import ProgressTracker
from warpscan.services.ranker import rank, top
from warpscan.services.scheduler import ProbeScheduler

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


async def run_scan(
    settings: ScanSettings,
    *,
    prober: Prober | None = None,
    rng: random.Random | None = None,
    on_progress: Callable[[AttemptOutcome], None] | None = None,
    cancel_event: asyncio.Event | None = None,
) -> ScanReport:
    """Generate candidates, probe them and return the ranked report.

    Raises
    ------
    ConfigurationError
        Unsupported address family or a candidate count larger than the
        pool. Raised before any probe is sent.
    """
    pool = AddressPool.for_family(
        settings.address_family, load_address_pool(settings.address_pool_path)
    )
    endpoints = pool.generate(settings.candidate_count, rng=rng)

    tracker = ProgressTracker(
        total=len(endpoints) * settings.attempts_per_endpoint,
        observer=on_progress,
    )
    logger.info(
        "Scanning %d addresses * %d attempts (concurrency=%d, timeout=%.2fs)",
        len(endpoints),
        settings.attempts_per_endpoint,
        settings.max_concurrency,
        settings.probe_timeout_seconds,
    )

    scheduler = ProbeScheduler(
        prober or UdpProber(),
        probe_timeout_seconds=settings.probe_timeout_seconds,
    )
    scores = await scheduler.run(
        endpoints,
        attempts_per_endpoint=settings.attempts_per_endpoint,
        max_concurrency=settings.max_concurrency,
        on_progress=tracker.advance,
        cancel_event=cancel_event,
    )

    return ScanReport(
        scores=rank(scores),
        total_candidates=settings.candidate_count,
        attempts_per_endpoint=settings.attempts_per_endpoint,
        cancelled=cancel_event is not None and cancel_event.is_set(),
        stats=scheduler.get_stats(),
    )


def log_report(report: ScanReport, top_count: int = 5) -> None:
    """Log the scan summary and the fastest endpoints.

    Raises ``ValueError`` if *top_count* is negative.
    """
    fastest = top(report.scores, top_count)
    logger.info(
        report.summary(),
        extra={"candidates": report.total_candidates, "working": report.working_count},
    )
    if top_count == 0:
        return

    logger.info("Top %d IPs with lowest latency:", top_count)
    for score in fastest:
        logger.info(
            "%s - %d ms",
            score.endpoint,
            score.average_latency_ms,
            extra={"endpoint": str(score.endpoint), "latency_ms": score.average_latency_ms},
        )


async def _run_with_signals(settings: ScanSettings) -> ScanReport:
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except (NotImplementedError, RuntimeError):
            # Unsupported on Windows loops and outside the main thread
            pass
    return await run_scan(settings, cancel_event=cancel_event)


def main() -> int:
    try:
        settings = ScanSettings()
    except ValidationError as exc:
        configure_logging()
        logger.error("Invalid settings: %s", exc, extra={"error_reason": exc})
        return EXIT_CONFIG_ERROR

    configure_logging(settings.log_level, json_format=settings.log_json)

    try:
        report = asyncio.run(_run_with_signals(settings))
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc.message, extra={"error_reason": exc.message})
        return EXIT_CONFIG_ERROR

    log_report(report, settings.report_top_count)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
