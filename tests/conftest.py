"""Shared test fixtures and the scripted prober for the scanner test suite."""

from __future__ import annotations

import asyncio
import ipaddress
import os
import random
from collections.abc import Callable

import pytest

from warpscan.config.settings import ScanSettings
from warpscan.models.endpoint import AttemptOutcome, Endpoint
from warpscan.pool.generator import AddressPool
from warpscan.probe.base import Prober


# ---------------------------------------------------------------------------
# Keep WARPSCAN_* variables from the developer shell out of the tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_scan_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("WARPSCAN_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Scripted prober
# ---------------------------------------------------------------------------

# Script entries: int -> success with that latency, None -> timeout,
# str -> transport error with that message, Exception -> raised from probe()
ScriptEntry = int | str | None | Exception


class ScriptedProber(Prober):
    """Prober returning scripted outcomes and recording how it was driven.

    Each endpoint consumes its own script in order; once exhausted (or for
    endpoints with no script) ``default`` is used.
    """

    def __init__(
        self,
        script: dict[Endpoint, list[ScriptEntry]] | None = None,
        *,
        default: ScriptEntry | Callable[[Endpoint], ScriptEntry] = None,
        delay: float = 0.0,
    ) -> None:
        self._script = {ep: list(entries) for ep, entries in (script or {}).items()}
        self._default = default
        self._delay = delay

        self.calls: list[Endpoint] = []
        self.timeouts_seen: list[float] = []
        self.in_flight: set[Endpoint] = set()
        self.max_in_flight = 0
        self.overlapping_attempts = 0

    async def probe(self, endpoint: Endpoint, timeout: float) -> AttemptOutcome:
        if endpoint in self.in_flight:
            self.overlapping_attempts += 1
        self.in_flight.add(endpoint)
        self.max_in_flight = max(self.max_in_flight, len(self.in_flight))
        self.calls.append(endpoint)
        self.timeouts_seen.append(timeout)

        try:
            if self._delay:
                await asyncio.sleep(self._delay)
            entry = self._next_entry(endpoint)
        finally:
            self.in_flight.discard(endpoint)

        if isinstance(entry, Exception):
            raise entry
        if entry is None:
            return AttemptOutcome.timeout(endpoint)
        if isinstance(entry, str):
            return AttemptOutcome.transport_error(endpoint, entry)
        return AttemptOutcome.success(endpoint, entry)

    def _next_entry(self, endpoint: Endpoint) -> ScriptEntry:
        entries = self._script.get(endpoint)
        if entries:
            return entries.pop(0)
        if callable(self._default):
            return self._default(endpoint)
        return self._default


@pytest.fixture
def scripted_prober() -> type[ScriptedProber]:
    return ScriptedProber


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> ScanSettings:
    """Settings sized for fast tests."""
    return ScanSettings(
        candidate_count=10,
        max_concurrency=5,
        attempts_per_endpoint=3,
        probe_timeout_seconds=0.2,
        log_json=False,
    )


@pytest.fixture
def small_pool() -> AddressPool:
    """Two /29 blocks (16 addresses) and three ports."""
    return AddressPool(["10.0.0.0/29", "10.0.1.0/29"], [1000, 2000, 3000])


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


def make_endpoints(count: int, port: int = 2408) -> list[Endpoint]:
    base = int(ipaddress.IPv4Address("192.0.2.0"))
    return [Endpoint(ipaddress.IPv4Address(base + i), port) for i in range(count)]


@pytest.fixture
def endpoints() -> Callable[..., list[Endpoint]]:
    return make_endpoints

