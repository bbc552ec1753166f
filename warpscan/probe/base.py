"""Abstract prober interface.

A prober performs a single latency measurement against one endpoint. The
scheduler only depends on this interface, so tests can substitute scripted
probers for the UDP implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from warpscan.models.endpoint import AttemptOutcome, Endpoint


class Prober(ABC):
    """Base class for endpoint probers.

    Implementations must be safe to call concurrently for different
    endpoints.
    """

    @abstractmethod
    async def probe(self, endpoint: Endpoint, timeout: float) -> AttemptOutcome:
        """Run exactly one attempt against endpoint and return its outcome.

        Timeouts and transport failures are reported as outcomes, not raised.
        """
        raise NotImplementedError
