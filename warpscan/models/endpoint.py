"""Value types flowing through the scan pipeline."""

from __future__ import annotations

import ipaddress
import socket
from dataclasses import dataclass, field
from enum import Enum

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


@dataclass(frozen=True)
class Endpoint:
    """An (IP address, UDP port) pair under test."""

    address: IPAddress
    port: int

    @classmethod
    def parse(cls, address: str, port: int) -> Endpoint:
        return cls(address=ipaddress.ip_address(address), port=port)

    @property
    def family(self) -> socket.AddressFamily:
        return socket.AF_INET6 if self.address.version == 6 else socket.AF_INET

    @property
    def sockaddr(self) -> tuple[str, int]:
        return (str(self.address), self.port)

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.address.version, int(self.address), self.port)

    def __str__(self) -> str:
        if self.address.version == 6:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"


class AttemptStatus(str, Enum):
    """Outcome of a single probe attempt."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one probe attempt. Consumed immediately, never retained."""

    endpoint: Endpoint
    status: AttemptStatus
    latency_ms: int | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is AttemptStatus.SUCCESS

    @classmethod
    def success(cls, endpoint: Endpoint, latency_ms: int) -> AttemptOutcome:
        return cls(endpoint=endpoint, status=AttemptStatus.SUCCESS, latency_ms=latency_ms)

    @classmethod
    def timeout(cls, endpoint: Endpoint) -> AttemptOutcome:
        return cls(endpoint=endpoint, status=AttemptStatus.TIMEOUT)

    @classmethod
    def transport_error(cls, endpoint: Endpoint, error: str) -> AttemptOutcome:
        return cls(endpoint=endpoint, status=AttemptStatus.TRANSPORT_ERROR, error=error)


@dataclass(frozen=True)
class EndpointScore:
    """Mean latency of an endpoint across its successful attempts."""

    endpoint: Endpoint
    average_latency_ms: int

    @classmethod
    def from_latencies(cls, endpoint: Endpoint, latencies: list[int]) -> EndpointScore:
        """Build a score from successful latencies (integer-truncated mean).

        Raises ``ValueError`` if *latencies* is empty.
        """
        if not latencies:
            raise ValueError(f"no successful attempts for {endpoint}")
        return cls(endpoint=endpoint, average_latency_ms=sum(latencies) // len(latencies))


@dataclass
class ScanReport:
    """Final outcome of a scan, handed to the reporting layer."""

    scores: list[EndpointScore]  # ranked, fastest first
    total_candidates: int
    attempts_per_endpoint: int
    cancelled: bool = False
    stats: dict = field(default_factory=dict)

    @property
    def working_count(self) -> int:
        return len(self.scores)

    def summary(self) -> str:
        return f"Found {self.working_count} working IPs out of {self.total_candidates} IPs"
