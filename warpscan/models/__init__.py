"""Scan pipeline value types."""

from warpscan.models.endpoint import (
    AttemptOutcome,
    AttemptStatus,
    Endpoint,
    EndpointScore,
    ScanReport,
)

__all__ = [
    "AttemptOutcome",
    "AttemptStatus",
    "Endpoint",
    "EndpointScore",
    "ScanReport",
]
