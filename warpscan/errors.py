"""Error hierarchy for the endpoint scanner.

All scanner-specific errors extend ScanError. Configuration errors are fatal
and raised before any probing begins; per-attempt transport errors are
absorbed by the prober and never escape the scheduler.
"""

from __future__ import annotations


class ScanError(Exception):
    """Base error for all scanner-specific errors."""

    message: str = "Scan error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Configuration errors (fatal)
# ---------------------------------------------------------------------------


class ConfigurationError(ScanError):
    """Invalid scan configuration; aborts the run before probing."""

    message = "Invalid scan configuration"


class UnsupportedAddressFamilyError(ConfigurationError):
    """Requested address family has no candidate generator."""

    message = "IPv6 candidate generation is not implemented"


class AddressSpaceExhaustedError(ConfigurationError):
    """More candidates requested than the address pool contains."""

    message = "Requested candidate count exceeds the available address space"


# ---------------------------------------------------------------------------
# Per-attempt errors (absorbed)
# ---------------------------------------------------------------------------


class ProbeTransportError(ScanError):
    """Socket bind/send/receive failure during a single probe attempt."""

    message = "Probe transport error"
