"""Pydantic Settings for the endpoint scanner.

All environment variables use the WARPSCAN_ prefix.
Example: WARPSCAN_CANDIDATE_COUNT=200, WARPSCAN_PROBE_TIMEOUT_SECONDS=0.5
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_ADDRESS_POOL_PATH = str(Path(__file__).with_name("address_pool.yaml"))


class AddressFamily(str, Enum):
    """IP version of the candidate endpoints."""

    IPV4 = "ipv4"
    IPV6 = "ipv6"


class ScanSettings(BaseSettings):
    """Scan configuration validated from environment variables."""

    # Candidate generation
    candidate_count: int = Field(default=100, ge=1)
    address_family: AddressFamily = AddressFamily.IPV4
    address_pool_path: str = DEFAULT_ADDRESS_POOL_PATH

    # Probing
    max_concurrency: int = Field(default=100, ge=1)
    attempts_per_endpoint: int = Field(default=3, ge=1)
    probe_timeout_seconds: float = Field(default=1.0, gt=0)

    # Reporting
    report_top_count: int = Field(default=5, ge=0)
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {"env_prefix": "WARPSCAN_"}
