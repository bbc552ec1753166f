"""Address pool models and YAML loader.

Provides typed Pydantic models for the candidate address space (CIDR blocks
and UDP ports per address family) and a loader that parses the bundled YAML
file into those models.
"""

from __future__ import annotations

import ipaddress
import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# WARP edge ranges and the UDP ports they answer handshakes on
DEFAULT_IPV4_CIDR_BLOCKS: list[str] = [
    "162.159.192.0/24",
    "162.159.193.0/24",
    "162.159.195.0/24",
    "162.159.204.0/24",
    "188.114.96.0/24",
    "188.114.97.0/24",
    "188.114.98.0/24",
    "188.114.99.0/24",
]

DEFAULT_PORTS: list[int] = [
    500, 854, 859, 864, 878, 880, 890, 891, 894, 903, 908, 928, 934, 939, 942,
    943, 945, 946, 955, 968, 987, 988, 1002, 1010, 1014, 1018, 1070, 1074,
    1180, 1387, 1701, 2408, 4500, 5050, 5242, 6515, 7103, 7152, 7156, 7281,
    7559, 8319, 8742, 8854, 8886,
]


class FamilyPool(BaseModel):
    """CIDR blocks and candidate ports for one address family."""

    cidr_blocks: list[str] = Field(min_length=1)
    ports: list[int] = Field(min_length=1)

    @field_validator("cidr_blocks")
    @classmethod
    def _check_cidr_blocks(cls, value: list[str]) -> list[str]:
        for block in value:
            ipaddress.ip_network(block)  # ValueError surfaces as a validation error
        return value

    @field_validator("ports")
    @classmethod
    def _check_ports(cls, value: list[int]) -> list[int]:
        for port in value:
            if not 1 <= port <= 65535:
                raise ValueError(f"port out of range: {port}")
        return value


class AddressPoolConfig(BaseModel):
    """Static candidate address space. Only IPv4 candidates are generated."""

    ipv4: FamilyPool


_DEFAULT_CONFIG = AddressPoolConfig(
    ipv4=FamilyPool(cidr_blocks=DEFAULT_IPV4_CIDR_BLOCKS, ports=DEFAULT_PORTS),
)


def default_address_pool() -> AddressPoolConfig:
    """Return the built-in address pool."""
    return _DEFAULT_CONFIG.model_copy(deep=True)


def load_address_pool(yaml_path: str) -> AddressPoolConfig:
    """Parse an address pool YAML file into an AddressPoolConfig.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        The parsed configuration. If the file is missing, unreadable,
        unparseable or does not validate, the built-in default pool is returned.
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Address pool file not found at %s, using built-in defaults", yaml_path)
        return default_address_pool()

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to read address pool at %s: %s", yaml_path, exc)
        return default_address_pool()

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.error("Failed to parse address pool YAML at %s: %s", yaml_path, exc)
        return default_address_pool()

    if not isinstance(raw, dict) or "ipv4" not in raw:
        logger.warning("Address pool YAML missing 'ipv4' key, using built-in defaults")
        return default_address_pool()

    try:
        return AddressPoolConfig.model_validate(raw)
    except ValidationError as exc:
        logger.error("Invalid address pool at %s: %s", yaml_path, exc)
        return default_address_pool()
