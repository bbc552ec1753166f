"""Configuration module: settings and the candidate address pool."""

from warpscan.config.address_pool import (
    AddressPoolConfig,
    FamilyPool,
    default_address_pool,
    load_address_pool,
)
from warpscan.config.settings import AddressFamily, ScanSettings

__all__ = [
    "AddressFamily",
    "AddressPoolConfig",
    "FamilyPool",
    "ScanSettings",
    "default_address_pool",
    "load_address_pool",
]
