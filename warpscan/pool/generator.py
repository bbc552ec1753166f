"""Random candidate endpoint generation from a fixed address pool.

Every address of every configured CIDR block forms the address universe.
``generate`` samples distinct addresses uniformly without replacement and
draws a port for each address independently (with replacement) from the
port list. Different addresses may therefore share a port.
"""

from __future__ import annotations

import ipaddress
import logging
import random

from warpscan.config.address_pool import AddressPoolConfig
from warpscan.config.settings import AddressFamily
from warpscan.errors import (
    AddressSpaceExhaustedError,
    ConfigurationError,
    UnsupportedAddressFamilyError,
)
from warpscan.models.endpoint import Endpoint, IPAddress

logger = logging.getLogger(__name__)


class AddressPool:
    """Candidate endpoint universe built from CIDR blocks and a port list.

    Args:
        cidr_blocks: CIDR strings; overlapping blocks are de-duplicated.
        ports: UDP ports to draw from.
    """

    def __init__(self, cidr_blocks: list[str], ports: list[int]) -> None:
        if not cidr_blocks:
            raise ConfigurationError("Address pool has no CIDR blocks")
        if not ports:
            raise ConfigurationError("Address pool has no ports")

        self._cidr_blocks = list(cidr_blocks)
        self._ports = list(ports)
        self._addresses: list[IPAddress] = self._expand(self._cidr_blocks)

    @classmethod
    def from_config(cls, config: AddressPoolConfig) -> AddressPool:
        return cls(config.ipv4.cidr_blocks, config.ipv4.ports)

    @classmethod
    def for_family(cls, family: AddressFamily, config: AddressPoolConfig) -> AddressPool:
        """Return the pool for *family*.

        Raises ``UnsupportedAddressFamilyError`` for IPv6.
        """
        if family is AddressFamily.IPV6:
            raise UnsupportedAddressFamilyError(family=family.value)
        return cls.from_config(config)

    @property
    def universe_size(self) -> int:
        return len(self._addresses)

    @property
    def ports(self) -> list[int]:
        return list(self._ports)

    def generate(self, count: int, rng: random.Random | None = None) -> set[Endpoint]:
        """Sample *count* endpoints with pairwise-distinct addresses.

        Raises ``AddressSpaceExhaustedError`` if *count* exceeds the universe.
        """
        if count < 0:
            raise ConfigurationError(f"Candidate count must not be negative (got {count})")
        if count > self.universe_size:
            raise AddressSpaceExhaustedError(
                f"Requested {count} candidates but the pool only has "
                f"{self.universe_size} addresses",
                requested=count,
                available=self.universe_size,
            )

        rng = rng or random.Random()
        sampled = rng.sample(self._addresses, count)
        endpoints = {Endpoint(address=addr, port=rng.choice(self._ports)) for addr in sampled}

        logger.debug(
            "Generated %d candidates from %d addresses across %d blocks",
            len(endpoints),
            self.universe_size,
            len(self._cidr_blocks),
        )
        return endpoints

    @staticmethod
    def _expand(cidr_blocks: list[str]) -> list[IPAddress]:
        """Expand CIDR blocks to every address they contain, in order."""
        seen: dict[IPAddress, None] = {}
        for block in cidr_blocks:
            network = ipaddress.ip_network(block, strict=False)
            for addr in network:
                seen.setdefault(addr, None)
        return list(seen)
