"""Candidate address pool."""

from warpscan.pool.generator import AddressPool

__all__ = ["AddressPool"]
