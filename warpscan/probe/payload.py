"""WARP handshake probe constants."""

from __future__ import annotations

# WireGuard handshake initiation as sent by the WARP client (148 bytes)
WARP_HANDSHAKE_PACKET: bytes = bytes.fromhex(
    "013cbdafb4135cac96a29484d7a0175ab152dd3e59be35049beadf758b8d48af"
    "14ca65f25a168934746fe8bc8867b1c17113d71c0fac5c141ef9f35783ffa535"
    "7c9871f4a006662b83ad71245a862495376a5fe3b4f2e1f06974d748416670e5"
    "f9b086297f652e6dfbf742fbfc63c3d8aeb175a3e9b7582fbc67c77577e4c0b3"
    "2b05f92900000000000000000000000000000000"
)

# Handshake response is 92 bytes; anything longer is truncated
RESPONSE_BUFFER_SIZE = 92
