"""Single-attempt endpoint probers."""

from warpscan.probe.base import Prober
from warpscan.probe.payload import RESPONSE_BUFFER_SIZE, WARP_HANDSHAKE_PACKET
from warpscan.probe.udp import UdpProber

__all__ = [
    "Prober",
    "RESPONSE_BUFFER_SIZE",
    "UdpProber",
    "WARP_HANDSHAKE_PACKET",
]
