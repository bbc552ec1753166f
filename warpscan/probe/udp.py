"""UDP latency prober.

Each attempt opens its own non-blocking UDP socket, sends the handshake
payload once and waits for the first datagram from any source. The socket
is closed on every exit path. Responses are not validated: any datagram
arriving inside the window counts as a reply.
"""

from __future__ import annotations

import asyncio
import logging
import socket
import time
from collections.abc import Callable

from warpscan.errors import ProbeTransportError
from warpscan.models.endpoint import AttemptOutcome, Endpoint
from warpscan.probe.base import Prober
from warpscan.probe.payload import RESPONSE_BUFFER_SIZE, WARP_HANDSHAKE_PACKET

logger = logging.getLogger(__name__)


class UdpProber(Prober):
    """Measures round-trip time to an endpoint with a single UDP datagram.

    Args:
        payload: Bytes sent as the probe.
        buffer_size: Maximum response size read.
        socket_factory: Creates the per-attempt socket.
    """

    def __init__(
        self,
        payload: bytes = WARP_HANDSHAKE_PACKET,
        buffer_size: int = RESPONSE_BUFFER_SIZE,
        socket_factory: Callable[..., socket.socket] = socket.socket,
    ) -> None:
        self._payload = payload
        self._buffer_size = buffer_size
        self._socket_factory = socket_factory

    async def probe(self, endpoint: Endpoint, timeout: float) -> AttemptOutcome:
        try:
            latency_ms = await self._exchange(endpoint, timeout)
        except asyncio.TimeoutError:
            logger.debug("Timeout from %s", endpoint, extra={"endpoint": str(endpoint)})
            return AttemptOutcome.timeout(endpoint)
        except ProbeTransportError as exc:
            logger.debug(
                "Transport error probing %s: %s",
                endpoint,
                exc.message,
                extra={"endpoint": str(endpoint), "error_reason": exc.message},
            )
            return AttemptOutcome.transport_error(endpoint, exc.message)

        return AttemptOutcome.success(endpoint, latency_ms)

    async def _exchange(self, endpoint: Endpoint, timeout: float) -> int:
        """Send the payload and wait for one datagram; return latency in ms.

        Raises ``asyncio.TimeoutError`` when nothing arrives within *timeout*
        and ``ProbeTransportError`` on any socket failure.
        """
        loop = asyncio.get_running_loop()
        bind_addr = "::" if endpoint.family == socket.AF_INET6 else "0.0.0.0"

        try:
            with self._socket_factory(endpoint.family, socket.SOCK_DGRAM) as sock:
                sock.setblocking(False)
                sock.bind((bind_addr, 0))

                await loop.sock_sendto(sock, self._payload, endpoint.sockaddr)
                logger.debug("Pinging %s", endpoint)
                start = time.monotonic()

                data, src = await asyncio.wait_for(
                    loop.sock_recvfrom(sock, self._buffer_size), timeout=timeout
                )
                elapsed_ms = int((time.monotonic() - start) * 1000)
        except asyncio.TimeoutError:
            raise
        except OSError as exc:
            raise ProbeTransportError(str(exc), endpoint=str(endpoint)) from exc

        # Clamp to the window; a reply at its edge can measure slightly over
        latency_ms = min(elapsed_ms, int(timeout * 1000))
        logger.debug(
            "Received %d bytes from %s in %d ms",
            len(data),
            src,
            latency_ms,
            extra={"endpoint": str(endpoint), "latency_ms": latency_ms},
        )
        return latency_ms
