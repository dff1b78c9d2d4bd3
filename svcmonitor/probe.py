"""TCP reachability check for a single host/port."""

import asyncio
import logging

from .models import ServiceState

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1.0


async def probe_port(
    host: str, port: int, timeout: float = DEFAULT_TIMEOUT
) -> ServiceState:
    """Return RUNNING if a TCP connection to ``host:port`` opens in time.

    The connection is closed as soon as it is established. Timeouts and
    connection errors both map to STOPPED; nothing is raised.
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )
    except asyncio.TimeoutError:
        logger.debug("%s:%s did not answer within %.2fs", host, port, timeout)
        return ServiceState.STOPPED
    except (OSError, ValueError) as exc:
        # ValueError covers hosts that fail IDNA encoding
        logger.debug("%s:%s connection failed: %s", host, port, exc)
        return ServiceState.STOPPED

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        # Peer reset during close; the handshake already succeeded
        pass
    return ServiceState.RUNNING
