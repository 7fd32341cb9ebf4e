from __future__ import annotations

import logging
import socket

logger = logging.getLogger(__name__)


def is_reachable(host: str, port: int = 443, *, timeout: float = 3.0) -> bool:
    """Single connection attempt to *host*; ``True`` if it was accepted in time."""

    logger.debug("Probing %s:%d (timeout %.1fs)", host, port, timeout)
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError as exc:
        logger.debug("Probe of %s:%d failed: %s", host, port, exc)
        return False


class ServiceUnreachableError(Exception):
    """Raised when the shrink service host does not answer the probe."""

    def __init__(self, host: str, port: int):
        super().__init__(f"Cannot reach {host}:{port}")
        self.host = host
        self.port = port
