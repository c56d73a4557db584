"""Graceful shutdown: wait for in-flight requests before closing the pool.

A transition or finalization interrupted mid-transaction would be rolled back
by the database, but the client would never learn whether it landed. The
tracker lets the lifespan hook hold the engine open until open requests end.
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from src.crm.core.logging import get_logger

logger = get_logger(__name__)


class RequestTracker:
    """Counts requests in flight and signals when the count reaches zero."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Forget all state. Used between tests."""
        self._in_flight = 0
        self._shutting_down = False
        self._idle = asyncio.Event()

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    @property
    def in_flight_count(self) -> int:
        return self._in_flight

    @asynccontextmanager
    async def track_request(self) -> AsyncGenerator[None]:
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1
            if self._shutting_down and self._in_flight == 0:
                logger.info("All requests drained")
                self._idle.set()

    async def start_shutdown(self) -> None:
        """Enter draining mode; the health check starts reporting it."""
        self._shutting_down = True
        if self._in_flight == 0:
            self._idle.set()
        else:
            logger.info("Waiting for in-flight requests", in_flight=self._in_flight)

    async def wait_for_drain(self, timeout: float) -> bool:
        """Block until no request is in flight.

        Returns:
            False if ``timeout`` seconds passed with requests still running.
        """
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout)
        except TimeoutError:
            logger.warning(
                "Shutdown timeout with requests still in flight",
                timeout=timeout,
                in_flight=self._in_flight,
            )
            return False
        return True


request_tracker = RequestTracker()
