"""Bound on the number of chunk uploads in flight."""

import asyncio

from partstream.const import DEFAULT_CONCURRENT_PARTS


class ConcurrencyGate:
    """Admits at most ``max_concurrent`` chunk uploads at a time.

    A producer waiting in :meth:`acquire` is the backpressure signal: writes
    stay suspended until :meth:`release` frees a slot.
    """

    def __init__(self, max_concurrent: int = DEFAULT_CONCURRENT_PARTS) -> None:
        """Initialise the gate.

        Args:
            max_concurrent: Maximum number of slots held at once.
        """
        if max_concurrent < 1:
            raise ValueError(
                f"max_concurrent must be a positive integer, got {max_concurrent}"
            )
        self._max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def in_flight(self) -> int:
        """Number of slots currently held."""
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of slots ever held at once."""
        return self._peak_in_flight

    @property
    def saturated(self) -> bool:
        """Whether the next acquire would have to wait."""
        return self._in_flight >= self._max_concurrent

    async def acquire(self) -> bool:
        """Wait for a free slot and reserve it.

        Returns:
            True if the caller had to wait because the gate was saturated.
        """
        waited = self.saturated
        await self._semaphore.acquire()
        self._in_flight += 1
        self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
        return waited

    def release(self) -> None:
        """Free a slot and wake one waiting producer, if any."""
        if self._in_flight == 0:
            raise RuntimeError("release() called without a matching acquire()")
        self._in_flight -= 1
        self._semaphore.release()
