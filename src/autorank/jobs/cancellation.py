"""Cooperative cancellation token for job runs."""

import asyncio


class CancellationToken:
    """Single-writer stop flag checked by the orchestrator at batch boundaries.

    Setting the flag never interrupts a phase in progress. ``wait`` lets the
    inter-batch pause end as soon as a stop is requested.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    def cancel(self, reason: str = "Job stopped by user.") -> None:
        """Request a stop. Later calls keep the first reason."""
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds, returning early on cancellation.

        Returns:
            bool: True if cancellation was requested.
        """
        if timeout <= 0:
            return self.cancelled
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except TimeoutError:
            return False
        return True
