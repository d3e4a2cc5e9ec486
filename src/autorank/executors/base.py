"""Phase executor contract consumed by the job orchestrator."""

from typing import Protocol

from autorank.core.models import Batch
from autorank.jobs.models import LogEvent, LogLevel


class EventSink(Protocol):
    """Explicit channel through which executors report progress."""

    def emit(
        self,
        level: LogLevel,
        message: str,
        phase: str,
        has_evidence: bool = False,
    ) -> LogEvent:
        """Append an event to the job log.

        Args:
            level: Severity.
            message: Human-readable text.
            phase: Phase tag.
            has_evidence: Whether a screenshot was captured for this event.

        Returns:
            LogEvent: The stored event (its id can key captured evidence).
        """
        ...


class PhaseExecutor(Protocol):
    """Protocol for the strategies performing the login / navigate / upload work.

    Implementations report failure by returning False, or by raising
    ``LoginFailed`` / ``BatchFailed``. They never touch job state directly.
    """

    async def login(self, username: str, password: str, sink: EventSink) -> bool:
        """Authenticate against the portal.

        Returns:
            bool: True if the session is logged in.
        """
        ...

    async def navigate(self, sink: EventSink) -> None:
        """Move from the dashboard to the upload screen."""
        ...

    async def upload_batch(self, batch: Batch, sink: EventSink) -> bool:
        """Submit one batch.

        Returns:
            bool: True if the portal accepted the batch.
        """
        ...

    async def aclose(self) -> None:
        """Release resources held by the executor."""
        ...
