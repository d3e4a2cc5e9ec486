"""Append-only structured event log of a job run."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from uuid import uuid4

from autorank.jobs.models import LogEvent, LogLevel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EventLog:
    """Time-ordered, append-only sequence of ``LogEvent``.

    ``append`` is the only mutator. ``clear`` is reserved for the owner (the
    orchestrator) when a run starts or the job is reset. Timestamps never go
    backwards: an event created while the wall clock stepped back reuses the
    previous timestamp, and ``seq`` keeps the append order on ties. ``seq``
    keeps counting across ``clear``, so a reader cursor from an earlier run
    still sees every event of the next one.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self._events: list[LogEvent] = []
        self._last_seq = 0

    def append(
        self,
        level: LogLevel,
        message: str,
        phase: str,
        has_evidence: bool = False,
    ) -> LogEvent:
        """Create an event and add it to the end of the log.

        Args:
            level: Severity.
            message: Human-readable text.
            phase: Phase tag (e.g. ``AUTH`` or ``BATCH-2``).
            has_evidence: Whether a screenshot accompanies the event.

        Returns:
            LogEvent: The stored, immutable event.
        """
        timestamp = self._clock()
        if self._events and timestamp < self._events[-1].timestamp:
            timestamp = self._events[-1].timestamp

        self._last_seq += 1
        event = LogEvent(
            id=uuid4().hex[:12],
            seq=self._last_seq,
            timestamp=timestamp,
            level=level,
            message=message,
            phase=phase,
            has_evidence=has_evidence,
        )
        self._events.append(event)
        return event

    def clear(self) -> None:
        """Drop every event. Sequence numbers are not reused."""
        self._events.clear()

    @property
    def events(self) -> tuple[LogEvent, ...]:
        """Read-only snapshot of the log."""
        return tuple(self._events)

    def since(self, seq: int) -> list[LogEvent]:
        """Events with a sequence number greater than ``seq`` (0 returns everything)."""
        return [e for e in self._events if e.seq > seq]

    def get(self, event_id: str) -> LogEvent | None:
        """Look up an event by id."""
        return next((e for e in self._events if e.id == event_id), None)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[LogEvent]:
        return iter(tuple(self._events))
