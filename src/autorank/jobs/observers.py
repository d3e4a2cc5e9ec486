"""One-way notification channels from a job to its observers."""

from typing import Any, Protocol

from autorank.core.logging import get_logger
from autorank.jobs.models import JobStatus, LogEvent, LogLevel

logger = get_logger(__name__)


class JobObserver(Protocol):
    """Protocol for job observers (UI bridges, loggers, tests)."""

    def on_log(self, event: LogEvent) -> None:
        """Called after an event is appended to the log."""
        ...

    def on_stats(self, stats: dict[str, Any]) -> None:
        """Called with the counters that changed (a partial snapshot)."""
        ...

    def on_status(self, status: JobStatus) -> None:
        """Called after the job changed state."""
        ...


class LoggingObserver:
    """Mirrors job notifications into process logging."""

    def __init__(self, name: str = "autorank.job"):
        self.logger = get_logger(name)

    def on_log(self, event: LogEvent) -> None:
        line = f"[{event.phase}] {event.message}"
        if event.level == LogLevel.ERROR:
            self.logger.error(line)
        elif event.level == LogLevel.WARNING:
            self.logger.warning(line)
        else:
            self.logger.info(line)

    def on_stats(self, stats: dict[str, Any]) -> None:
        self.logger.debug(f"Stats updated: {stats}")

    def on_status(self, status: JobStatus) -> None:
        self.logger.info(f"Job status: {status.value}")


class RecordingObserver:
    """Keeps every notification in memory, in delivery order."""

    def __init__(self) -> None:
        self.events: list[LogEvent] = []
        self.stats_updates: list[dict[str, Any]] = []
        self.statuses: list[JobStatus] = []

    def on_log(self, event: LogEvent) -> None:
        self.events.append(event)

    def on_stats(self, stats: dict[str, Any]) -> None:
        self.stats_updates.append(dict(stats))

    def on_status(self, status: JobStatus) -> None:
        self.statuses.append(status)
