"""Job manager: owns the orchestrator, executor construction and the background run."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from autorank.config import Settings
from autorank.core.exceptions import JobConflict, NotFoundException
from autorank.core.logging import get_logger
from autorank.core.models import Record
from autorank.data.records import parse_records
from autorank.executors.base import PhaseExecutor
from autorank.executors.registry import ExecutorRegistry
from autorank.jobs.models import JobConfig, JobStats, JobStatus, LogEvent
from autorank.jobs.observers import JobObserver, LoggingObserver
from autorank.jobs.orchestrator import JobOrchestrator

logger = get_logger(__name__)


class JobManager:
    """Runs at most one job at a time in a background asyncio task."""

    def __init__(
        self,
        settings: Settings,
        registry: ExecutorRegistry | None = None,
        orchestrator: JobOrchestrator | None = None,
        shutdown_timeout: float = 30.0,
    ):
        self.settings = settings
        self.registry = registry or ExecutorRegistry()
        self.orchestrator = orchestrator or JobOrchestrator(
            settings, observers=[LoggingObserver()]
        )
        self.shutdown_timeout = shutdown_timeout

        self._task: asyncio.Task[JobStatus] | None = None
        self._executor: PhaseExecutor | None = None

        logger.info("JobManager initialized")

    # ---------------- Read model ----------------

    @property
    def status(self) -> JobStatus:
        return self.orchestrator.status

    @property
    def stats(self) -> JobStats:
        return self.orchestrator.stats

    @property
    def is_running(self) -> bool:
        return self.orchestrator.status == JobStatus.RUNNING

    def events(self, after: int = 0) -> list[LogEvent]:
        """Events appended after sequence number ``after``."""
        return self.orchestrator.events_since(after)

    def screenshot(self, event_id: str) -> bytes:
        """Screenshot captured for a log event.

        Raises:
            NotFoundException: If the event is unknown or has no stored image.
        """
        if self.orchestrator.get_event(event_id) is None:
            raise NotFoundException(f"Log event not found: {event_id}")

        screenshots: dict[str, bytes] = getattr(self._executor, "screenshots", {})
        image = screenshots.get(event_id)
        if image is None:
            raise NotFoundException(f"No screenshot stored for event {event_id}")
        return image

    def add_observer(self, observer: JobObserver) -> None:
        self.orchestrator.add_observer(observer)

    # ---------------- Control ----------------

    async def start_job(self, config: JobConfig, csv_text: str) -> JobStats:
        """Parse CSV text and start a job on it. See ``start_job_with_records``."""
        return await self.start_job_with_records(config, parse_records(csv_text))

    async def start_job_with_records(
        self, config: JobConfig, records: Sequence[Record]
    ) -> JobStats:
        """Start a job and schedule its run in the background.

        Args:
            config: Job configuration.
            records: Records to upload.

        Returns:
            JobStats: The initialized statistics.

        Raises:
            JobConflict: If a job is running, or the last one completed and was not reset.
            PreconditionNotMet: If credentials or data are missing.
        """
        if self.is_running:
            raise JobConflict("A job is already running")
        if not self.status.can_start:
            raise JobConflict("Reset the completed job before starting a new one")

        await self._close_executor()

        executor = self.registry.create(config, self.settings)
        try:
            self.orchestrator.start(config, records, executor)
        except Exception:
            await executor.aclose()
            raise
        self._executor = executor
        self._task = asyncio.create_task(self._run(executor), name="autorank-job")
        return self.orchestrator.stats

    async def _run(self, executor: PhaseExecutor) -> JobStatus:
        try:
            status = await self.orchestrator.run()
            logger.info(f"Job finished with status: {status.value}")
            return status
        finally:
            try:
                await executor.aclose()
            except Exception as e:
                logger.warning(f"Failed to close executor: {e}")

    def stop(self) -> bool:
        """Request a cooperative stop of the running job."""
        return self.orchestrator.stop()

    async def reset(self) -> None:
        """Clear the finished job's state, log and evidence."""
        if self.is_running:
            raise JobConflict("Stop the running job before resetting")
        await self._close_executor()
        self._executor = None
        self._task = None
        self.orchestrator.reset()

    async def wait(self) -> JobStatus:
        """Wait for the background run to finish."""
        if self._task is not None:
            await asyncio.shield(self._task)
        return self.orchestrator.status

    async def _close_executor(self) -> None:
        if self._executor is not None:
            await self._executor.aclose()

    async def aclose(self) -> None:
        """Stop the running job (if any) and wait for it, cancelling after the timeout."""
        if self._task is None or self._task.done():
            return

        self.stop()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=self.shutdown_timeout)
        except TimeoutError:
            logger.warning("Shutdown timeout reached, cancelling job task")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
