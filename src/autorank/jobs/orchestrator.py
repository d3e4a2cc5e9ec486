"""Job orchestrator: drives login, navigation and batch uploads through a phase executor."""

import asyncio
from collections.abc import Iterable, Sequence
from typing import Any

from autorank.config import Settings, get_settings
from autorank.core.constants import (
    PHASE_AUTH,
    PHASE_DATA,
    PHASE_DONE,
    PHASE_ERR,
    PHASE_INIT,
    PHASE_NAV,
    PHASE_STOP,
    PHASE_WAIT,
    batch_phase,
)
from autorank.core.exceptions import BatchFailed, JobConflict, LoginFailed, PreconditionNotMet
from autorank.core.logging import get_logger
from autorank.core.models import Batch, Record
from autorank.core.security import describe_config
from autorank.data.batching import split_batches
from autorank.executors.base import PhaseExecutor
from autorank.jobs.cancellation import CancellationToken
from autorank.jobs.event_log import EventLog
from autorank.jobs.models import JobConfig, JobStats, JobStatus, LogEvent, LogLevel
from autorank.jobs.observers import JobObserver
from autorank.jobs.stats import StatsAggregator

logger = get_logger(__name__)


class _JobEventSink:
    """Event sink handed to executors; appends through the orchestrator only."""

    def __init__(self, orchestrator: "JobOrchestrator"):
        self._orchestrator = orchestrator

    def emit(
        self,
        level: LogLevel,
        message: str,
        phase: str,
        has_evidence: bool = False,
    ) -> LogEvent:
        return self._orchestrator._emit(level, message, phase, has_evidence)


class JobOrchestrator:
    """State machine for one bulk-upload job at a time.

    ``IDLE -> RUNNING -> {COMPLETED, FAILED, PAUSED}``. A new ``start`` from
    FAILED or PAUSED wipes the previous run's log and statistics. Phases run
    strictly one after another; stats and log updates for batch *i* are
    published before batch *i+1* begins.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        observers: Iterable[JobObserver] = (),
    ):
        self.settings = settings or get_settings()
        self.inter_batch_delay = self.settings.inter_batch_delay_seconds

        self._status = JobStatus.IDLE
        self._log = EventLog()
        self._stats = StatsAggregator()
        self._observers: list[JobObserver] = list(observers)
        self._sink = _JobEventSink(self)

        self._config: JobConfig | None = None
        self._batches: list[Batch] = []
        self._executor: PhaseExecutor | None = None
        self._token: CancellationToken | None = None

    # ---------------- Read model ----------------

    @property
    def status(self) -> JobStatus:
        return self._status

    @property
    def stats(self) -> JobStats:
        """Snapshot of the running totals."""
        return self._stats.snapshot()

    @property
    def events(self) -> tuple[LogEvent, ...]:
        """Snapshot of the event log."""
        return self._log.events

    def events_since(self, seq: int) -> list[LogEvent]:
        return self._log.since(seq)

    def get_event(self, event_id: str) -> LogEvent | None:
        return self._log.get(event_id)

    @property
    def config(self) -> JobConfig | None:
        return self._config

    @property
    def batches(self) -> list[Batch]:
        return list(self._batches)

    @property
    def executor(self) -> PhaseExecutor | None:
        return self._executor

    # ---------------- Observers ----------------

    def add_observer(self, observer: JobObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: JobObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, method: str, payload: Any) -> None:
        for observer in list(self._observers):
            try:
                getattr(observer, method)(payload)
            except Exception as e:
                logger.error(f"Observer {observer!r} failed in {method}: {e}", exc_info=True)

    def _emit(
        self,
        level: LogLevel,
        message: str,
        phase: str,
        has_evidence: bool = False,
    ) -> LogEvent:
        event = self._log.append(level, message, phase, has_evidence)
        self._notify("on_log", event)
        return event

    def _set_status(self, status: JobStatus) -> None:
        self._status = status
        self._notify("on_status", status)

    # ---------------- Transitions ----------------

    def start(
        self,
        config: JobConfig,
        records: Sequence[Record],
        executor: PhaseExecutor,
        token: CancellationToken | None = None,
    ) -> CancellationToken:
        """Validate preconditions and enter RUNNING.

        Nothing changes when a precondition fails.

        Args:
            config: Job configuration for this run.
            records: Parsed records to upload.
            executor: Strategy performing the phases for this run.
            token: Cancellation token; a fresh one is created when omitted.

        Returns:
            CancellationToken: The token observed by ``run``.

        Raises:
            JobConflict: If a run is in progress, or the last run completed and
                was not reset.
            PreconditionNotMet: If credentials or data are missing.
            InvalidConfiguration: If the batch size is not positive.
        """
        if self._status == JobStatus.RUNNING:
            raise JobConflict("A job is already running")
        if not self._status.can_start:
            raise JobConflict("Reset the completed job before starting a new one")
        if not config.username.strip():
            raise PreconditionNotMet("Username is required")
        if not config.password.get_secret_value():
            raise PreconditionNotMet("Password is required")
        if not records:
            raise PreconditionNotMet("No records to process")

        batches = split_batches(records, config.batch_size)

        self._log.clear()
        self._config = config
        self._batches = batches
        self._executor = executor
        self._token = token or CancellationToken()

        initial = self._stats.initialize(total_records=len(records), batches_total=len(batches))
        self._set_status(JobStatus.RUNNING)
        self._notify("on_stats", initial.model_dump())

        logger.info(
            f"Job started ({describe_config(config)}): "
            f"{len(records)} records in {len(batches)} batch(es)"
        )
        return self._token

    async def run(self) -> JobStatus:
        """Drive the started job to a terminal state.

        Phase failures are turned into state transitions and log events; this
        method only raises if it is called without a started job or if its task
        is cancelled.

        Returns:
            JobStatus: The terminal status reached.
        """
        if self._status != JobStatus.RUNNING or self._executor is None:
            raise JobConflict("No job has been started")

        try:
            await self._run_phases()
        except asyncio.CancelledError:
            logger.warning("Job task cancelled")
            self._emit(LogLevel.WARNING, "Job task cancelled.", PHASE_STOP)
            self._set_status(JobStatus.PAUSED)
            raise
        except Exception as e:
            logger.error(f"Orchestrator error: {e}", exc_info=True)
            self._emit(LogLevel.ERROR, f"Critical Failure: {e}", PHASE_ERR)
            self._set_status(JobStatus.FAILED)

        return self._status

    async def execute(
        self,
        config: JobConfig,
        records: Sequence[Record],
        executor: PhaseExecutor,
        token: CancellationToken | None = None,
    ) -> JobStatus:
        """``start`` followed by ``run``."""
        self.start(config, records, executor, token)
        return await self.run()

    def stop(self, reason: str = "Job stopped by user.") -> bool:
        """Request a cooperative stop of the running job.

        Returns:
            bool: True if a running job was signalled.
        """
        if self._status != JobStatus.RUNNING or self._token is None:
            return False
        self._token.cancel(reason)
        logger.info("Stop requested")
        return True

    def reset(self) -> None:
        """Return to IDLE with an empty log and zeroed statistics.

        Raises:
            JobConflict: If a run is in progress.
        """
        if self._status == JobStatus.RUNNING:
            raise JobConflict("Stop the running job before resetting")

        self._log.clear()
        self._stats.reset()
        self._config = None
        self._batches = []
        self._executor = None
        self._token = None
        self._set_status(JobStatus.IDLE)
        self._notify("on_stats", self._stats.snapshot().model_dump())

    # ---------------- Phases ----------------

    async def _run_phases(self) -> None:
        assert self._config is not None and self._token is not None
        config = self._config

        self._emit(
            LogLevel.SYSTEM,
            f"Initializing Automation Agent v{self.settings.app_version}...",
            PHASE_INIT,
        )
        self._emit(LogLevel.INFO, f"Target URL: {self.settings.portal_login_url}", PHASE_INIT)
        total = self._stats.snapshot().total_records
        self._emit(
            LogLevel.SUCCESS, f"Data parsed successfully. {total} records found.", PHASE_DATA
        )
        self._emit(
            LogLevel.INFO,
            f"Split into {len(self._batches)} batch(es) of max {config.batch_size} records.",
            PHASE_DATA,
        )

        if self._pause_if_cancelled():
            return
        if not await self._login():
            return

        if self._pause_if_cancelled():
            return
        await self._navigate()

        last_index = len(self._batches) - 1
        for batch in self._batches:
            if self._pause_if_cancelled():
                return

            success = await self._upload(batch)
            changed = self._stats.record_batch(len(batch), success)
            self._notify("on_stats", changed)

            if batch.index < last_index:
                await self._inter_batch_pause()

        self._complete()

    def _pause_if_cancelled(self) -> bool:
        """Move to PAUSED if a stop was requested."""
        assert self._token is not None
        if not self._token.cancelled:
            return False

        self._emit(LogLevel.WARNING, self._token.reason or "Job stopped by user.", PHASE_STOP)
        self._set_status(JobStatus.PAUSED)
        stats = self._stats.snapshot()
        logger.info(
            f"Job paused after {stats.batches_completed}/{stats.batches_total} batches"
        )
        return True

    async def _login(self) -> bool:
        assert self._executor is not None and self._config is not None
        config = self._config

        reason = "invalid credentials or portal unreachable"
        try:
            success = await self._executor.login(
                config.username, config.password.get_secret_value(), self._sink
            )
        except LoginFailed as e:
            success, reason = False, e.message
        except Exception as e:
            logger.error(f"Login phase raised: {e}", exc_info=True)
            success, reason = False, str(e)

        if not success:
            self._emit(LogLevel.ERROR, f"Login failed ({reason}). Job aborted.", PHASE_AUTH)
            self._set_status(JobStatus.FAILED)
        return success

    async def _navigate(self) -> None:
        assert self._executor is not None
        try:
            await self._executor.navigate(self._sink)
        except Exception as e:
            logger.warning(f"Navigation phase raised: {e}", exc_info=True)
            self._emit(LogLevel.WARNING, f"Navigation problem ignored: {e}", PHASE_NAV)

    async def _upload(self, batch: Batch) -> bool:
        assert self._executor is not None
        phase = batch_phase(batch.number)

        try:
            success = await self._executor.upload_batch(batch, self._sink)
        except BatchFailed as e:
            self._emit(LogLevel.ERROR, e.message, phase)
            return False
        except Exception as e:
            logger.error(f"Upload of batch {batch.number} raised: {e}", exc_info=True)
            self._emit(LogLevel.ERROR, f"Batch #{batch.number} failed: {e}", phase)
            return False

        if not success:
            self._emit(
                LogLevel.WARNING,
                f"Batch #{batch.number}: {len(batch)} record(s) marked as failed. "
                "Continuing with next batch.",
                phase,
            )
        return success

    async def _inter_batch_pause(self) -> None:
        assert self._token is not None
        delay = self.inter_batch_delay
        if delay <= 0:
            # Still yield so stop requests from other tasks get a chance to land.
            await asyncio.sleep(0)
            return

        self._emit(
            LogLevel.SYSTEM,
            f"Waiting {delay:g}s before next batch to ensure stability...",
            PHASE_WAIT,
        )
        await self._token.wait(delay)

    def _complete(self) -> None:
        stats = self._stats.snapshot()
        self._emit(LogLevel.SUCCESS, "All batches processed.", PHASE_DONE)
        self._emit(
            LogLevel.INFO,
            f"Final report: {stats.success_count}/{stats.total_records} records uploaded, "
            f"{stats.error_count} failed across {stats.batches_completed} batch(es).",
            PHASE_DONE,
        )
        self._set_status(JobStatus.COMPLETED)
        logger.info(f"Job completed: {stats.model_dump()}")
