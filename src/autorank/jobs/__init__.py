"""Job state machine, statistics and event log for bulk catalog uploads."""

from autorank.jobs.cancellation import CancellationToken
from autorank.jobs.event_log import EventLog
from autorank.jobs.models import (
    ExecutionMode,
    JobConfig,
    JobStats,
    JobStatus,
    LogEvent,
    LogLevel,
    SimulationScenario,
)
from autorank.jobs.observers import JobObserver, LoggingObserver, RecordingObserver
from autorank.jobs.stats import StatsAggregator

# The orchestrator is imported from autorank.jobs.orchestrator directly: it depends
# on autorank.executors, which itself depends on the models above.

__all__ = [
    # Models
    "ExecutionMode",
    "JobConfig",
    "JobStats",
    "JobStatus",
    "LogEvent",
    "LogLevel",
    "SimulationScenario",
    # Bookkeeping
    "CancellationToken",
    "EventLog",
    "StatsAggregator",
    # Observers
    "JobObserver",
    "LoggingObserver",
    "RecordingObserver",
]
