"""Pydantic models for job state, statistics and the event log."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class JobStatus(str, Enum):
    """Job status enum."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    PAUSED = "paused"

    @property
    def can_start(self) -> bool:
        """A new run may start from here. COMPLETED needs a reset first."""
        return self in (JobStatus.IDLE, JobStatus.FAILED, JobStatus.PAUSED)


class LogLevel(str, Enum):
    """Event log severity."""

    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SYSTEM = "SYSTEM"


class ExecutionMode(str, Enum):
    """Which phase executor drives the job."""

    SIMULATED = "simulated"
    REAL = "real"


class SimulationScenario(str, Enum):
    """Fault injected by the simulated executor."""

    SUCCESS = "SUCCESS"
    ERROR_VPN = "ERROR_VPN"
    ERROR_AUTH = "ERROR_AUTH"
    ERROR_UPLOAD = "ERROR_UPLOAD"


class LogEvent(BaseModel):
    """Immutable entry of the job event log."""

    model_config = ConfigDict(frozen=True)

    id: str
    seq: int = Field(..., description="Append order, starting at 1 and never reused")
    timestamp: datetime
    level: LogLevel
    message: str
    phase: str = Field(..., description="Short tag such as AUTH, NAV or BATCH-3")
    has_evidence: bool = Field(False, description="A screenshot was captured for this event")


class JobStats(BaseModel):
    """Running totals for a job.

    Invariants: ``processed_records == success_count + error_count``,
    ``processed_records <= total_records`` and ``batches_completed <= batches_total``.
    """

    total_records: int = 0
    processed_records: int = 0
    success_count: int = 0
    error_count: int = 0
    batches_total: int = 0
    batches_completed: int = 0

    @property
    def percent_complete(self) -> float:
        """Share of records processed, 0-100."""
        if self.total_records == 0:
            return 0.0
        return round(100 * self.processed_records / self.total_records, 1)


class JobConfig(BaseModel):
    """Configuration fixed for the lifetime of one job run."""

    model_config = ConfigDict(frozen=True)

    username: str = ""
    password: SecretStr = SecretStr("")
    batch_size: int = Field(500, gt=0)
    target_env: Literal["PROD", "STAGING"] = "PROD"
    mode: ExecutionMode = ExecutionMode.SIMULATED
    scenario: SimulationScenario = SimulationScenario.SUCCESS
