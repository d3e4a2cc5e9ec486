"""Job control request and response schemas."""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr

from autorank.jobs.models import (
    ExecutionMode,
    JobConfig,
    JobStats,
    JobStatus,
    LogEvent,
    SimulationScenario,
)


class StartJobRequest(BaseModel):
    """Request model for starting a job.

    Example body:
    ```json
    {
        "username": "jdoe",
        "password": "********",
        "batch_size": 500,
        "target_env": "PROD",
        "mode": "simulated",
        "scenario": "SUCCESS",
        "csv_text": "Article ID,Name,Price\\n8345123,Running Shoes Ekiden,14.99"
    }
    ```
    """

    username: str = Field("", description="Portal login")
    password: SecretStr = Field(SecretStr(""), description="Portal password, never logged")
    batch_size: int | None = Field(
        None, description="Records per upload; the configured default when omitted", gt=0
    )
    target_env: Literal["PROD", "STAGING"] = "PROD"
    mode: ExecutionMode = ExecutionMode.SIMULATED
    scenario: SimulationScenario = Field(
        SimulationScenario.SUCCESS, description="Fault to inject (simulated mode only)"
    )
    csv_text: str = Field("", description="Raw CSV data, header row first")

    def to_config(self, default_batch_size: int) -> JobConfig:
        return JobConfig(
            username=self.username,
            password=self.password,
            batch_size=self.batch_size if self.batch_size is not None else default_batch_size,
            target_env=self.target_env,
            mode=self.mode,
            scenario=self.scenario,
        )


class JobStateResponse(BaseModel):
    """Current job status and statistics."""

    status: JobStatus = Field(..., description="Job state")
    stats: JobStats = Field(..., description="Running totals")
    percent_complete: float = Field(..., description="Processed share of records, 0-100")
    log_size: int = Field(..., description="Number of events in the log")
    username: str | None = Field(None, description="Login of the current run")
    mode: ExecutionMode | None = Field(None, description="Execution mode of the current run")


class LogEventsResponse(BaseModel):
    """Slice of the event log."""

    events: list[LogEvent] = Field(..., description="Events in append order")
    next_seq: int = Field(..., description="Pass as `after` to fetch only newer events")


class StopJobResponse(BaseModel):
    """Result of a stop request."""

    stop_requested: bool = Field(..., description="False if no job was running")
    status: JobStatus
