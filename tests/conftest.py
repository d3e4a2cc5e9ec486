# conftest.py
from collections.abc import Callable

import pytest
from pydantic import SecretStr

from autorank.config import Settings
from autorank.core.models import Batch, Record
from autorank.executors.base import EventSink
from autorank.jobs.event_log import EventLog
from autorank.jobs.models import JobConfig, LogEvent, LogLevel


class StubExecutor:
    """Phase executor double that records its calls."""

    def __init__(
        self,
        login_result: bool = True,
        failing_batches: tuple[int, ...] = (),
        login_error: Exception | None = None,
        navigate_error: Exception | None = None,
        on_upload: Callable[[Batch], None] | None = None,
    ):
        self.login_result = login_result
        self.failing_batches = failing_batches
        self.login_error = login_error
        self.navigate_error = navigate_error
        self.on_upload = on_upload
        self.calls: list[str] = []
        self.uploaded: list[Batch] = []
        self.closed = False

    async def login(self, username: str, password: str, sink: EventSink) -> bool:
        self.calls.append("login")
        sink.emit(LogLevel.INFO, f"Checking credentials for user: {username}", "AUTH")
        if self.login_error is not None:
            raise self.login_error
        return self.login_result

    async def navigate(self, sink: EventSink) -> None:
        self.calls.append("navigate")
        if self.navigate_error is not None:
            raise self.navigate_error
        sink.emit(LogLevel.SUCCESS, "Catalog loaded", "NAV")

    async def upload_batch(self, batch: Batch, sink: EventSink) -> bool:
        self.calls.append(f"upload-{batch.number}")
        self.uploaded.append(batch)
        if self.on_upload is not None:
            self.on_upload(batch)
        return batch.number not in self.failing_batches

    async def aclose(self) -> None:
        self.closed = True


class LogSink:
    """Event sink writing straight into an EventLog."""

    def __init__(self) -> None:
        self.log = EventLog()

    def emit(
        self, level: LogLevel, message: str, phase: str, has_evidence: bool = False
    ) -> LogEvent:
        return self.log.append(level, message, phase, has_evidence)

    @property
    def events(self) -> tuple[LogEvent, ...]:
        return self.log.events


@pytest.fixture
def test_settings() -> Settings:
    # No simulated latency, no random failures, no pause between batches
    return Settings(
        simulation_delay_scale=0,
        simulation_random_failure_rate=0,
        inter_batch_delay_seconds=0,
        manual_login_wait_seconds=0,
        post_login_wait_seconds=0,
        upload_confirm_wait_ms=0,
    )


@pytest.fixture
def make_records() -> Callable[[int], list[Record]]:
    """Factory building ``n`` simple records."""

    def _make(n: int) -> list[Record]:
        return [
            Record(id=str(i), fields={"Name": f"Item {i}", "Price": i}) for i in range(1, n + 1)
        ]

    return _make


@pytest.fixture
def job_config() -> JobConfig:
    return JobConfig(username="jdoe", password=SecretStr("s3cret"), batch_size=500)


@pytest.fixture
def stub_executor() -> StubExecutor:
    return StubExecutor()


@pytest.fixture
def stub_executor_cls() -> type[StubExecutor]:
    """The StubExecutor class, for tests that need custom behaviour."""
    return StubExecutor


@pytest.fixture
def sink() -> LogSink:
    return LogSink()
