"""Deterministic in-process executor for demos and tests."""

import asyncio
import random

from autorank.config import Settings
from autorank.core.constants import (
    PHASE_AUTH,
    PHASE_LOGIN,
    PHASE_NAV,
    PHASE_NET,
    PHASE_SYS,
    batch_phase,
)
from autorank.core.logging import get_logger
from autorank.core.models import Batch
from autorank.executors.base import EventSink
from autorank.jobs.models import LogLevel, SimulationScenario

logger = get_logger(__name__)

# Password fragments the simulated portal rejects, to exercise the failure path.
REJECTED_PASSWORD_FRAGMENTS = ("wrong", "error", "fail", "invalid")
MIN_PASSWORD_LENGTH = 4


class SimulatedPhaseExecutor:
    """Plays the portal workflow with realistic latencies and injectable faults."""

    def __init__(
        self,
        settings: Settings,
        scenario: SimulationScenario = SimulationScenario.SUCCESS,
        rng: random.Random | None = None,
    ):
        """Initialize the simulated executor.

        Args:
            settings: Application settings (portal URL, delay scale, failure rate).
            scenario: Fault to inject.
            rng: Random source for the sporadic upload failures.
        """
        self.settings = settings
        self.scenario = scenario
        self.rng = rng or random.Random()
        self.delay_scale = settings.simulation_delay_scale
        self.failure_rate = settings.simulation_random_failure_rate

    async def _delay(self, ms: float) -> None:
        """Sleep for a scaled number of milliseconds."""
        seconds = ms / 1000 * self.delay_scale
        if seconds > 0:
            await asyncio.sleep(seconds)

    def credentials_rejected(self, username: str, password: str) -> bool:
        """Whether the simulated portal refuses these credentials."""
        if self.scenario == SimulationScenario.ERROR_AUTH:
            return True
        if "error" in username:
            return True
        lowered = password.lower()
        return len(password) < MIN_PASSWORD_LENGTH or any(
            fragment in lowered for fragment in REJECTED_PASSWORD_FRAGMENTS
        )

    async def login(self, username: str, password: str, sink: EventSink) -> bool:
        sink.emit(LogLevel.INFO, f"Navigating to {self.settings.portal_login_url}", PHASE_LOGIN)
        await self._delay(800)

        if self.scenario == SimulationScenario.ERROR_VPN:
            sink.emit(LogLevel.ERROR, "Network Error: Host unreachable.", PHASE_NET)
            await self._delay(300)
            sink.emit(
                LogLevel.ERROR,
                "CRITICAL: Corporate VPN connection not detected. "
                "Please connect to GlobalProtect and retry.",
                PHASE_SYS,
            )
            return False

        sink.emit(LogLevel.INFO, f"Checking credentials for user: {username}", PHASE_AUTH)
        await self._delay(1200)

        if self.credentials_rejected(username, password):
            sink.emit(
                LogLevel.WARNING,
                "Authentication rejected: Invalid credentials or Account Locked.",
                PHASE_AUTH,
                has_evidence=True,
            )
            sink.emit(
                LogLevel.SYSTEM,
                '(Simulation Tip: Avoid using passwords containing "wrong" or "error" '
                "for the Happy Path)",
                PHASE_AUTH,
            )
            return False

        sink.emit(
            LogLevel.SUCCESS, "Login successful. Dashboard loaded.", PHASE_AUTH, has_evidence=True
        )
        return True

    async def navigate(self, sink: EventSink) -> None:
        sink.emit(LogLevel.INFO, "Accessing Main Dashboard...", PHASE_NAV)
        await self._delay(600)
        sink.emit(LogLevel.INFO, "Clicking 'Rank 2' tab", PHASE_NAV)
        await self._delay(500)
        sink.emit(LogLevel.INFO, "Clicking 'Catalog' sub-menu", PHASE_NAV)
        await self._delay(800)
        sink.emit(LogLevel.SUCCESS, "Catalog Control Panel loaded. Ready for input.", PHASE_NAV)

    async def upload_batch(self, batch: Batch, sink: EventSink) -> bool:
        number = batch.number
        phase = batch_phase(number)

        sink.emit(LogLevel.INFO, f"Preparing Batch #{number} ({len(batch)} records)...", phase)
        await self._delay(400)
        sink.emit(LogLevel.SYSTEM, "Converting records to .xlsx format for upload", phase)
        await self._delay(600)
        sink.emit(LogLevel.SYSTEM, "Locating 'Choose File' input field...", phase)
        await self._delay(300)
        sink.emit(LogLevel.INFO, f"Selecting file: batch_{number}.xlsx", phase)
        await self._delay(500)
        sink.emit(LogLevel.INFO, "Clicking 'UPDATE' button to initiate upload...", phase)
        await self._delay(800 + self.rng.random() * 500)

        forced = self.scenario == SimulationScenario.ERROR_UPLOAD
        if forced or self.rng.random() < self.failure_rate:
            logger.debug(f"Simulating failure for batch {number} (forced={forced})")
            sink.emit(
                LogLevel.ERROR,
                f"Server responded with 500 Internal Error on Batch #{number}",
                phase,
            )
            sink.emit(LogLevel.WARNING, f"Retrying Batch #{number} (Attempt 1/3)...", phase)
            await self._delay(1000)
            sink.emit(
                LogLevel.ERROR,
                "Retry failed. Skipping batch to maintain workflow stability.",
                phase,
            )
            return False

        sink.emit(
            LogLevel.SUCCESS, f"Batch #{number} upload confirmed. Status: Pending Processing", phase
        )
        return True

    async def aclose(self) -> None:
        """Nothing to release."""
