"""Registry mapping execution modes to phase executor factories."""

from collections.abc import Callable

from autorank.config import Settings
from autorank.core.exceptions import InvalidConfiguration
from autorank.core.logging import get_logger
from autorank.executors.base import PhaseExecutor
from autorank.jobs.models import ExecutionMode, JobConfig

logger = get_logger(__name__)

ExecutorFactory = Callable[[JobConfig, Settings], PhaseExecutor]


def _build_simulated(config: JobConfig, settings: Settings) -> PhaseExecutor:
    from autorank.executors.simulated import SimulatedPhaseExecutor

    return SimulatedPhaseExecutor(settings, scenario=config.scenario)


def _build_browser(config: JobConfig, settings: Settings) -> PhaseExecutor:
    # Imported lazily so simulated runs work without Playwright browsers installed.
    from autorank.executors.browser import BrowserPhaseExecutor

    return BrowserPhaseExecutor(settings)


class ExecutorRegistry:
    """Registry of executor factories keyed by execution mode."""

    def __init__(self) -> None:
        self._factories: dict[ExecutionMode, ExecutorFactory] = {}
        self._register_default_factories()

    def _register_default_factories(self) -> None:
        self.register(ExecutionMode.SIMULATED, _build_simulated)
        self.register(ExecutionMode.REAL, _build_browser)

    def register(self, mode: ExecutionMode, factory: ExecutorFactory) -> None:
        """Register (or replace) the factory for a mode.

        Args:
            mode: Execution mode.
            factory: Callable building an executor from the job config and settings.
        """
        self._factories[mode] = factory
        logger.debug(f"Registered executor factory for mode: {mode.value}")

    def get_factory(self, mode: ExecutionMode) -> ExecutorFactory | None:
        return self._factories.get(mode)

    def create(self, config: JobConfig, settings: Settings) -> PhaseExecutor:
        """Build the executor for ``config.mode``.

        Raises:
            InvalidConfiguration: If no factory is registered for the mode.
        """
        factory = self.get_factory(config.mode)
        if factory is None:
            raise InvalidConfiguration(f"No executor registered for mode: {config.mode.value}")
        logger.info(f"Using {config.mode.value} executor")
        return factory(config, settings)
