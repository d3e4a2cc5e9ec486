"""FastAPI dependency injection utilities."""

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends

from autorank.config import Settings, get_settings

if TYPE_CHECKING:
    from autorank.services.data_service import DataService
    from autorank.services.job_service import JobManager

# Common dependencies that can be injected into route handlers
SettingsDep = Annotated[Settings, Depends(get_settings)]


# Module-level cache for the JobManager singleton: one active job per process
_job_manager_cache: "JobManager | None" = None


def get_job_manager(settings: Annotated["Settings", Depends(get_settings)]) -> "JobManager":
    """Get or create the cached JobManager instance.

    Returns:
        JobManager instance.
    """
    global _job_manager_cache

    if _job_manager_cache is None:
        from autorank.services.job_service import JobManager

        _job_manager_cache = JobManager(settings)

    return _job_manager_cache


def peek_job_manager() -> "JobManager | None":
    """Return the cached JobManager without creating one (used on shutdown)."""
    return _job_manager_cache


def get_data_service(settings: Annotated["Settings", Depends(get_settings)]) -> "DataService":
    """Get a DataService instance.

    Returns:
        DataService instance.
    """
    from autorank.services.data_service import DataService

    return DataService(settings)


# Type aliases for dependency injection
JobManagerDep = Annotated["JobManager", Depends(get_job_manager)]
DataServiceDep = Annotated["DataService", Depends(get_data_service)]
