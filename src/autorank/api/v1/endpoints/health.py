"""Health check endpoint."""

from fastapi import APIRouter

from autorank.dependencies import JobManagerDep, SettingsDep
from autorank.schemas.health import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Reports API liveness and whether a job is currently running",
)
async def health_check(settings: SettingsDep, job_manager: JobManagerDep) -> HealthResponse:
    """Report liveness. Never touches the portal, so it stays cheap while a job runs."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        job_status=job_manager.status,
        portal_url=settings.portal_login_url,
    )
