"""Job control endpoints: start, observe, stop and reset the bulk upload."""

from fastapi import APIRouter, Query, Response, status

from autorank.core.logging import get_logger
from autorank.dependencies import JobManagerDep
from autorank.schemas.jobs import (
    JobStateResponse,
    LogEventsResponse,
    StartJobRequest,
    StopJobResponse,
)
from autorank.services.job_service import JobManager

logger = get_logger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _state(job_manager: JobManager) -> JobStateResponse:
    stats = job_manager.stats
    config = job_manager.orchestrator.config
    return JobStateResponse(
        status=job_manager.status,
        stats=stats,
        percent_complete=stats.percent_complete,
        log_size=len(job_manager.orchestrator.events),
        username=config.username if config else None,
        mode=config.mode if config else None,
    )


@router.post(
    "",
    response_model=JobStateResponse,
    summary="Start Job",
    description="Parses the CSV data, logs into the portal and uploads it batch by batch",
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_job(request: StartJobRequest, job_manager: JobManagerDep) -> JobStateResponse:
    """Start a job in the background.

    Precondition failures (missing credentials, no parsable rows) are returned
    as 422 without touching the current job; a running job yields 409.

    Args:
        request: Credentials, batching options and the CSV data.
        job_manager: Injected job manager.

    Returns:
        JobStateResponse: State right after the job entered RUNNING.
    """
    config = request.to_config(job_manager.settings.default_batch_size)
    logger.info(
        f"Start request: user='{config.username}', mode={config.mode.value}, "
        f"batch_size={config.batch_size}, env={config.target_env}"
    )
    await job_manager.start_job(config, request.csv_text)
    return _state(job_manager)


@router.get("/current", response_model=JobStateResponse, summary="Job State")
async def get_job_state(job_manager: JobManagerDep) -> JobStateResponse:
    """Return the status and statistics of the current (or last) job."""
    return _state(job_manager)


@router.get("/current/logs", response_model=LogEventsResponse, summary="Job Log")
async def get_job_logs(
    job_manager: JobManagerDep,
    after: int = Query(0, ge=0, description="Only events with a greater sequence number"),
) -> LogEventsResponse:
    """Return log events appended after ``after``."""
    events = job_manager.events(after)
    next_seq = events[-1].seq if events else after
    return LogEventsResponse(events=events, next_seq=next_seq)


@router.get(
    "/current/logs/{event_id}/screenshot",
    summary="Event Screenshot",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_event_screenshot(event_id: str, job_manager: JobManagerDep) -> Response:
    """Return the PNG captured for a log event."""
    return Response(content=job_manager.screenshot(event_id), media_type="image/png")


@router.post("/current/stop", response_model=StopJobResponse, summary="Stop Job")
async def stop_job(job_manager: JobManagerDep) -> StopJobResponse:
    """Request a stop; it takes effect before the next batch starts."""
    requested = job_manager.stop()
    return StopJobResponse(stop_requested=requested, status=job_manager.status)


@router.post("/current/reset", response_model=JobStateResponse, summary="Reset Job")
async def reset_job(job_manager: JobManagerDep) -> JobStateResponse:
    """Clear a finished job's log and statistics."""
    await job_manager.reset()
    return _state(job_manager)
