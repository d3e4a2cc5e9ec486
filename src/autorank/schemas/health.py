"""Health check schemas."""

from pydantic import BaseModel, Field

from autorank.jobs.models import JobStatus


class HealthResponse(BaseModel):
    """Service liveness plus a summary of the job engine."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Environment name")
    job_status: JobStatus = Field(..., description="State of the current job")
    portal_url: str = Field(..., description="Login page of the portal jobs upload to")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "healthy",
                    "version": "1.0.2",
                    "environment": "development",
                    "job_status": "idle",
                    "portal_url": "https://withpassion.decathlon.net/rank2/control/login",
                }
            ]
        }
    }
