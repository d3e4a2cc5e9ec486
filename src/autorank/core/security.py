"""Security utilities and middleware."""

from typing import Any

from fastapi import Request
from fastapi.responses import Response

from autorank.jobs.models import JobConfig


async def security_headers_middleware(request: Request, call_next: Any) -> Response:
    """Add security headers to responses.

    Job state, logs and screenshots can show portal content, so nothing is cached.

    Args:
        request: The incoming request.
        call_next: The next middleware or route handler.

    Returns:
        Response: Response with security headers added.
    """
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Cache-Control"] = "no-store"

    return response


def describe_config(config: JobConfig) -> str:
    """One-line, password-free description of a job configuration for logs."""
    return (
        f"user={config.username} env={config.target_env} mode={config.mode.value} "
        f"scenario={config.scenario.value} batch_size={config.batch_size}"
    )
