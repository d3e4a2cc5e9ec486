"""Custom exceptions and exception handlers."""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from autorank.core.logging import get_logger

logger = get_logger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class PreconditionNotMet(AppException):
    """A job cannot start: missing credentials or nothing to upload.

    Raised synchronously by the Start transition; the job state is left untouched.
    """

    def __init__(self, message: str = "Job preconditions not met"):
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class InvalidConfiguration(AppException):
    """Configuration value outside its allowed range (e.g. batch size <= 0)."""

    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class JobConflict(AppException):
    """Operation not allowed in the current job state."""

    def __init__(self, message: str = "A job is already running"):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class LoginFailed(AppException):
    """Phase executor could not authenticate against the portal. Fatal to the run."""

    def __init__(self, message: str = "Login failed"):
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY)


class BatchFailed(AppException):
    """A single batch upload failed. Counted as errors, the run continues."""

    def __init__(self, batch_number: int, message: str = "Batch upload failed"):
        self.batch_number = batch_number
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY)


class DataSourceError(AppException):
    """Raw tabular data could not be obtained (bad sheet URL, download failure)."""

    def __init__(self, message: str = "Data source unavailable"):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions.

    Args:
        request: The incoming request.
        exc: The exception that was raised.

    Returns:
        JSONResponse: Error response.
    """
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"Application error: {exc.message}", exc_info=True)
    else:
        logger.warning(f"{exc.__class__.__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "type": exc.__class__.__name__},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions.

    Args:
        request: The incoming request.
        exc: The HTTP exception that was raised.

    Returns:
        JSONResponse: Error response.
    """
    logger.warning(f"HTTP error {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions.

    Args:
        request: The incoming request.
        exc: The unhandled exception.

    Returns:
        JSONResponse: Error response.
    """
    logger.error(f"Unhandled error: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )
