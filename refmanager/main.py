"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from refmanager.api import categories, references
from refmanager.config import get_settings
from refmanager.database import init_db
from refmanager.exceptions import (
    ConstraintViolationError,
    NotFoundError,
    ReferenceManagerError,
    ValidationFailure,
    VersionConflictError,
)

settings = get_settings()

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    VersionConflictError: status.HTTP_409_CONFLICT,
    ValidationFailure: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConstraintViolationError: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    yield


app = FastAPI(
    title="Reference Manager API",
    description="Ordered categories of books, links and notes",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ReferenceManagerError)
async def handle_reference_manager_error(request: Request, exc: ReferenceManagerError):
    """Translate store errors into status codes; conflicts are marked retryable."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "retryable": exc.retryable},
    )


# Register routers
app.include_router(categories.router)
app.include_router(references.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
