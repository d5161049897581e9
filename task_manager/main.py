"""
FastAPI application entry point for the task manager service.
The app is built by create_app(); nothing is constructed at import time.
"""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog
import uvicorn

from .api.tasks import router as tasks_router
from .api.users import router as users_router
from .container.container import Container
from .core.config import Settings, get_settings
from .core.database import Database
from .core.exceptions import InternalFailure, ServiceError, Unauthenticated
from .core.logging import configure_logging
from .core.middleware import RequestTrackingMiddleware, SecurityHeadersMiddleware
from .schemas.common import HealthResponse

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.
    Builds the container on startup and releases it on shutdown.
    """
    container: Container = app.state.container
    settings = container.settings

    logger.info("Starting task manager service", version=settings.VERSION, environment=settings.ENVIRONMENT)

    await container.initialize()
    try:
        yield
    finally:
        logger.info("Shutting down task manager service")
        await container.cleanup()
        logger.info("Task manager service shutdown complete")


def _error_response(exc: ServiceError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error("Service error", error_code=exc.error_code, error=exc.message)
        else:
            logger.info("Request rejected", error_code=exc.error_code, status_code=exc.status_code)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Schema violations, including unknown fields, are plain 400s."""
        logger.info("Validation error", errors=len(exc.errors()))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "Validation error",
                "error_code": "VALIDATION_ERROR",
                "errors": jsonable_encoder(exc.errors(), exclude={"ctx", "url", "input"})
            }
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_code": f"HTTP_{exc.status_code}"},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error", error=str(exc), exc_info=exc)
        return _error_response(InternalFailure())


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[Container] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration, loaded from the environment when omitted
        container: Pre-populated container, e.g. with test doubles registered

    Returns:
        FastAPI application
    """
    if settings is None:
        settings = container.settings if container is not None else get_settings()
    if container is None:
        container = Container(settings)

    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Task management backend with per-user task ownership",
        version=settings.VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan
    )
    app.state.container = container

    # Added last runs first: request tracking wraps everything
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestTrackingMiddleware)

    register_exception_handlers(app)

    app.include_router(users_router)
    app.include_router(tasks_router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check():
        """Liveness check."""
        return {"status": "healthy", "service": settings.APP_NAME, "version": settings.VERSION}

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check. 503 until the database answers."""
        database_ready = container.initialized and await container.get(Database).check_connection()

        body = {
            "status": "ready" if database_ready else "not_ready",
            "checks": {"database": database_ready},
            "service": settings.APP_NAME,
            "version": settings.VERSION
        }
        if not database_ready:
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
        return body

    return app


def run_dev():
    """Run development server."""
    settings = get_settings()
    uvicorn.run(
        "task_manager.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )


def run_prod():
    """Run production server."""
    get_settings()
    uvicorn.run(
        "task_manager.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=False,
        log_level="info",
        workers=1,
        access_log=False  # Use structured logging instead
    )


if __name__ == "__main__":
    if get_settings().DEBUG:
        run_dev()
    else:
        run_prod()
