"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from authsvc.config import settings
from authsvc.core.cache import cache_manager
from authsvc.core.database import db_manager
from authsvc.core.exceptions import AuthServiceException, status_code_for
from authsvc.core.logging_config import get_logger, setup_logging
from authsvc.core.metrics import app_info
from authsvc.core.middleware import RequestContextMiddleware
from authsvc.core.performance import track_http_metrics
from authsvc.schemas.common import ErrorResponse

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    db_manager.init()
    try:
        await cache_manager.init()
    except (RedisError, OSError) as e:
        # Requests still work with a cold cache; user data comes from the database
        logger.warning("cache_unavailable_at_startup", error=str(e))

    app_info.info({
        "version": settings.app_version,
        "environment": settings.environment,
    })

    logger.info("application_ready")

    yield

    logger.info("application_shutting_down")
    await db_manager.close()
    await cache_manager.close()
    logger.info("application_shutdown_complete")


def create_application() -> FastAPI:
    """Application factory."""

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Multi-tenant authentication and authorization service",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Middleware (order matters - last added = outermost)

    @app.middleware("http")
    async def performance_middleware(request: Request, call_next):
        return await track_http_metrics(request, call_next)

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(AuthServiceException)
    async def service_exception_handler(
        request: Request,
        exc: AuthServiceException,
    ) -> JSONResponse:
        status_code = status_code_for(exc)
        logger.info(
            "request_rejected",
            path=request.url.path,
            error=type(exc).__name__,
            status_code=status_code,
            message=exc.message,
        )
        body = ErrorResponse(detail=exc.message, error=type(exc).__name__, details=exc.details)
        return JSONResponse(status_code=status_code, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        logger.warning(
            "validation_error",
            path=request.url.path,
            errors=exc.errors(),
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")

        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )

        if settings.is_production:
            detail = "An internal error occurred. Please contact support."
        else:
            detail = str(exc)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": detail,
                "request_id": request_id,
            },
        )

    # Register routers
    from authsvc.api.health_router import router as health_router
    from authsvc.api.metrics_router import router as metrics_router
    from authsvc.api.v1.router import v1_router

    # Health endpoints (no prefix)
    app.include_router(health_router)

    if settings.metrics_enabled:
        app.include_router(metrics_router)

    app.include_router(v1_router, prefix="/api")

    @app.get("/", tags=["Root"])
    async def root() -> dict:
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.environment,
            "docs": "/docs" if settings.is_development else "Disabled in production",
            "health": "/health",
            "metrics": "/metrics" if settings.metrics_enabled else "Disabled",
        }

    logger.info("application_configured")
    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the raw input or exception objects."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "authsvc.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload and settings.is_development,
        log_level=settings.log_level.lower(),
        access_log=False,  # We handle logging ourselves
    )
