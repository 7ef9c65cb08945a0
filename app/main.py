"""
Job Board API - FastAPI application

1. /docs and /openapi.json at root level, API prefix only for routers
2. Middleware order: CORS → CorrelationId → Logging → RateLimiting
3. The database gateway is built in the lifespan and kept on app.state
4. Every response, error or not, uses the ApiResponse envelope
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional, Union

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.clock import utcnow
from app.core.config import settings
from app.core.exceptions import AppException
from app.core.limiter import limiter
from app.core.logging import setup_logging
from app.core.middleware import CorrelationIdMiddleware, LoggingMiddleware
from app.core.schemas import ApiResponse
from app.database import Database
from app.routers.api_router import api_router

setup_logging()
logger = logging.getLogger(__name__)


def _envelope(status_code: int, response: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=response.to_dict())


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================
async def app_exception_handler(request: Request, exc: AppException):
    """Operational errors carry their own status and code."""
    logger.warning(f"AppException: {exc.message}", extra={"code": exc.error_code, "path": request.url.path})
    return _envelope(exc.status_code, ApiResponse.fail(exc.message, exc.error_code, exc.details))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        # loc is usually ('body', 'field_name') or ('query', 'name')
        field = ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][-1])
        errors.append({"field": field, "message": error["msg"]})

    logger.warning(f"Validation Error: {errors}")
    return _envelope(
        status.HTTP_400_BAD_REQUEST,
        ApiResponse.fail("Validation failed", "VALIDATION_ERROR", errors),
    )


async def http_exception_handler(request: Request, exc: Union[HTTPException, StarletteHTTPException]):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _envelope(exc.status_code, ApiResponse.fail(message, "HTTP_ERROR"))


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity violation on {request.url.path}: {exc.orig}")
    return _envelope(status.HTTP_409_CONFLICT, ApiResponse.fail("Resource already exists", "CONFLICT"))


async def general_exception_handler(request: Request, exc: Exception):
    """Fallback handler for unhandled server errors."""
    logger.exception("Unhandled server error", extra={"path": request.url.path})
    details = {"error": str(exc), "type": type(exc).__name__} if settings.is_development else None
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ApiResponse.fail("Something went wrong", "INTERNAL_ERROR", details),
    )


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application. Tests pass their own ``Database``; otherwise one is
    created from settings when the lifespan starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} v{settings.version} ({settings.environment})")
        gateway = database or Database(settings.database_url, settings.database_echo)
        try:
            if not gateway.is_connected:
                gateway.connect()
            gateway.create_all()
        except Exception as e:
            logger.error(f"✗ Database initialization failed: {e}")
            raise
        app.state.database = gateway

        yield

        logger.info("Gracefully shutting down...")
        if database is None:
            gateway.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Job board backend: listings, companies, candidates and applications",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    # ========================================================================
    # RATE LIMITER
    # ========================================================================
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # ========================================================================
    # MIDDLEWARE STACK (last added runs first)
    # ========================================================================
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    # ========================================================================
    # OPERATIONAL ENDPOINTS (at root level)
    # ========================================================================
    @app.get("/", tags=["Health"])
    def root():
        return {
            "message": settings.app_name,
            "version": settings.version,
            "docs": "/docs",
        }

    @app.get("/health", tags=["Health"])
    def health_check(request: Request):
        """Liveness probe, with database status and row counts."""
        gateway: Database = request.app.state.database
        healthy = gateway.health_check()
        return ApiResponse.ok(
            {
                "status": "up",
                "timestamp": utcnow().isoformat(),
                "version": settings.version,
                "environment": settings.environment,
                "database": {
                    "status": "connected" if healthy else "disconnected",
                    "stats": gateway.get_stats() if healthy else None,
                },
            },
            "Service is healthy",
        ).to_dict()

    @app.get("/readiness", tags=["Health"])
    def readiness_check(request: Request):
        """Readiness probe - verifies database connectivity."""
        if not request.app.state.database.health_check():
            logger.error("Readiness check failed: database unreachable")
            raise HTTPException(status_code=503, detail="Service not ready")
        return {
            "status": "ready",
            "components": {"database": "connected"},
        }

    return app


app = create_app()
