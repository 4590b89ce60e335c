"""Application factory."""
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time
from typing import Dict, Any

from cache_service.core.config import settings
from cache_service.core.errors import CacheServiceError, CapacityInvariantViolation, ErrorCategory
from cache_service.core.logging import setup_logging, get_logger
from cache_service.core.lifecycle import lifespan
from cache_service.api import cache, cache_admin
from cache_service.utils.error_handlers import create_error_response, error_response_for

# Set up logging (should be done early)
setup_logging(settings.log_level, settings.log_format)
logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add request timing middleware
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    # Exception handlers
    @app.exception_handler(CacheServiceError)
    async def cache_error_handler(request: Request, exc: CacheServiceError):
        if isinstance(exc, CapacityInvariantViolation):
            logger.error(f"Capacity invariant violated: {exc}", extra={"details": exc.details})
        else:
            logger.warning(f"Rejected request to {request.url.path}: {exc}")
        return error_response_for(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        # loc is ("body", field, ...); a bare ("body",) means the body itself
        field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
        logger.warning(f"Rejected malformed request to {request.url.path}: {field}: {first.get('msg')}")
        return create_error_response(
            f"Invalid request field {field!r}: {first.get('msg', 'invalid value')}",
            status_code=400,
            details={
                "category": ErrorCategory.VALIDATION.value,
                "field": field,
                "errors": jsonable_encoder(errors),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "An unexpected error occurred"},
        )

    # Include routers
    app.include_router(cache.router, prefix=settings.api_prefix, tags=["cache"])
    app.include_router(cache_admin.router, prefix=settings.api_prefix, tags=["cache-admin"])

    @app.get("/")
    async def root() -> Dict[str, Any]:
        """Root endpoint."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "status": "operational",
            "docs": f"{settings.api_prefix}/docs",
        }

    return app
