"""
Error handling decorators and utilities for FastAPI endpoints.

Cache service errors carry their own status code and are turned into
`{"success": false, "error": ...}` bodies; anything else becomes a generic
500 after being logged.
"""

from __future__ import annotations

import asyncio
import functools
import traceback
from typing import Any, Callable, Optional, TypeVar, Union

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from cache_service.core.errors import CacheServiceError
from cache_service.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def handle_errors(
    *,
    fallback: Optional[Any] = None,
    log_level: str = "error",
    error_message: str = "An error occurred",
    include_traceback: bool = False,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for standardized error handling in FastAPI endpoints.

    HTTPException and CacheServiceError pass through untouched so the app's
    exception handlers render them. Other exceptions are logged and either
    replaced by `fallback` or raised as a 500.

    Usage:
        @router.get("/cache/status")
        @handle_errors(error_message="Failed to build cache status")
        def cache_status(...):
            ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Union[T, Any]:
            try:
                return await func(*args, **kwargs)
            except (HTTPException, CacheServiceError):
                raise
            except Exception as e:
                return _handle_exception(func, fallback, log_level, error_message, include_traceback, e)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Union[T, Any]:
            try:
                return func(*args, **kwargs)
            except (HTTPException, CacheServiceError):
                raise
            except Exception as e:
                return _handle_exception(func, fallback, log_level, error_message, include_traceback, e)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator


def _log_error(
    func: Callable[..., Any],
    error: Exception,
    log_level: str,
    include_traceback: bool,
) -> None:
    """Log an error with the appropriate level and context."""
    log_func = getattr(logger, log_level, logger.error)

    log_data = {
        "function": func.__name__,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if include_traceback:
        log_data["traceback"] = traceback.format_exc()

    log_func("Error in %s: %s", func.__name__, str(error), extra=log_data)


def _handle_exception(
    func: Callable[..., Any],
    fallback: Optional[Any],
    log_level: str,
    error_message: str,
    include_traceback: bool,
    error: Exception,
) -> Any:
    """Log, then return the fallback or raise a 500."""
    _log_error(func, error, log_level, include_traceback)

    if fallback is not None:
        return fallback

    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"success": False, "error": error_message},
    )


def create_error_response(
    message: str,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    details: Optional[dict] = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        message: Human-readable error message
        status_code: HTTP status code
        details: Additional fields merged into the body

    Returns:
        JSONResponse shaped `{"success": false, "error": message, ...}`
    """
    content = {
        "success": False,
        "error": message,
    }
    if details:
        content.update(details)

    return JSONResponse(
        status_code=status_code,
        content=content,
    )


def error_response_for(exc: CacheServiceError) -> JSONResponse:
    """Render a cache service error with its own status code."""
    return create_error_response(
        exc.message,
        status_code=exc.status_code,
        details={"category": exc.category.value, **exc.details},
    )
