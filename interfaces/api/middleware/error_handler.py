"""Error handling middleware and decorators for API routes."""

import functools
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import HTTPException, status
from returns.result import Failure, Success

from interfaces.api.routes.helpers import INTERNAL_ERROR_MESSAGE, _map_app_error_to_http_exception

logger = structlog.get_logger()


def handle_use_case_errors[T_co](
    func: Callable[..., Awaitable[T_co]],
) -> Callable[..., Awaitable[T_co]]:
    """Handle common use case error patterns.

    This decorator centralizes error handling for use case execution:
    - Unwraps Success results
    - Maps Failure results to HTTP exceptions
    - Catches and logs unexpected errors as a bare 500

    Args:
        func: An async endpoint function returning a use case result

    Returns:
        Wrapped function with centralized error handling

    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T_co:  # noqa: ANN401
        try:
            result = await func(*args, **kwargs)
        except HTTPException:
            raise
        except Exception as exc:
            logger.exception(
                "unexpected_error",
                error=str(exc),
                error_type=type(exc).__name__,
                function=func.__name__,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=INTERNAL_ERROR_MESSAGE,
            ) from exc

        if isinstance(result, Success):
            return result.unwrap()
        if isinstance(result, Failure):
            raise _map_app_error_to_http_exception(result.failure()) from None

        logger.error("unexpected_result_type", result_type=type(result).__name__, function=func.__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_MESSAGE,
        )

    return wrapper
