"""API middleware for error handling and cross-cutting concerns."""

from interfaces.api.middleware.error_handler import handle_use_case_errors
from interfaces.api.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware", "handle_use_case_errors"]
