"""Error handling middleware."""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from starlette.types import ASGIApp

from locator.core.logging import get_request_logger

# Map exception types to status codes (None means use exception's status_code)
ErrorMapping = dict[type[Exception], int | None]

DEFAULT_ERROR_MAPPING: ErrorMapping = {
    KeyError: HTTP_404_NOT_FOUND,
    ValueError: HTTP_422_UNPROCESSABLE_ENTITY,
    RequestValidationError: HTTP_422_UNPROCESSABLE_ENTITY,
    StarletteHTTPException: None,  # Use its own status_code
}


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware to handle errors and provide consistent error responses.

    Every error body has the shape
    ``{"error", "message", "status_code", "correlation_id"}``.
    """

    def __init__(self, app: ASGIApp, error_mapping: ErrorMapping | None = None) -> None:
        """
        Initialize middleware with error mappings.

        Args:
        ----
            app: The ASGI application
            error_mapping: Optional overrides for exception to status mapping
        """
        super().__init__(app)
        self.error_mapping: ErrorMapping = {
            **DEFAULT_ERROR_MAPPING,
            **(error_mapping or {}),
        }

    def _status_for(self, exc: Exception) -> int:
        for exc_type in type(exc).__mro__:
            if exc_type in self.error_mapping:
                mapped = self.error_mapping[exc_type]
                if mapped is not None:
                    return mapped
                break
        if isinstance(exc, StarletteHTTPException):
            return exc.status_code
        return getattr(exc, "status_code", HTTP_500_INTERNAL_SERVER_ERROR)

    @staticmethod
    def _detail_for(exc: Exception, status_code: int) -> str:
        if isinstance(exc, StarletteHTTPException):
            return str(exc.detail)
        if isinstance(exc, RequestValidationError):
            errors = exc.errors()
            if errors:
                first = errors[0]
                location = ".".join(str(part) for part in first.get("loc", ()))
                return f"{location}: {first.get('msg', 'invalid value')}"
            return "Invalid request"
        if isinstance(exc, KeyError):
            return f"'{exc.args[0]}'" if exc.args else str(exc)
        if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
            return "Internal Server Error"
        return str(exc.args[0] if exc.args else exc)

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """
        Handle any exception and return a JSON response.

        Args:
        ----
            request: The request that caused the exception
            exc: The exception to handle

        Returns:
        -------
            A JSON response with error details
        """
        error_type = exc.__class__.__name__
        status_code = self._status_for(exc)
        detail = self._detail_for(exc, status_code)
        correlation_id = getattr(request.state, "correlation_id", None)

        server_error = status_code >= HTTP_500_INTERNAL_SERVER_ERROR
        request_logger = get_request_logger(correlation_id)
        log = request_logger.error if server_error else request_logger.warning
        log(
            "request_error",
            error_type=error_type,
            error_message=str(exc),
            status_code=status_code,
            path=request.url.path,
            method=request.method,
        )

        response = JSONResponse(
            status_code=status_code,
            content={
                "error": error_type,
                "message": detail,
                "status_code": status_code,
                "correlation_id": correlation_id if correlation_id else "unknown",
            },
            media_type="application/json",
        )
        if correlation_id:
            response.headers["X-Request-ID"] = correlation_id
        return response

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and convert unhandled errors.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers or error response
        """
        try:
            return await call_next(request)
        except Exception as exc:
            return await self.handle_exception(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Render FastAPI's own HTTP and validation errors in the same shape.

    Args:
        app: FastAPI application instance
    """
    handler = ErrorHandlingMiddleware(app)
    app.add_exception_handler(StarletteHTTPException, handler.handle_exception)
    app.add_exception_handler(RequestValidationError, handler.handle_exception)
