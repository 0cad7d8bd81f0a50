"""
Global exception handlers.

This is the single place where failures become responses and get logged:
    - ApiError -> its status and JSON envelope
    - RequestValidationError -> VALIDATION ApiError with the field list
    - Starlette HTTPException (unknown route, bad method) -> envelope with ERROR_<status>
    - anything else -> generic 500 from ``UnhandledErrorMiddleware``, details
      stay in the server log
"""

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from accounts_api.api.validation import to_api_error
from accounts_api.core.errors import ApiError, ErrorKind, default_code
from accounts_api.core.logging import get_logger

logger = get_logger(__name__)

GENERIC_ERROR_BODY = {
    "status": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "message": "Internal server error",
    "code": "SERVER_ERROR",
}


def dispatch_api_error(request: Request, exc: ApiError) -> JSONResponse:
    """Log a classified failure once and render its envelope."""
    line = f"[{exc.code}] {exc.status}: {exc.message}"
    if exc.kind is ErrorKind.SERVER and exc.__cause__ is not None:
        # Storage details go to the log only
        logger.error(line, exc_info=exc.__cause__, extra={"path": request.url.path})
    else:
        logger.error(line, extra={"path": request.url.path})
    return JSONResponse(status_code=exc.status, content=exc.to_response())


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        return dispatch_api_error(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return dispatch_api_error(request, to_api_error(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        code = default_code(exc.status_code)
        logger.warning(f"[{code}] {exc.status_code}: {exc.detail} ({request.url.path})")
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": exc.status_code, "message": str(exc.detail), "code": code},
            headers=getattr(exc, "headers", None),
        )

    app.add_middleware(UnhandledErrorMiddleware)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Catch-all for exceptions no handler claimed; never leaks internal details.

    Runs inside the application, so the failure is answered and logged here
    and does not reach the server's own error reporting.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                f"[UNHANDLED_ERROR] 500: {exc} ({request.url.path})",
                exc_info=exc,
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=GENERIC_ERROR_BODY,
            )
