"""Routing-level errors rendered with the same envelope the operations use."""

import logging

from fastapi import FastAPI, Request, Response, status
from starlette.exceptions import HTTPException as StarletteHTTPException

from library_shop_api.api.routes.books import to_http_response
from library_shop_api.responses import error_response

logger = logging.getLogger(__name__)

_ROUTING_ERRORS = {
    status.HTTP_404_NOT_FOUND: ("Not Found", "The requested resource was not found"),
    status.HTTP_405_METHOD_NOT_ALLOWED: (
        "Method Not Allowed",
        "The method is not allowed for the requested resource",
    ),
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
        error, message = _ROUTING_ERRORS.get(exc.status_code, ("Error", str(exc.detail)))
        logger.info(
            "routing_error",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
            },
        )
        return to_http_response(error_response(exc.status_code, error, message))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
        # never leaks internal details
        logger.error("Unhandled exception on %s", request.url.path, exc_info=exc)
        return to_http_response(
            error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal Server Error",
                "An unexpected error occurred",
            )
        )
