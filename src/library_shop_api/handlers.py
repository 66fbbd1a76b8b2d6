"""
AWS Lambda entry points.

One handler per operation, for a function-per-route deployment behind API Gateway,
plus ``api_handler`` for a single function serving the whole /books surface.
The storage gateway is built once per process and reused across invocations.

Handler paths for the function configuration:

    library_shop_api.handlers.create_book_handler   POST   /books
    library_shop_api.handlers.list_books_handler    GET    /books
    library_shop_api.handlers.get_book_handler      GET    /books/{id}
    library_shop_api.handlers.update_book_handler   PUT    /books/{id}
    library_shop_api.handlers.delete_book_handler   DELETE /books/{id}
    library_shop_api.handlers.api_handler           ANY    /books, /books/{id}

Every entry point returns a proxy response, even for events that cannot be parsed.
"""

import logging
from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Any

from fastapi import status

from library_shop_api.config import settings
from library_shop_api.context import request_id_var
from library_shop_api.database import SessionLocal
from library_shop_api.errors import OperationError
from library_shop_api.inbound import InboundRequest
from library_shop_api.logging_config import configure_logging
from library_shop_api.repositories.books_repository import BooksRepository
from library_shop_api.responses import (
    ApiResponse,
    Operation,
    ResponseNormalizer,
    error_response,
)
from library_shop_api.services.book_service import BookService

configure_logging(
    level=settings.log_level,
    output_format=settings.log_format,
    service_name=settings.log_service_name,
)
logger = logging.getLogger(__name__)

LambdaEvent = Mapping[str, Any]
LambdaResult = dict[str, Any]


@lru_cache
def get_book_service() -> BookService:
    return BookService(gateway=BooksRepository(session_factory=SessionLocal), settings=settings)


def _invoke(
    operation: Operation,
    step: Callable[[BookService, InboundRequest], ApiResponse],
    event: LambdaEvent,
    context: Any,
) -> LambdaResult:
    responses = ResponseNormalizer.for_operation(operation)
    token = request_id_var.set(getattr(context, "aws_request_id", None))
    try:
        request = InboundRequest.from_api_gateway_event(event)
        return step(get_book_service(), request).to_lambda()
    except OperationError as err:
        logger.info("Rejected event", extra={"operation": str(operation)})
        return responses.from_error(err).to_lambda()
    except Exception:
        logger.exception("Unhandled error in %s handler", operation)
        return responses.internal_server_error().to_lambda()
    finally:
        request_id_var.reset(token)


def create_book_handler(event: LambdaEvent, context: Any) -> LambdaResult:
    return _invoke(Operation.CREATE, BookService.create_book, event, context)


def list_books_handler(event: LambdaEvent, context: Any) -> LambdaResult:
    return _invoke(Operation.LIST, BookService.list_books, event, context)


def get_book_handler(event: LambdaEvent, context: Any) -> LambdaResult:
    return _invoke(Operation.GET, BookService.get_book, event, context)


def update_book_handler(event: LambdaEvent, context: Any) -> LambdaResult:
    return _invoke(Operation.UPDATE, BookService.update_book, event, context)


def delete_book_handler(event: LambdaEvent, context: Any) -> LambdaResult:
    return _invoke(Operation.DELETE, BookService.delete_book, event, context)


_COLLECTION_ROUTES = {
    "POST": create_book_handler,
    "GET": list_books_handler,
}
_ITEM_ROUTES = {
    "GET": get_book_handler,
    "PUT": update_book_handler,
    "DELETE": delete_book_handler,
}


def api_handler(event: LambdaEvent, context: Any) -> LambdaResult:
    """Route by method and presence of the ``id`` path parameter."""
    try:
        request = InboundRequest.from_api_gateway_event(event)
    except OperationError as err:
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Bad Request", err.message or "Bad Request"
        ).to_lambda()
    except Exception:
        logger.exception("Unparseable event")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            "An unexpected error occurred",
        ).to_lambda()

    routes = _ITEM_ROUTES if request.path_parameters.get("id") else _COLLECTION_ROUTES
    handler = routes.get(request.method)
    if handler is None:
        logger.info("Unroutable request", extra={"method": request.method})
        return error_response(
            status.HTTP_405_METHOD_NOT_ALLOWED,
            "Method Not Allowed",
            f"Method {request.method or 'UNKNOWN'} is not allowed for this resource",
        ).to_lambda()
    return handler(event, context)
