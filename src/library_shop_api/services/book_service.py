import json
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from typing import Any, TypeVar

from pydantic import BaseModel

from library_shop_api.config import Settings
from library_shop_api.domain import BookId
from library_shop_api.errors import ErrorKind, ItemNotFoundError, OperationError, StorageError
from library_shop_api.inbound import InboundRequest
from library_shop_api.repositories.books_repository import BooksGateway, ScanQuery
from library_shop_api.responses import ApiResponse, Operation, ResponseNormalizer
from library_shop_api.schemas.book import Book
from library_shop_api.validation import (
    Invalid,
    ValidationResult,
    validate_book_id,
    validate_create_book,
    validate_search_params,
    validate_update_book,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

EXISTENCE_CHECK_MESSAGE = "An error occurred while checking if the book exists"

_Step = Callable[["BookService", InboundRequest, ResponseNormalizer], ApiResponse]
_Handler = Callable[["BookService", InboundRequest], ApiResponse]


def operation_handler(operation: Operation) -> Callable[[_Step], _Handler]:
    """
    Runs an operation pipeline behind a guard: OperationError short-circuits to the
    matching normalized response, anything else is logged and answered with a 500.
    """
    responses = ResponseNormalizer.for_operation(operation)

    def decorator(func: _Step) -> _Handler:
        @wraps(func)
        def wrapper(self: "BookService", request: InboundRequest) -> ApiResponse:
            try:
                return func(self, request, responses)
            except OperationError as err:
                if err.kind in (ErrorKind.VALIDATION, ErrorKind.NOT_FOUND):
                    logger.info(
                        "operation_rejected",
                        extra={"operation": str(operation), "error_kind": str(err.kind)},
                    )
                return responses.from_error(err)
            except Exception:
                logger.exception("Unexpected error in %s operation", operation)
                return responses.internal_server_error()

        return wrapper

    return decorator


@contextmanager
def storage_call(action: str, failure_message: str | None = None) -> Iterator[None]:
    try:
        yield
    except ItemNotFoundError as exc:
        # record vanished between the existence check and the mutation
        logger.info("Book disappeared during %s", action)
        raise OperationError(ErrorKind.NOT_FOUND) from exc
    except StorageError as exc:
        logger.exception("Storage failure during %s", action)
        raise OperationError(ErrorKind.STORAGE, failure_message) from exc


def require_method(request: InboundRequest, method: str) -> None:
    if request.method.upper() != method:
        raise OperationError(ErrorKind.METHOD)


def require_valid(result: ValidationResult[ModelT]) -> ModelT:
    if isinstance(result, Invalid):
        raise OperationError(ErrorKind.VALIDATION, details=result.errors)
    return result.value


def require_book_id(request: InboundRequest) -> BookId:
    raw_id = request.path_parameters.get("id")
    if not raw_id:
        raise OperationError(ErrorKind.MALFORMED_INPUT, "Book ID is required in the URL path")
    return require_valid(validate_book_id(raw_id)).id


def parse_json_body(request: InboundRequest) -> Any:
    if not request.body:
        raise OperationError(ErrorKind.MALFORMED_INPUT, "Request body is required")
    try:
        return json.loads(request.body)
    except ValueError as exc:
        raise OperationError(ErrorKind.MALFORMED_INPUT, "Invalid JSON in request body") from exc


class BookService:
    def __init__(self, gateway: BooksGateway, settings: Settings) -> None:
        self.gateway = gateway
        self.settings = settings

    def _table_name(self) -> str:
        if not self.settings.books_table_name:
            logger.error("BOOKS_TABLE_NAME is not configured")
            raise OperationError(ErrorKind.CONFIGURATION)
        return self.settings.books_table_name

    @operation_handler(Operation.CREATE)
    def create_book(self, request: InboundRequest, responses: ResponseNormalizer) -> ApiResponse:
        table = self._table_name()
        require_method(request, responses.profile.method)
        data = require_valid(validate_create_book(parse_json_body(request)))

        book = Book.create(data)
        with storage_call("create"):
            self.gateway.put_if_absent(table, book)

        logger.info("book_created", extra={"book_id": book.id})
        return responses.success(
            {
                "message": "Book created successfully",
                "book": book.to_payload(),
                "stage": self.settings.stage,
            }
        )

    @operation_handler(Operation.LIST)
    def list_books(self, request: InboundRequest, responses: ResponseNormalizer) -> ApiResponse:
        table = self._table_name()
        require_method(request, responses.profile.method)
        params = require_valid(validate_search_params(request.query_parameters))

        search = params.filter()
        query = ScanQuery(
            limit=params.limit,
            filter_field=search[0] if search else None,
            filter_value=search[1] if search else None,
            cursor=params.offset,
        )
        with storage_call("list"):
            page = self.gateway.scan(table, query)

        return responses.success(
            {
                "message": "Books retrieved successfully",
                "books": [book.to_payload() for book in page.items],
                "totalCount": page.count,
                "limit": params.limit,
                "offset": params.offset,
                "nextOffset": page.next_cursor,
                "hasMore": page.next_cursor is not None,
                "stage": self.settings.stage,
            }
        )

    @operation_handler(Operation.GET)
    def get_book(self, request: InboundRequest, responses: ResponseNormalizer) -> ApiResponse:
        table = self._table_name()
        require_method(request, responses.profile.method)
        book_id = require_book_id(request)

        with storage_call("get"):
            book = self.gateway.get_by_id(table, book_id)
        if book is None:
            raise OperationError(ErrorKind.NOT_FOUND)

        return responses.success(
            {
                "message": "Book retrieved successfully",
                "book": book.to_payload(),
                "stage": self.settings.stage,
            }
        )

    @operation_handler(Operation.UPDATE)
    def update_book(self, request: InboundRequest, responses: ResponseNormalizer) -> ApiResponse:
        table = self._table_name()
        require_method(request, responses.profile.method)
        book_id = require_book_id(request)
        data = require_valid(validate_update_book(parse_json_body(request)))

        self._require_existing(table, book_id, "update")
        with storage_call("update"):
            book = self.gateway.update(table, book_id, data.changes())

        logger.info("book_updated", extra={"book_id": book_id})
        return responses.success(
            {
                "message": "Book updated successfully",
                "book": book.to_payload(),
                "updatedFields": data.updated_fields(),
                "stage": self.settings.stage,
            }
        )

    @operation_handler(Operation.DELETE)
    def delete_book(self, request: InboundRequest, responses: ResponseNormalizer) -> ApiResponse:
        table = self._table_name()
        require_method(request, responses.profile.method)
        book_id = require_book_id(request)

        self._require_existing(table, book_id, "delete")
        with storage_call("delete"):
            self.gateway.delete(table, book_id)

        logger.info("book_deleted", extra={"book_id": book_id})
        return responses.success(
            {
                "message": "Book deleted successfully",
                "deletedBookId": book_id,
                "stage": self.settings.stage,
            }
        )

    def _require_existing(self, table: str, book_id: BookId, action: str) -> None:
        with storage_call(f"{action} existence check", EXISTENCE_CHECK_MESSAGE):
            existing = self.gateway.get_by_id(table, book_id)
        if existing is None:
            raise OperationError(ErrorKind.NOT_FOUND)
