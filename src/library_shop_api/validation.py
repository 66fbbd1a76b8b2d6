"""Schema-driven validation of raw request input.

Every operation validates its input through one of four schemas. Validation never raises
for bad input: it returns ``Valid`` with the normalized model, or ``Invalid`` with every
violated constraint as a ``FieldError``, in the order pydantic reports them.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import ErrorDetails

from library_shop_api.errors import FieldError
from library_shop_api.schemas.book import (
    BookIdInput,
    CreateBookInput,
    SearchParams,
    UpdateBookInput,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

SchemaName = Literal["create-book", "update-book", "book-id", "search-params"]

SCHEMAS: dict[SchemaName, type[BaseModel]] = {
    "create-book": CreateBookInput,
    "update-book": UpdateBookInput,
    "book-id": BookIdInput,
    "search-params": SearchParams,
}

ROOT_FIELD = "body"

FIELD_LABELS = {
    ROOT_FIELD: "Request body",
    "id": "Book ID",
    "title": "Title",
    "author": "Author",
    "isbn": "ISBN",
    "price": "Price",
    "description": "Description",
    "publishedDate": "Published date",
    "limit": "Limit",
    "offset": "Offset",
}

_DATE_FORMAT_MESSAGE = "{label} must be an ISO date (YYYY-MM-DD)"

_MESSAGES = {
    "missing": "{label} is required",
    "null_value": "{label} cannot be null",
    "string_type": "{label} must be a string",
    "string_too_short": "{label} cannot be empty",
    "string_too_long": "{label} cannot exceed {max_length} characters",
    "float_type": "{label} must be a number",
    "float_parsing": "{label} must be a number",
    "finite_number": "{label} must be a finite number",
    "int_type": "{label} must be an integer",
    "int_parsing": "{label} must be an integer",
    "int_from_float": "{label} must be an integer",
    "greater_than": "{label} must be a positive number",
    "greater_than_equal": "{label} must be at least {ge}",
    "less_than_equal": "{label} cannot exceed {le}",
    "decimal_max_places": "{label} cannot have more than {decimal_places} decimal places",
    "date_type": _DATE_FORMAT_MESSAGE,
    "date_parsing": _DATE_FORMAT_MESSAGE,
    "date_from_datetime_parsing": _DATE_FORMAT_MESSAGE,
    "date_from_datetime_inexact": _DATE_FORMAT_MESSAGE,
    "date_future": "{label} cannot be in the future",
    "model_type": "{label} must be a JSON object",
    "model_attributes_type": "{label} must be a JSON object",
    "object_min": "Provide at least one field to update",
}

_FIELD_MESSAGES = {
    ("isbn", "string_pattern_mismatch"): (
        "ISBN must be 10 to 17 characters long and contain only digits and hyphens"
    ),
}


@dataclass(frozen=True)
class Valid(Generic[ModelT]):
    value: ModelT


@dataclass(frozen=True)
class Invalid:
    errors: list[FieldError]


ValidationResult = Valid[ModelT] | Invalid


def _field_path(loc: tuple[int | str, ...]) -> str:
    if not loc:
        return ROOT_FIELD
    return ".".join(str(part) for part in loc)


def _to_field_error(error: ErrorDetails) -> FieldError:
    field = _field_path(error["loc"])
    error_type = error["type"]

    template = _FIELD_MESSAGES.get((field, error_type)) or _MESSAGES.get(error_type)
    if template is None:
        return FieldError(field=field, message=error["msg"])

    label = FIELD_LABELS.get(field, field)
    try:
        message = template.format(label=label, **error.get("ctx", {}))
    except (KeyError, IndexError):
        message = error["msg"]
    return FieldError(field=field, message=message)


def _run(schema: type[ModelT], data: Any) -> ValidationResult[ModelT]:
    try:
        return Valid(schema.model_validate(data))
    except ValidationError as exc:
        return Invalid([_to_field_error(error) for error in exc.errors()])


def validate(schema_name: SchemaName, data: Mapping[str, Any]) -> ValidationResult[BaseModel]:
    return _run(SCHEMAS[schema_name], data)


def validate_create_book(data: Any) -> ValidationResult[CreateBookInput]:
    return _run(CreateBookInput, data)


def validate_update_book(data: Any) -> ValidationResult[UpdateBookInput]:
    return _run(UpdateBookInput, data)


def validate_book_id(book_id: Any) -> ValidationResult[BookIdInput]:
    return _run(BookIdInput, {"id": book_id})


def validate_search_params(query: Mapping[str, Any] | None) -> ValidationResult[SearchParams]:
    return _run(SearchParams, dict(query or {}))
