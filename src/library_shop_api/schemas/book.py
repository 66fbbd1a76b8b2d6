from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from library_shop_api.domain import BookId, FilterField, utc_timestamp

ISBN_PATTERN = r"^[0-9-]{10,17}$"
MAX_PRICE = 999999.99
PRICE_DECIMAL_PLACES = 2

BOOK_FIELDS = ("title", "author", "isbn", "price", "description", "published_date")


class _BookInput(BaseModel):
    """Shared rules for the create and update payloads. Wire names are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, extra="ignore")

    @field_validator(*BOOK_FIELDS, mode="before", check_fields=False)
    @classmethod
    def check_raw_value(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise PydanticCustomError("null_value", "Value cannot be null")
        if info.field_name == "price" and isinstance(value, bool):
            raise PydanticCustomError("float_type", "Input should be a valid number")
        if info.field_name == "published_date" and not isinstance(value, str | date):
            raise PydanticCustomError("date_type", "Input should be a valid date")
        return value

    @field_validator("price", check_fields=False)
    @classmethod
    def check_price_precision(cls, value: float | None) -> float | None:
        if value is None:
            return value
        exponent = Decimal(str(value)).as_tuple().exponent
        if isinstance(exponent, int) and exponent < -PRICE_DECIMAL_PLACES:
            raise PydanticCustomError(
                "decimal_max_places",
                "Decimal input should have no more than {decimal_places} decimal places",
                {"decimal_places": PRICE_DECIMAL_PLACES},
            )
        return value

    @field_validator("published_date", check_fields=False)
    @classmethod
    def check_not_future(cls, value: date | None) -> date | None:
        if value is not None and value > datetime.now(UTC).date():
            raise PydanticCustomError("date_future", "Date should not be in the future")
        return value


class CreateBookInput(_BookInput):
    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=100)
    isbn: str = Field(pattern=ISBN_PATTERN)
    price: float = Field(gt=0, le=MAX_PRICE, allow_inf_nan=False)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    published_date: date | None = None


class UpdateBookInput(_BookInput):
    """Partial update. Only the fields present in the payload are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    author: str | None = Field(default=None, min_length=1, max_length=100)
    isbn: str | None = Field(default=None, pattern=ISBN_PATTERN)
    price: float | None = Field(default=None, gt=0, le=MAX_PRICE, allow_inf_nan=False)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    published_date: date | None = None

    @model_validator(mode="after")
    def require_at_least_one_field(self) -> "UpdateBookInput":
        if not self.model_fields_set:
            raise PydanticCustomError("object_min", "Provide at least one field to update")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    def updated_fields(self) -> list[str]:
        return list(self.model_dump(by_alias=True, exclude_unset=True))


class BookIdInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: BookId = Field(min_length=1)


class SearchParams(BaseModel):
    """Query parameters of the list operation. Values arrive as strings and are coerced."""

    model_config = ConfigDict(extra="ignore")

    author: str | None = Field(default=None, min_length=1)
    title: str | None = Field(default=None, min_length=1)
    limit: int = Field(default=10, ge=1, le=100)
    offset: str | None = Field(default=None, min_length=1)

    def filter(self) -> tuple[FilterField, str] | None:
        # author wins when both are supplied
        if self.author:
            return "author", self.author
        if self.title:
            return "title", self.title
        return None


class Book(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: BookId
    title: str
    author: str
    isbn: str
    price: float
    description: str | None = None
    published_date: date | None = None
    created_at: str
    updated_at: str

    @classmethod
    def create(cls, data: CreateBookInput) -> "Book":
        now = utc_timestamp()
        return cls(
            id=BookId(str(uuid4())),
            **data.model_dump(),
            created_at=now,
            updated_at=now,
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
