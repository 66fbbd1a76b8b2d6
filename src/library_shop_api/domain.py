import typing
from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import Field

if typing.TYPE_CHECKING:
    BookId = typing.NewType("BookId", str)
else:
    _BookIdStr = Annotated[str, Field(min_length=1)]
    BookId = typing.NewType("BookId", _BookIdStr)


FilterField = Literal["author", "title"]


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2024-01-15T10:30:00.000Z."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
