from dataclasses import dataclass
from enum import StrEnum


class ErrorKind(StrEnum):
    CONFIGURATION = "configuration"
    METHOD = "method"
    MALFORMED_INPUT = "malformed_input"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class OperationError(Exception):
    """Short-circuits an operation pipeline; converted to a response at the handler boundary."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        details: list[FieldError] | None = None,
    ) -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message
        self.details = details


class StorageError(Exception):
    """Base exception for failures reported by the storage gateway."""

    pass


class ConflictError(StorageError):
    """Raised when a put-if-absent finds a record with the same id."""

    pass


class ItemNotFoundError(StorageError):
    """Raised when a conditional update or delete finds no record for the id."""

    pass
