import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, assert_never

from fastapi import status

from library_shop_api.errors import ErrorKind, FieldError, OperationError

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}


@dataclass
class ApiResponse:
    status_code: int
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))

    def serialized_body(self) -> str:
        return json.dumps(self.body)

    def to_lambda(self) -> dict[str, Any]:
        """Shape expected by an API Gateway proxy integration."""
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.serialized_body(),
        }


class Operation(StrEnum):
    CREATE = "create"
    LIST = "list"
    GET = "get"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class OperationProfile:
    method: str
    success_status: int
    validation_message: str
    internal_error_message: str


OPERATION_PROFILES = {
    Operation.CREATE: OperationProfile(
        method="POST",
        success_status=status.HTTP_201_CREATED,
        validation_message="The provided data is not valid",
        internal_error_message="An error occurred while creating the book",
    ),
    Operation.LIST: OperationProfile(
        method="GET",
        success_status=status.HTTP_200_OK,
        validation_message="The search parameters are not valid",
        internal_error_message="An error occurred while retrieving books",
    ),
    Operation.GET: OperationProfile(
        method="GET",
        success_status=status.HTTP_200_OK,
        validation_message="The book ID is not valid",
        internal_error_message="An error occurred while retrieving the book",
    ),
    Operation.UPDATE: OperationProfile(
        method="PUT",
        success_status=status.HTTP_200_OK,
        validation_message="The provided data is not valid",
        internal_error_message="An error occurred while updating the book",
    ),
    Operation.DELETE: OperationProfile(
        method="DELETE",
        success_status=status.HTTP_200_OK,
        validation_message="The book ID is not valid",
        internal_error_message="An error occurred while deleting the book",
    ),
}


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Sequence[FieldError] | None = None,
) -> ApiResponse:
    body: dict[str, Any] = {"error": error, "message": message}
    if details:
        body["details"] = [detail.to_dict() for detail in details]
    return ApiResponse(status_code=status_code, body=body)


class ResponseNormalizer:
    """Builds every response an operation can return, with one header set and body shape."""

    def __init__(self, profile: OperationProfile) -> None:
        self.profile = profile

    @classmethod
    def for_operation(cls, operation: Operation) -> "ResponseNormalizer":
        return cls(OPERATION_PROFILES[operation])

    def success(self, payload: dict[str, Any]) -> ApiResponse:
        return ApiResponse(status_code=self.profile.success_status, body=payload)

    def bad_request(self, message: str = "Bad Request") -> ApiResponse:
        return error_response(status.HTTP_400_BAD_REQUEST, "Bad Request", message)

    def validation_error(self, details: Sequence[FieldError] | None) -> ApiResponse:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation Error",
            self.profile.validation_message,
            details,
        )

    def method_not_allowed(self) -> ApiResponse:
        return error_response(
            status.HTTP_405_METHOD_NOT_ALLOWED,
            "Method Not Allowed",
            f"Only {self.profile.method} method is allowed",
        )

    def not_found(self) -> ApiResponse:
        return error_response(
            status.HTTP_404_NOT_FOUND, "Not Found", "Book not found with the provided ID"
        )

    def internal_server_error(self, message: str | None = None) -> ApiResponse:
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            message or self.profile.internal_error_message,
        )

    def from_error(self, error: OperationError) -> ApiResponse:
        match error.kind:
            case ErrorKind.METHOD:
                return self.method_not_allowed()
            case ErrorKind.MALFORMED_INPUT:
                return self.bad_request(error.message or "Bad Request")
            case ErrorKind.VALIDATION:
                return self.validation_error(error.details)
            case ErrorKind.NOT_FOUND:
                return self.not_found()
            case ErrorKind.CONFIGURATION | ErrorKind.STORAGE | ErrorKind.UNEXPECTED:
                return self.internal_server_error(error.message)
            case _:
                assert_never(error.kind)
