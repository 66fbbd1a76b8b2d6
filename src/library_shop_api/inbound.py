import base64
import binascii
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from library_shop_api.errors import ErrorKind, OperationError


@dataclass(frozen=True)
class InboundRequest:
    """What an operation needs from a request, independent of how it was delivered."""

    method: str
    path_parameters: Mapping[str, str] = field(default_factory=dict)
    query_parameters: Mapping[str, str] = field(default_factory=dict)
    body: str | None = None

    @classmethod
    def from_api_gateway_event(cls, event: Mapping[str, Any]) -> "InboundRequest":
        """
        Parse an API Gateway proxy event (REST payload v1 or HTTP API payload v2).

        Missing or null parts of the event read as empty. A body flagged as base64 that
        does not decode raises a MALFORMED_INPUT OperationError.
        """
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method") or event.get("httpMethod") or ""

        body = event.get("body")
        if body is not None and event.get("isBase64Encoded"):
            try:
                body = base64.b64decode(body, validate=True).decode("utf-8", errors="replace")
            except (binascii.Error, ValueError) as exc:
                raise OperationError(
                    ErrorKind.MALFORMED_INPUT, "Request body is not valid base64"
                ) from exc

        return cls(
            method=str(method).upper(),
            path_parameters=dict(event.get("pathParameters") or {}),
            query_parameters=dict(event.get("queryStringParameters") or {}),
            body=body,
        )
