import base64
import json
from types import SimpleNamespace

import pytest

from library_shop_api import handlers
from library_shop_api.inbound import InboundRequest
from library_shop_api.responses import DEFAULT_HEADERS
from library_shop_api.services.book_service import BookService

LAMBDA_CONTEXT = SimpleNamespace(aws_request_id="lambda-req-1")

BOOK = {
    "title": "Designing Data-Intensive Applications",
    "author": "Martin Kleppmann",
    "isbn": "978-1449373320",
    "price": 45.5,
}


def rest_event(method: str, book_id: str | None = None, body=None, query=None) -> dict:
    return {
        "httpMethod": method,
        "path": f"/books/{book_id}" if book_id else "/books",
        "pathParameters": {"id": book_id} if book_id else None,
        "queryStringParameters": query,
        "body": json.dumps(body) if body is not None else None,
        "isBase64Encoded": False,
        "requestContext": {"requestId": "api-req-1"},
    }


@pytest.fixture(autouse=True)
def lambda_service(monkeypatch: pytest.MonkeyPatch, book_service: BookService) -> BookService:
    monkeypatch.setattr(handlers, "get_book_service", lambda: book_service)
    return book_service


def test_inbound_request_from_rest_event():
    request = InboundRequest.from_api_gateway_event(
        rest_event("put", book_id="b-1", body={"price": 1}, query={"limit": "5"})
    )

    assert request.method == "PUT"
    assert request.path_parameters == {"id": "b-1"}
    assert request.query_parameters == {"limit": "5"}
    assert json.loads(request.body) == {"price": 1}


def test_inbound_request_from_http_api_event():
    event = {
        "requestContext": {"http": {"method": "POST", "path": "/books"}},
        "body": base64.b64encode(json.dumps(BOOK).encode()).decode(),
        "isBase64Encoded": True,
    }

    request = InboundRequest.from_api_gateway_event(event)

    assert request.method == "POST"
    assert request.path_parameters == {}
    assert request.query_parameters == {}
    assert json.loads(request.body) == BOOK


def test_per_operation_handlers_round_trip():
    created = handlers.create_book_handler(rest_event("POST", body=BOOK), LAMBDA_CONTEXT)

    assert created["statusCode"] == 201
    assert created["headers"] == DEFAULT_HEADERS
    book_id = json.loads(created["body"])["book"]["id"]

    fetched = handlers.get_book_handler(rest_event("GET", book_id=book_id), LAMBDA_CONTEXT)
    assert fetched["statusCode"] == 200
    assert json.loads(fetched["body"])["book"]["title"] == BOOK["title"]

    updated = handlers.update_book_handler(
        rest_event("PUT", book_id=book_id, body={"price": 40}), LAMBDA_CONTEXT
    )
    assert json.loads(updated["body"])["book"]["price"] == 40

    listed = handlers.list_books_handler(
        rest_event("GET", query={"author": "Kleppmann"}), LAMBDA_CONTEXT
    )
    assert json.loads(listed["body"])["totalCount"] == 1

    deleted = handlers.delete_book_handler(rest_event("DELETE", book_id=book_id), LAMBDA_CONTEXT)
    assert json.loads(deleted["body"])["deletedBookId"] == book_id


def test_handler_enforces_its_method():
    result = handlers.delete_book_handler(rest_event("GET", book_id="b-1"), LAMBDA_CONTEXT)

    assert result["statusCode"] == 405
    assert json.loads(result["body"]) == {
        "error": "Method Not Allowed",
        "message": "Only DELETE method is allowed",
    }


def test_api_handler_routes_by_method_and_id():
    created = handlers.api_handler(rest_event("POST", body=BOOK), LAMBDA_CONTEXT)
    book_id = json.loads(created["body"])["book"]["id"]

    assert handlers.api_handler(rest_event("GET"), LAMBDA_CONTEXT)["statusCode"] == 200
    assert (
        handlers.api_handler(rest_event("GET", book_id=book_id), LAMBDA_CONTEXT)["statusCode"]
        == 200
    )
    assert (
        handlers.api_handler(rest_event("DELETE", book_id=book_id), LAMBDA_CONTEXT)["statusCode"]
        == 200
    )
    assert (
        handlers.api_handler(rest_event("GET", book_id=book_id), LAMBDA_CONTEXT)["statusCode"]
        == 404
    )


def test_api_handler_rejects_unroutable_method():
    result = handlers.api_handler(rest_event("PATCH", book_id="b-1"), LAMBDA_CONTEXT)

    assert result["statusCode"] == 405
    assert result["headers"] == DEFAULT_HEADERS
    assert json.loads(result["body"])["error"] == "Method Not Allowed"


@pytest.mark.parametrize(
    "event",
    [
        {"httpMethod": None, "body": json.dumps(BOOK)},
        {"requestContext": {"http": None}, "body": json.dumps(BOOK)},
        {},
    ],
)
def test_event_without_method_is_rejected_with_envelope(event: dict):
    result = handlers.create_book_handler(event, LAMBDA_CONTEXT)

    assert result["statusCode"] == 405
    assert result["headers"] == DEFAULT_HEADERS
    assert json.loads(result["body"])["error"] == "Method Not Allowed"


def test_invalid_base64_body_is_bad_request():
    event = {"httpMethod": "POST", "body": "%%%not-base64", "isBase64Encoded": True}

    result = handlers.create_book_handler(event, LAMBDA_CONTEXT)

    assert result["statusCode"] == 400
    assert result["headers"] == DEFAULT_HEADERS
    assert json.loads(result["body"]) == {
        "error": "Bad Request",
        "message": "Request body is not valid base64",
    }


def test_unparseable_event_is_internal_error():
    result = handlers.update_book_handler({"requestContext": "garbage"}, LAMBDA_CONTEXT)

    assert result["statusCode"] == 500
    assert result["headers"] == DEFAULT_HEADERS
    assert json.loads(result["body"]) == {
        "error": "Internal Server Error",
        "message": "An error occurred while updating the book",
    }


def test_api_handler_answers_malformed_events_with_envelope():
    bad_base64 = handlers.api_handler(
        {"httpMethod": "POST", "body": "%%%", "isBase64Encoded": True}, LAMBDA_CONTEXT
    )
    no_method = handlers.api_handler({"httpMethod": None}, LAMBDA_CONTEXT)
    garbage = handlers.api_handler({"pathParameters": "not-a-mapping"}, LAMBDA_CONTEXT)

    assert bad_base64["statusCode"] == 400
    assert no_method["statusCode"] == 405
    assert garbage["statusCode"] == 500
    for result in (bad_base64, no_method, garbage):
        assert result["headers"] == DEFAULT_HEADERS
        assert set(json.loads(result["body"])) == {"error", "message"}


def test_inbound_request_tolerates_null_event_parts():
    request = InboundRequest.from_api_gateway_event(
        {
            "httpMethod": None,
            "requestContext": {"http": None},
            "pathParameters": None,
            "queryStringParameters": None,
            "body": None,
        }
    )

    assert request == InboundRequest(method="")
