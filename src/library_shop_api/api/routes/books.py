from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from starlette.concurrency import run_in_threadpool

from library_shop_api.dependencies.books import get_book_service
from library_shop_api.inbound import InboundRequest
from library_shop_api.responses import ApiResponse
from library_shop_api.services.book_service import BookService

router = APIRouter(prefix="/books", tags=["books"])


async def to_inbound(request: Request) -> InboundRequest:
    raw_body = await request.body()
    return InboundRequest(
        method=request.method,
        path_parameters=dict(request.path_params),
        query_parameters=dict(request.query_params),
        body=raw_body.decode("utf-8", errors="replace") if raw_body else None,
    )


def to_http_response(api_response: ApiResponse) -> Response:
    return Response(
        content=api_response.serialized_body(),
        status_code=api_response.status_code,
        headers=api_response.headers,
    )


@router.post("", summary="Create a book", status_code=201)
async def create_book(
    request: Request,
    svc: Annotated[BookService, Depends(get_book_service)],
) -> Response:
    inbound = await to_inbound(request)
    return to_http_response(await run_in_threadpool(svc.create_book, inbound))


@router.get("", summary="List books, optionally filtered by author or title")
async def list_books(
    request: Request,
    svc: Annotated[BookService, Depends(get_book_service)],
) -> Response:
    inbound = await to_inbound(request)
    return to_http_response(await run_in_threadpool(svc.list_books, inbound))


@router.get("/{id}", summary="Retrieve a book by id")
async def get_book(
    request: Request,
    svc: Annotated[BookService, Depends(get_book_service)],
) -> Response:
    inbound = await to_inbound(request)
    return to_http_response(await run_in_threadpool(svc.get_book, inbound))


@router.put("/{id}", summary="Partially update a book")
async def update_book(
    request: Request,
    svc: Annotated[BookService, Depends(get_book_service)],
) -> Response:
    inbound = await to_inbound(request)
    return to_http_response(await run_in_threadpool(svc.update_book, inbound))


@router.delete("/{id}", summary="Delete a book")
async def delete_book(
    request: Request,
    svc: Annotated[BookService, Depends(get_book_service)],
) -> Response:
    inbound = await to_inbound(request)
    return to_http_response(await run_in_threadpool(svc.delete_book, inbound))
