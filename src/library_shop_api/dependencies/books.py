from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from library_shop_api.config import Settings, settings
from library_shop_api.database import SessionLocal
from library_shop_api.repositories.books_repository import BooksGateway, BooksRepository
from library_shop_api.services.book_service import BookService


@lru_cache
def get_books_repository() -> BooksGateway:
    return BooksRepository(session_factory=SessionLocal)


def get_settings() -> Settings:
    return settings


def get_book_service(
    repo: Annotated[BooksGateway, Depends(get_books_repository)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> BookService:
    return BookService(gateway=repo, settings=app_settings)
