from library_shop_api.schemas.book import (
    Book,
    BookIdInput,
    CreateBookInput,
    SearchParams,
    UpdateBookInput,
)

__all__ = [
    "Book",
    "BookIdInput",
    "CreateBookInput",
    "SearchParams",
    "UpdateBookInput",
]
