from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import ColumnElement, Table, delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from library_shop_api.domain import BookId, FilterField, utc_timestamp
from library_shop_api.errors import ConflictError, ItemNotFoundError, StorageError
from library_shop_api.models import books_table
from library_shop_api.schemas.book import Book

MUTABLE_COLUMNS = frozenset({"title", "author", "isbn", "price", "description", "published_date"})


@dataclass(frozen=True)
class ScanQuery:
    limit: int = 10
    filter_field: FilterField | None = None
    filter_value: str | None = None
    cursor: str | None = None


@dataclass
class ScanPage:
    items: list[Book]
    count: int
    next_cursor: str | None = None


class BooksGateway(Protocol):
    """Contract of the single-table store the book operations run against."""

    def get_by_id(self, table: str, book_id: BookId) -> Book | None:
        """Returns the book, or None when no record has this id."""
        ...

    def put_if_absent(self, table: str, book: Book) -> Book:
        """Inserts the book. Raises ConflictError if the id is already taken."""
        ...

    def update(self, table: str, book_id: BookId, changes: Mapping[str, Any]) -> Book:
        """Merges changes, refreshes updatedAt. Raises ItemNotFoundError if absent."""
        ...

    def delete(self, table: str, book_id: BookId) -> None:
        """Hard delete. Raises ItemNotFoundError if absent."""
        ...

    def scan(self, table: str, query: ScanQuery) -> ScanPage:
        """Returns one page of books, optionally filtered by substring on one field."""
        ...


class BooksRepository:
    """SQLAlchemy implementation of BooksGateway.

    Each call runs in its own short-lived session, so one instance can be shared by the
    whole process. Driver failures surface as StorageError.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_by_id(self, table: str, book_id: BookId) -> Book | None:
        books = books_table(table)
        try:
            with self._session_factory() as session:
                row = (
                    session.execute(select(books).where(books.c.id == book_id)).mappings().first()
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read book {book_id} from {table}") from exc

        if row is None:
            return None
        return self._to_book(row)

    def put_if_absent(self, table: str, book: Book) -> Book:
        books = books_table(table)
        try:
            with self._session_factory() as session, session.begin():
                dialect = session.get_bind().dialect.name
                stmt: Any
                if dialect == "sqlite":
                    stmt = sqlite_insert(books)
                else:
                    stmt = pg_insert(books)
                stmt = stmt.values(**self._to_row(book)).on_conflict_do_nothing(
                    index_elements=["id"]
                )
                result = session.execute(stmt)
                if max(getattr(result, "rowcount", 0), 0) == 0:
                    raise ConflictError(f"Book {book.id} already exists in {table}")
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to insert book {book.id} into {table}") from exc

        return book

    def update(self, table: str, book_id: BookId, changes: Mapping[str, Any]) -> Book:
        books = books_table(table)
        values = {key: value for key, value in changes.items() if key in MUTABLE_COLUMNS}
        values["updated_at"] = utc_timestamp()

        try:
            with self._session_factory() as session, session.begin():
                stmt = (
                    update(books)
                    .where(books.c.id == book_id)
                    .values(**values)
                    .returning(*books.c)
                )
                row = session.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to update book {book_id} in {table}") from exc

        if row is None:
            raise ItemNotFoundError(f"Book {book_id} does not exist in {table}")
        return self._to_book(row)

    def delete(self, table: str, book_id: BookId) -> None:
        books = books_table(table)
        try:
            with self._session_factory() as session, session.begin():
                result = session.execute(delete(books).where(books.c.id == book_id))
                deleted = max(getattr(result, "rowcount", 0), 0)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete book {book_id} from {table}") from exc

        if deleted == 0:
            raise ItemNotFoundError(f"Book {book_id} does not exist in {table}")

    def scan(self, table: str, query: ScanQuery) -> ScanPage:
        """
        Keyset pagination ordered by id: the cursor is the last id of the previous page.
        One extra row is fetched to know whether another page exists.
        """
        books = books_table(table)
        try:
            with self._session_factory() as session:
                stmt = select(books).order_by(books.c.id).limit(query.limit + 1)

                if query.filter_field and query.filter_value:
                    dialect = session.get_bind().dialect.name
                    stmt = stmt.where(
                        self._contains(books, query.filter_field, query.filter_value, dialect)
                    )
                if query.cursor:
                    stmt = stmt.where(books.c.id > query.cursor)

                rows = session.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to scan books in {table}") from exc

        items = [self._to_book(row) for row in rows[: query.limit]]
        next_cursor = items[-1].id if len(rows) > query.limit else None
        return ScanPage(items=items, count=len(items), next_cursor=next_cursor)

    @staticmethod
    def _contains(
        books: Table, field: FilterField, value: str, dialect: str
    ) -> ColumnElement[bool]:
        column = books.c[field]
        # SQLite LIKE ignores ASCII case; instr() keeps the match case-sensitive.
        if dialect == "sqlite":
            return func.instr(column, value) > 0
        return column.contains(value, autoescape=True)

    @staticmethod
    def _to_row(book: Book) -> dict[str, Any]:
        return book.model_dump()

    @staticmethod
    def _to_book(row: RowMapping) -> Book:
        return Book.model_validate(dict(row))
