from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from library_shop_api.config import Settings
from library_shop_api.dependencies.books import get_books_repository, get_settings
from library_shop_api.main import app
from library_shop_api.models import books_table
from library_shop_api.repositories.books_repository import BooksRepository
from library_shop_api.services.book_service import BookService

TEST_TABLE = "library-books-test"


@pytest.fixture(autouse=True)
def clear_dependency_overrides() -> Iterator[None]:
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    books_table(TEST_TABLE).create(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=db_engine, expire_on_commit=False)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(books_table_name=TEST_TABLE, stage="test")


@pytest.fixture
def books_repo(session_factory: sessionmaker[Session]) -> BooksRepository:
    return BooksRepository(session_factory=session_factory)


@pytest.fixture
def book_service(books_repo: BooksRepository, test_settings: Settings) -> BookService:
    return BookService(gateway=books_repo, settings=test_settings)


@pytest.fixture
def client(books_repo: BooksRepository, test_settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_books_repository] = lambda: books_repo
    app.dependency_overrides[get_settings] = lambda: test_settings

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def table_name() -> str:
    return TEST_TABLE
