import pytest
from fastapi.testclient import TestClient


class BookFactory:
    """Creates books through the public API so tests exercise the full stack."""

    def __init__(self, client: TestClient):
        self.client = client

    def create_book(self, title: str = "Test Book", **kwargs) -> dict:
        payload = {
            "title": title,
            "author": kwargs.pop("author", "Test Author"),
            "isbn": kwargs.pop("isbn", "978-0000000000"),
            "price": kwargs.pop("price", 19.99),
            **kwargs,
        }
        response = self.client.post("/books", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["book"]

    def create_books(self, count: int) -> list[dict]:
        return [self.create_book(title=f"Book {i}") for i in range(1, count + 1)]


@pytest.fixture
def test_data(client: TestClient) -> BookFactory:
    return BookFactory(client)


@pytest.fixture
def sample_books(test_data: BookFactory) -> list[dict]:
    return [
        test_data.create_book(
            title="Domain-Driven Design",
            author="Eric Evans",
            isbn="978-0321125215",
            price=54.99,
            description="Tackling complexity in the heart of software.",
            publishedDate="2003-08-20",
        ),
        test_data.create_book(
            title="Implementing Domain-Driven Design",
            author="Vaughn Vernon",
            isbn="978-0321834577",
            price=49.99,
        ),
        test_data.create_book(
            title="Working Effectively with Legacy Code",
            author="Michael Feathers",
            isbn="978-0131177055",
            price=44.5,
        ),
    ]
