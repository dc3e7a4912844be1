import json

import httpx
import pytest

from livraria.core.api import BookApiService
from livraria.core.models import Book
from livraria.core.repository import BookRepository

BASE_URL = "https://livros.test"


def make_book(**overrides):
    fields = {
        "imagem": "https://img.test/capa.jpg",
        "titulo": "Dom Casmurro",
        "isbn": "9788535910667",
        "autor": "Machado de Assis",
        "editora": "Penguin",
        "ano_publicacao": 1899,
        "genero": "Romance",
        "preco": "39.90",
    }
    fields.update(overrides)
    return Book(**fields)


class FakeLivrosServer:
    """In-memory stand-in for the /livros REST service."""

    def __init__(self):
        self.books: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_with: Exception | None = None
        self.status_override: int | None = None
        self._next_id = 1

    def seed(self, *books):
        for book in books:
            payload = book.to_json()
            if "id" not in payload:
                payload["id"] = self._allocate_id()
            self.books[payload["id"]] = payload

    def _allocate_id(self):
        while str(self._next_id) in self.books:
            self._next_id += 1
        book_id = str(self._next_id)
        self._next_id += 1
        return book_id

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))
        if self.fail_with is not None:
            raise self.fail_with
        if self.status_override is not None:
            return httpx.Response(self.status_override, json={"error": "boom"})

        parts = request.url.path.strip("/").split("/")
        if parts[0] != "livros":
            return httpx.Response(404)

        if len(parts) == 1:
            if request.method == "GET":
                return httpx.Response(200, json=list(self.books.values()))
            if request.method == "POST":
                payload = json.loads(request.content)
                payload["id"] = self._allocate_id()
                self.books[payload["id"]] = payload
                return httpx.Response(201, json=payload)
            return httpx.Response(405)

        book_id = parts[1]
        if book_id not in self.books:
            return httpx.Response(404, json={"error": "not found"})
        if request.method == "GET":
            return httpx.Response(200, json=self.books[book_id])
        if request.method == "PUT":
            payload = json.loads(request.content)
            payload["id"] = book_id
            self.books[book_id] = payload
            return httpx.Response(200, json=payload)
        if request.method == "DELETE":
            del self.books[book_id]
            return httpx.Response(204)
        return httpx.Response(405)


@pytest.fixture
def server():
    return FakeLivrosServer()


@pytest.fixture
async def api(server):
    service = BookApiService(BASE_URL, transport=httpx.MockTransport(server.handler))
    yield service
    await service.aclose()


@pytest.fixture
def repository(api):
    return BookRepository(api)
