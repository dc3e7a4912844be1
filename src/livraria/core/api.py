"""Async client for the remote /livros REST service."""

from __future__ import annotations

import os

import httpx
import structlog

from .errors import NetworkError, NotFoundError, ParseError, ServerError
from .models import Book

log = structlog.get_logger()

DEFAULT_BASE_URL = "https://libraryapi-1-ws4a.onrender.com"

_BOOKS_PATH = "/livros"


def configured_base_url() -> str:
    """Base URL from ``LIVRARIA_API_URL``, read on every call."""
    return os.environ.get("LIVRARIA_API_URL", DEFAULT_BASE_URL)


def _default_timeout() -> httpx.Timeout:
    raw = os.environ.get("LIVRARIA_TIMEOUT", "")
    if raw:
        return httpx.Timeout(float(raw))
    return httpx.Timeout(5.0)  # httpx's own default


class BookApiService:
    """Maps the five book operations onto HTTP calls against ``base_url``.

    Every failure surfaces to the caller: transport problems as
    ``NetworkError``, non-2xx answers as ``ServerError`` (``NotFoundError``
    for 404) and undecodable bodies as ``ParseError``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: httpx.Timeout | float | None = None,
    ) -> None:
        self.base_url = (base_url or configured_base_url()).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=timeout if timeout is not None else _default_timeout(),
            headers={"Accept": "application/json"},
        )

    async def _request(self, method: str, path: str, **kwargs: object) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            log.debug("livros_request_error", method=method, path=path, error=str(e))
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if resp.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found")
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.debug("livros_server_error", method=method, path=path, status=resp.status_code)
            raise ServerError(resp.status_code, f"{method} {path}: HTTP {resp.status_code}") from e
        return resp

    @staticmethod
    def _decode(resp: httpx.Response) -> object:
        try:
            return resp.json()
        except ValueError as e:
            raise ParseError(f"invalid JSON from {resp.request.url}") from e

    async def list_books(self) -> list[Book]:
        resp = await self._request("GET", _BOOKS_PATH)
        data = self._decode(resp)
        if not isinstance(data, list):
            raise ParseError(f"expected a JSON array from {_BOOKS_PATH}")
        books = [Book.from_json(item) for item in data]
        log.debug("livros_listed", count=len(books))
        return books

    async def get_book(self, book_id: str) -> Book:
        resp = await self._request("GET", f"{_BOOKS_PATH}/{book_id}")
        return Book.from_json(self._decode(resp))

    async def create_book(self, book: Book) -> Book:
        payload = book.to_json()
        payload.pop("id", None)
        resp = await self._request("POST", _BOOKS_PATH, json=payload)
        created = Book.from_json(self._decode(resp))
        log.info("livro_created", id=created.id, titulo=created.titulo)
        return created

    async def update_book(self, book_id: str, book: Book) -> Book:
        resp = await self._request("PUT", f"{_BOOKS_PATH}/{book_id}", json=book.to_json())
        log.info("livro_updated", id=book_id)
        return Book.from_json(self._decode(resp))

    async def delete_book(self, book_id: str) -> None:
        await self._request("DELETE", f"{_BOOKS_PATH}/{book_id}")
        log.info("livro_deleted", id=book_id)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BookApiService:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


# Process-wide instance, created on first use
_default_service: BookApiService | None = None


def get_api_service() -> BookApiService:
    """Return the shared client bound to the configured base URL."""
    global _default_service
    if _default_service is None:
        _default_service = BookApiService()
    return _default_service


async def close_api_service() -> None:
    global _default_service
    if _default_service is not None:
        await _default_service.aclose()
        _default_service = None
