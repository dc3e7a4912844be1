"""Domain-level access to the book collection."""

from __future__ import annotations

import structlog

from .api import BookApiService
from .models import Book

log = structlog.get_logger()


class BookRepository:
    """Thin pass-through over ``BookApiService``.

    Books without an ``id`` have never reached the server, so ``update`` and
    ``delete`` skip them without touching the network. Any other failure is
    raised to the caller as is.
    """

    def __init__(self, api: BookApiService) -> None:
        self.api = api

    async def get_all_books(self) -> list[Book]:
        return await self.api.list_books()

    async def insert(self, book: Book) -> None:
        # The created entity is dropped; callers refetch the whole list.
        await self.api.create_book(book)

    async def update(self, book: Book) -> None:
        if book.id is None:
            log.debug("update_skipped_no_id", titulo=book.titulo)
            return
        await self.api.update_book(book.id, book)

    async def delete(self, book: Book) -> None:
        if book.id is None:
            log.debug("delete_skipped_no_id", titulo=book.titulo)
            return
        await self.api.delete_book(book.id)
