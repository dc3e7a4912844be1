"""Observable state holder for the book list."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine

import structlog

from .api import BookApiService, get_api_service
from .models import Book, parse_year
from .repository import BookRepository

log = structlog.get_logger()

Observer = Callable[[tuple[Book, ...]], None]


class BookViewModel:
    """Holds the current snapshot of books and the mutation entry points.

    Every mutation runs as its own asyncio task: submit the change, then
    refetch the whole list. Failures of either step are logged and dropped,
    so the previous snapshot stays in place. Tasks are not serialized; when
    refetches overlap, the one that finishes last decides the snapshot.

    Must be created while an event loop is running, since construction
    schedules the initial fetch.
    """

    def __init__(self, repository: BookRepository) -> None:
        self.repository = repository
        self._all_books: tuple[Book, ...] = ()
        self._observers: list[Observer] = []
        self._tasks: set[asyncio.Task] = set()
        self.fetch_books()

    @property
    def all_books(self) -> tuple[Book, ...]:
        return self._all_books

    def observe(self, callback: Observer) -> Callable[[], None]:
        """Register ``callback`` for every new snapshot. Returns an unsubscribe function."""
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def find_book(self, book_id: str) -> Book | None:
        for book in self._all_books:
            if book.id == book_id:
                return book
        return None

    def _set_books(self, books: list[Book]) -> None:
        self._all_books = tuple(books)
        for callback in list(self._observers):
            try:
                callback(self._all_books)
            except Exception as e:
                log.warning("observer_failed", callback=repr(callback), error=str(e))

    def _launch(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _refresh(self) -> None:
        try:
            books = await self.repository.get_all_books()
        except Exception as e:
            log.warning("fetch_books_failed", error=str(e), error_type=type(e).__name__)
            return
        self._set_books(books)
        log.debug("books_refreshed", count=len(books))

    async def _submit_then_refresh(self, action: str, submit: Coroutine) -> None:
        try:
            await submit
        except Exception as e:
            log.warning("mutation_failed", action=action, error=str(e), error_type=type(e).__name__)
        await self._refresh()

    def fetch_books(self) -> asyncio.Task:
        return self._launch(self._refresh())

    def add_book(
        self,
        imagem: str,
        titulo: str,
        isbn: str,
        autor: str,
        editora: str,
        ano_publicacao: str,
        genero: str,
        preco: str,
    ) -> asyncio.Task:
        book = Book(
            imagem=imagem,
            titulo=titulo,
            isbn=isbn,
            autor=autor,
            editora=editora,
            ano_publicacao=parse_year(ano_publicacao),
            genero=genero,
            preco=preco,
        )
        return self._launch(self._submit_then_refresh("insert", self.repository.insert(book)))

    def update_book(self, book: Book) -> asyncio.Task:
        return self._launch(self._submit_then_refresh("update", self.repository.update(book)))

    def delete_book(self, book: Book) -> asyncio.Task:
        return self._launch(self._submit_then_refresh("delete", self.repository.delete(book)))

    async def join(self) -> None:
        """Wait until no task started by this view-model is still running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))


def create_view_model(api: BookApiService | None = None) -> BookViewModel:
    """Wire an API client, a repository and a view-model together."""
    return BookViewModel(BookRepository(api or get_api_service()))
