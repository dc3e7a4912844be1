"""FastAPI front end over the book view-model."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.api import BookApiService
from ..core.models import parse_year
from ..core.repository import BookRepository
from ..core.viewmodel import BookViewModel

load_dotenv()

log = structlog.get_logger()

FORM_FIELDS = ("imagem", "titulo", "isbn", "autor", "editora", "anoPublicacao", "genero", "preco")


def build_service() -> BookApiService:
    return BookApiService()


@asynccontextmanager
async def lifespan(app: FastAPI):
    service = build_service()
    app.state.view_model = BookViewModel(BookRepository(service))
    # Serve the first request from a loaded list when the service is reachable
    await app.state.view_model.join()
    log.info("app_started", api=service.base_url, books=len(app.state.view_model.all_books))
    try:
        yield
    finally:
        await app.state.view_model.join()
        await service.aclose()


app = FastAPI(title="Livraria", docs_url=None, redoc_url=None, lifespan=lifespan)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


def _view_model(request: Request) -> BookViewModel:
    return request.app.state.view_model


def _snapshot(view_model: BookViewModel) -> list[dict]:
    return [book.to_json() for book in view_model.all_books]


def _not_found(book_id: str) -> JSONResponse:
    return JSONResponse({"error": f"Book {book_id} not found."}, status_code=404)


async def _form(request: Request) -> dict[str, str] | None:
    try:
        body = await request.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    return {key: str(body[key]) for key in FORM_FIELDS if body.get(key) is not None}


@app.get("/health")
async def health(request: Request):
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "0.1.0",
        "environment": os.environ.get("ENV", "dev"),
        "books_loaded": len(_view_model(request).all_books),
    }


@app.get("/api/books")
async def list_books(request: Request):
    return _snapshot(_view_model(request))


@app.get("/api/books/{book_id}")
async def book_detail(book_id: str, request: Request):
    book = _view_model(request).find_book(book_id)
    if book is None:
        return _not_found(book_id)
    return book.to_json()


@app.post("/api/books")
async def add_book(request: Request):
    form = await _form(request)
    if form is None:
        return JSONResponse({"error": "Expected a JSON object body."}, status_code=400)

    view_model = _view_model(request)
    await view_model.add_book(
        imagem=form.get("imagem", ""),
        titulo=form.get("titulo", ""),
        isbn=form.get("isbn", ""),
        autor=form.get("autor", ""),
        editora=form.get("editora", ""),
        ano_publicacao=form.get("anoPublicacao", ""),
        genero=form.get("genero", ""),
        preco=form.get("preco", ""),
    )
    return _snapshot(view_model)


@app.put("/api/books/{book_id}")
async def edit_book(book_id: str, request: Request):
    view_model = _view_model(request)
    book = view_model.find_book(book_id)
    if book is None:
        return _not_found(book_id)

    form = await _form(request)
    if form is None:
        return JSONResponse({"error": "Expected a JSON object body."}, status_code=400)

    # Fields left out of the form keep their current value; so does a bad year.
    updated = book.copy(
        imagem=form.get("imagem", book.imagem),
        titulo=form.get("titulo", book.titulo),
        isbn=form.get("isbn", book.isbn),
        autor=form.get("autor", book.autor),
        editora=form.get("editora", book.editora),
        ano_publicacao=parse_year(form.get("anoPublicacao", ""), book.ano_publicacao),
        genero=form.get("genero", book.genero),
        preco=form.get("preco", book.preco),
    )
    await view_model.update_book(updated)
    return _snapshot(view_model)


@app.delete("/api/books/{book_id}")
async def delete_book(book_id: str, request: Request):
    view_model = _view_model(request)
    book = view_model.find_book(book_id)
    if book is None:
        return _not_found(book_id)
    await view_model.delete_book(book)
    return _snapshot(view_model)


def main():
    port = int(os.environ.get("PORT", "8000"))
    is_dev = os.environ.get("ENV", "dev") == "dev"
    uvicorn.run(
        "livraria.web.app:app",
        host="0.0.0.0",
        port=port,
        reload=is_dev,
    )
