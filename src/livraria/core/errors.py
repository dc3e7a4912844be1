"""Exceptions raised by the /livros API client."""

from __future__ import annotations


class ApiError(Exception):
    """Base class for every failure talking to the book service."""


class NetworkError(ApiError):
    """The request could not be completed (connection, DNS, timeout...)."""


class ServerError(NetworkError):
    """The service answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"server returned HTTP {status_code}")


class NotFoundError(ServerError):
    def __init__(self, message: str = "") -> None:
        super().__init__(404, message)


class ParseError(ApiError):
    """The response body is not valid JSON or does not look like a book."""
