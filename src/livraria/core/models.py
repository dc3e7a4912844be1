"""Data model for books exchanged with the /livros service."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, replace

from .errors import ParseError

# Python attribute -> JSON key on the wire
_WIRE_NAMES = {
    "imagem": "imagem",
    "titulo": "titulo",
    "isbn": "isbn",
    "autor": "autor",
    "editora": "editora",
    "ano_publicacao": "anoPublicacao",
    "genero": "genero",
    "preco": "preco",
}


@dataclass(frozen=True)
class Book:
    imagem: str
    titulo: str
    isbn: str
    autor: str
    editora: str
    ano_publicacao: int
    genero: str
    preco: str
    id: str | None = None

    @classmethod
    def from_json(cls, data: object) -> Book:
        """Build a Book from a decoded JSON object.

        Keys the model does not know about are ignored.
        """
        if not isinstance(data, dict):
            raise ParseError(f"expected a JSON object, got {type(data).__name__}")

        missing = [key for key in _WIRE_NAMES.values() if key not in data]
        if missing:
            raise ParseError(f"missing fields: {', '.join(missing)}")

        values = {attr: data[key] for attr, key in _WIRE_NAMES.items()}
        for attr, key in _WIRE_NAMES.items():
            if attr != "ano_publicacao":
                values[attr] = _as_text(key, values[attr])
        try:
            values["ano_publicacao"] = int(values["ano_publicacao"])
        except (TypeError, ValueError) as e:
            raise ParseError(f"invalid anoPublicacao: {values['ano_publicacao']!r}") from e

        book_id = data.get("id")
        return cls(id=str(book_id) if book_id is not None else None, **values)

    def to_json(self) -> dict:
        """Serialize using the wire field names. ``id`` is left out when unset."""
        fields = asdict(self)
        payload = {key: fields[attr] for attr, key in _WIRE_NAMES.items()}
        if self.id is not None:
            payload["id"] = self.id
        return payload

    def copy(self, **changes: object) -> Book:
        return replace(self, **changes)


def _as_text(key: str, value: object) -> str:
    # Numbers are accepted for text fields and kept as their JSON spelling
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ParseError(f"invalid {key}: expected a string, got {value!r}")


_YEAR_RE = re.compile(r"[+-]?[0-9]+")
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1


def parse_year(text: str, default: int = 0) -> int:
    """Parse a publication year typed by the user, falling back to ``default``.

    Only plain ASCII digits with an optional sign are accepted, and the value
    must fit in a signed 32-bit integer.
    """
    if not isinstance(text, str) or not _YEAR_RE.fullmatch(text.strip()):
        return default
    year = int(text.strip())
    if not _INT32_MIN <= year <= _INT32_MAX:
        return default
    return year
