"""Deserialize raw corpus documents into the Bible document model."""

from __future__ import annotations

import json
from typing import Any, Mapping

from charset_normalizer import from_bytes

from scriptura.corpus.models import Bible, Book, Chapter, Verse


class CorpusParseError(ValueError):
    """Raised when a document does not describe a well-formed Bible."""


def decode_document(raw: bytes) -> str:
    """Decode document bytes, preferring UTF-8 and falling back to detection."""
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    best = from_bytes(raw).best()
    if best is None or not best.encoding:
        raise CorpusParseError("Could not detect document encoding")
    return raw.decode(best.encoding)


def _key(name: str) -> str:
    return name.replace("_", "").casefold()


def _fields(payload: Any, *, where: str) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise CorpusParseError(f"{where} must be an object")
    return {_key(str(name)): value for name, value in payload.items()}


def _required_str(fields: Mapping[str, Any], name: str, *, where: str) -> str:
    value = fields.get(_key(name))
    if not isinstance(value, str):
        raise CorpusParseError(f"{where}: '{name}' must be a string")
    return value


def _optional_str(fields: Mapping[str, Any], name: str, *, where: str) -> str:
    value = fields.get(_key(name))
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CorpusParseError(f"{where}: '{name}' must be a string")
    return value


def _required_int(fields: Mapping[str, Any], name: str, *, where: str) -> int:
    value = fields.get(_key(name))
    if isinstance(value, bool) or not isinstance(value, int):
        raise CorpusParseError(f"{where}: '{name}' must be an integer")
    return value


def _required_bool(fields: Mapping[str, Any], name: str, *, where: str) -> bool:
    value = fields.get(_key(name))
    if not isinstance(value, bool):
        raise CorpusParseError(f"{where}: '{name}' must be a boolean")
    return value


def _items(fields: Mapping[str, Any], name: str, *, where: str) -> list[Any]:
    value = fields.get(_key(name))
    if value is None:
        return []
    if not isinstance(value, list):
        raise CorpusParseError(f"{where}: '{name}' must be a list")
    return value


def _parse_verse(payload: Any, *, where: str) -> Verse:
    fields = _fields(payload, where=where)
    return Verse(
        id=_required_str(fields, "id", where=where),
        number=_required_int(fields, "number", where=where),
        text=_required_str(fields, "text", where=where),
        reference=_optional_str(fields, "reference", where=where),
    )


def _parse_chapter(payload: Any, *, where: str) -> Chapter:
    fields = _fields(payload, where=where)
    chapter_id = _required_str(fields, "id", where=where)
    verses = tuple(
        _parse_verse(item, where=f"{where} verse[{idx}]")
        for idx, item in enumerate(_items(fields, "verses", where=where))
    )
    return Chapter(id=chapter_id, number=_required_int(fields, "number", where=where), verses=verses)


def _parse_book(payload: Any, *, where: str) -> Book:
    fields = _fields(payload, where=where)
    chapters = tuple(
        _parse_chapter(item, where=f"{where} chapter[{idx}]")
        for idx, item in enumerate(_items(fields, "chapters", where=where))
    )
    return Book(
        id=_required_str(fields, "id", where=where),
        name=_required_str(fields, "name", where=where),
        abbreviation=_required_str(fields, "abbreviation", where=where),
        number=_required_int(fields, "number", where=where),
        chapters=chapters,
    )


def bible_from_dict(payload: Any) -> Bible:
    """Build a Bible from decoded JSON; keys are matched case-insensitively."""
    fields = _fields(payload, where="bible")
    bible_id = _required_str(fields, "id", where="bible")
    if not bible_id.strip():
        raise CorpusParseError("bible: 'id' cannot be empty")

    books = tuple(
        _parse_book(item, where=f"bible {bible_id} book[{idx}]")
        for idx, item in enumerate(_items(fields, "books", where="bible"))
    )
    return Bible(
        id=bible_id,
        name=_required_str(fields, "name", where="bible"),
        language=_required_str(fields, "language", where="bible"),
        version=_required_str(fields, "version", where="bible"),
        copyright=_required_str(fields, "copyright", where="bible"),
        is_right_to_left=_required_bool(fields, "is_right_to_left", where="bible"),
        books=books,
    )


def parse_bible(raw: bytes | str) -> Bible:
    """Parse one raw corpus document."""
    text = decode_document(raw) if isinstance(raw, bytes) else raw
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CorpusParseError(f"Malformed JSON document: {exc}") from exc
    return bible_from_dict(payload)


def bible_to_dict(bible: Bible) -> dict[str, Any]:
    return {
        "id": bible.id,
        "name": bible.name,
        "language": bible.language,
        "version": bible.version,
        "copyright": bible.copyright,
        "is_right_to_left": bible.is_right_to_left,
        "books": [
            {
                "id": book.id,
                "name": book.name,
                "abbreviation": book.abbreviation,
                "number": book.number,
                "chapters": [
                    {
                        "id": chapter.id,
                        "number": chapter.number,
                        "verses": [
                            {
                                "id": verse.id,
                                "number": verse.number,
                                "text": verse.text,
                                "reference": verse.reference,
                            }
                            for verse in chapter.verses
                        ],
                    }
                    for chapter in book.chapters
                ],
            }
            for book in bible.books
        ],
    }
