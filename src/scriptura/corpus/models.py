"""Immutable document model for a Bible corpus."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


VERSE_ID_SEPARATOR = "."


@dataclass(frozen=True, slots=True)
class Verse:
    id: str
    number: int
    text: str
    reference: str = ""


@dataclass(frozen=True, slots=True)
class Chapter:
    id: str
    number: int
    verses: tuple[Verse, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class Book:
    id: str
    name: str
    abbreviation: str
    number: int
    chapters: tuple[Chapter, ...] = field(default_factory=tuple)

    def find_chapter(self, chapter_id: str) -> Chapter | None:
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        return None


@dataclass(frozen=True, slots=True)
class Bible:
    """A complete corpus; ``id`` is its unique cache key."""

    id: str
    name: str
    language: str
    version: str
    copyright: str
    is_right_to_left: bool
    books: tuple[Book, ...] = field(default_factory=tuple)

    def find_book(self, book_id: str) -> Book | None:
        for book in self.books:
            if book.id == book_id:
                return book
        return None

    def iter_verses(self) -> Iterator[Verse]:
        """Yield every verse in document order."""
        for book in self.books:
            for chapter in book.chapters:
                yield from chapter.verses

    def verse_count(self) -> int:
        return sum(len(chapter.verses) for book in self.books for chapter in book.chapters)


def split_verse_id(verse_id: str) -> tuple[str, str] | None:
    """Return ``(book_id, chapter_id)`` encoded in a ``BOOK.CHAPTER.VERSE`` id.

    Ids with fewer than two components cannot be attributed to a chapter and
    yield ``None``.
    """
    parts = verse_id.split(VERSE_ID_SEPARATOR)
    if len(parts) < 2:
        return None
    return parts[0], parts[1]
