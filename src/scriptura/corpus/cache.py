"""In-memory corpus cache with a single shared bulk load."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from enum import Enum
import logging

from scriptura.corpus.models import Bible, Book, Chapter, Verse
from scriptura.corpus.parser import parse_bible
from scriptura.corpus.store import DocumentStore
from scriptura.errors import invalid_argument, load_failure, not_found


logger = logging.getLogger(__name__)

BibleParser = Callable[[bytes], Bible]


class CacheState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    POPULATED = "populated"


class CorpusCache:
    """Lazily bulk-load every corpus document and serve lookups by id.

    The first access reads and parses every document the store lists. The
    load runs as one shared task: concurrent callers wait on the same
    outcome, and a caller that stops waiting does not cancel it. A failed
    load leaves the cache empty so the next access starts over.
    """

    def __init__(self, store: DocumentStore, *, parser: BibleParser = parse_bible) -> None:
        self._store = store
        self._parser = parser
        self._bibles: dict[str, Bible] = {}
        self._state = CacheState.EMPTY
        self._load_task: asyncio.Task[None] | None = None
        self._generation = 0
        self._load_count = 0

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def load_count(self) -> int:
        """Number of bulk loads started since construction."""

        return self._load_count

    async def ensure_loaded(self) -> None:
        while self._state is not CacheState.POPULATED:
            task = self._load_task
            if task is None:
                task = self._start_load()
            generation = self._generation
            try:
                await asyncio.shield(task)
            except Exception:
                if generation == self._generation:
                    raise
                logger.info("Ignoring failure of bulk load superseded by invalidation")

    def invalidate(self) -> None:
        """Drop every cached corpus; the next access bulk-loads again."""

        self._generation += 1
        self._bibles = {}
        self._state = CacheState.EMPTY
        self._load_task = None
        logger.info("Corpus cache invalidated")

    async def reload(self) -> None:
        self.invalidate()
        await self.ensure_loaded()

    async def get_corpus(self, bible_id: str) -> Bible:
        if not bible_id or not bible_id.strip():
            raise invalid_argument("Bible id cannot be empty")

        await self.ensure_loaded()
        bible = self._bibles.get(bible_id)
        if bible is None:
            raise not_found(f"Bible with ID '{bible_id}' was not found", subject=bible_id)
        return bible

    async def get_all_corpora(self) -> list[Bible]:
        await self.ensure_loaded()
        return list(self._bibles.values())

    async def get_book(self, bible_id: str, book_id: str) -> Book:
        bible = await self.get_corpus(bible_id)
        book = bible.find_book(book_id)
        if book is None:
            raise not_found(f"Book '{book_id}' was not found in bible '{bible_id}'", subject=book_id)
        return book

    async def get_chapter(self, bible_id: str, book_id: str, chapter_id: str) -> Chapter:
        book = await self.get_book(bible_id, book_id)
        chapter = book.find_chapter(chapter_id)
        if chapter is None:
            raise not_found(
                f"Chapter '{chapter_id}' was not found in book '{book_id}' of bible '{bible_id}'",
                subject=chapter_id,
            )
        return chapter

    async def get_verses(
        self,
        bible_id: str,
        book_id: str,
        chapter_id: str,
        verse_ids: Iterable[str],
    ) -> list[Verse]:
        """Return the requested verses in chapter order; unknown ids are ignored."""

        chapter = await self.get_chapter(bible_id, book_id, chapter_id)
        wanted = set(verse_ids)
        return [verse for verse in chapter.verses if verse.id in wanted]

    def _start_load(self) -> asyncio.Task[None]:
        self._load_count += 1
        self._state = CacheState.LOADING
        task = asyncio.get_running_loop().create_task(self._bulk_load(self._generation))
        self._load_task = task
        return task

    async def _bulk_load(self, generation: int) -> None:
        try:
            bibles = await asyncio.to_thread(self._read_all)
        except BaseException:
            if generation == self._generation:
                self._bibles = {}
                self._state = CacheState.EMPTY
            raise
        else:
            if generation == self._generation:
                self._bibles = bibles
                self._state = CacheState.POPULATED
            else:
                logger.info("Discarding bulk load superseded by invalidation")
        finally:
            if generation == self._generation:
                self._load_task = None

    def _read_all(self) -> dict[str, Bible]:
        try:
            names = self._store.list_documents()
        except OSError as exc:
            logger.error("Failed to list corpus documents: %s", exc)
            raise load_failure(f"Failed to list corpus documents: {exc}") from exc

        bibles: dict[str, Bible] = {}
        for name in names:
            try:
                bible = self._parser(self._store.read_document(name))
            except (OSError, ValueError) as exc:
                logger.error("Bulk load aborted at %s: %s", name, exc)
                raise load_failure(f"Failed to load corpus document: {exc}", subject=name) from exc

            if bible.id in bibles:
                logger.warning("Bible id %s redeclared by %s; keeping the later document", bible.id, name)
            bibles[bible.id] = bible

        logger.info("Loaded %d bibles from %d documents", len(bibles), len(names))
        return bibles
