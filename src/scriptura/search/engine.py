"""Verse search over cached corpora with book/chapter scoping and result caps."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, replace
import logging
from typing import TYPE_CHECKING, Any

from scriptura.corpus.cache import CorpusCache
from scriptura.corpus.models import VERSE_ID_SEPARATOR, Bible, Verse, split_verse_id
from scriptura.errors import invalid_argument
from scriptura.search.highlight import render_highlights
from scriptura.search.index import VerseIndexCache
from scriptura.search.matching import TextHighlight, find_matches
from scriptura.search.normalize import normalize_query

if TYPE_CHECKING:
    from scriptura.config import ScripturaSettings


DEFAULT_YIELD_EVERY = 512

logger = logging.getLogger(__name__)

_Prefilter = Callable[[Verse], bool]


@dataclass(slots=True)
class SearchOptions:
    """Per-query switches; ``max_results <= 0`` means unbounded."""

    case_sensitive: bool = False
    highlight_results: bool = False
    max_results: int = 0
    book_filter: str | None = None
    chapter_filter: str | None = None

    @classmethod
    def from_settings(cls, settings: "ScripturaSettings", **overrides: Any) -> "SearchOptions":
        defaults = cls(
            case_sensitive=settings.case_sensitive,
            max_results=settings.max_results,
        )
        return replace(defaults, **overrides)


@dataclass(frozen=True, slots=True)
class SearchResult:
    bible_id: str
    book_id: str
    chapter_id: str
    verse: Verse
    highlights: tuple[TextHighlight, ...]

    def to_dict(self, *, include_highlighted_text: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "bible_id": self.bible_id,
            "book_id": self.book_id,
            "chapter_id": self.chapter_id,
            "verse_id": self.verse.id,
            "verse_number": self.verse.number,
            "reference": self.verse.reference,
            "text": self.verse.text,
            "highlights": [highlight.to_dict() for highlight in self.highlights],
        }
        if include_highlighted_text:
            payload["highlighted_text"] = render_highlights(self.verse.text, self.highlights)
        return payload


def _passes_filters(verse_id: str, options: SearchOptions) -> bool:
    if options.book_filter is None and options.chapter_filter is None:
        return True

    parts = verse_id.split(VERSE_ID_SEPARATOR)
    if options.book_filter is not None and parts[0] != options.book_filter:
        return False
    if options.chapter_filter is not None and (len(parts) < 2 or parts[1] != options.chapter_filter):
        return False
    return True


class SearchEngine:
    """Scan a corpus in document order and collect verses matching a query."""

    def __init__(self, cache: CorpusCache, *, yield_every: int = DEFAULT_YIELD_EVERY) -> None:
        if yield_every < 1:
            raise ValueError("yield_every must be >= 1")
        self._cache = cache
        self._yield_every = yield_every
        self._indexes = VerseIndexCache()

    @property
    def cache(self) -> CorpusCache:
        return self._cache

    async def search(
        self,
        bible_id: str,
        query: str,
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        if query is None or not query.strip():
            raise invalid_argument("Search text cannot be empty")

        opts = options or SearchOptions()
        bible = await self._cache.get_corpus(bible_id)
        prefilter = await self._build_prefilter(bible, query, case_sensitive=opts.case_sensitive)

        results: list[SearchResult] = []
        for position, verse in enumerate(bible.iter_verses(), 1):
            if position % self._yield_every == 0:
                await asyncio.sleep(0)

            if not _passes_filters(verse.id, opts):
                continue
            if prefilter is not None and not prefilter(verse):
                continue

            highlights = find_matches(verse.text, query, case_sensitive=opts.case_sensitive)
            if not highlights:
                continue

            location = split_verse_id(verse.id)
            if location is None:
                logger.debug("Skipping verse with malformed id %r in bible %s", verse.id, bible.id)
                continue

            book_id, chapter_id = location
            results.append(
                SearchResult(
                    bible_id=bible.id,
                    book_id=book_id,
                    chapter_id=chapter_id,
                    verse=verse,
                    highlights=tuple(highlights),
                )
            )
            if opts.max_results > 0 and len(results) >= opts.max_results:
                break

        logger.debug("Search %r in %s returned %d results", query, bible.id, len(results))
        return results

    async def _build_prefilter(self, bible: Bible, query: str, *, case_sensitive: bool) -> _Prefilter | None:
        normalized = normalize_query(query, case_sensitive=case_sensitive)
        if case_sensitive:
            return lambda verse: normalized in verse.text

        # Case folding and normalization agree only on ASCII queries; any
        # other query is matched against every verse.
        if not query.isascii():
            return None
        # The first build for a corpus normalizes every verse; keep it off the loop.
        index = await asyncio.to_thread(self._indexes.get, bible)
        return lambda verse: index.may_contain(verse.id, normalized)
