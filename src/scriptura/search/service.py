"""Async search facade that reports failures as values instead of raising."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging

from scriptura.config import DEFAULT_SEARCH_TIMEOUT_SECONDS
from scriptura.errors import ErrorKind, ScripturaError
from scriptura.search.engine import SearchEngine, SearchOptions, SearchResult


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchResponse:
    results: tuple[SearchResult, ...]
    error_kind: ErrorKind | None = None
    error: str | None = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.error_kind is None and not self.timed_out


async def search_verses(
    engine: SearchEngine,
    bible_id: str,
    query: str,
    options: SearchOptions | None = None,
    *,
    timeout_seconds: float = DEFAULT_SEARCH_TIMEOUT_SECONDS,
) -> SearchResponse:
    """Run one search under a timeout.

    A timed-out search is abandoned; a bulk load it started keeps running for
    other callers.
    """
    try:
        results = await asyncio.wait_for(
            engine.search(bible_id, query, options),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning("Search timed out after %.1fs: bible=%s query=%r", timeout_seconds, bible_id, query)
        return SearchResponse(
            results=(),
            error=f"Search timed out after {timeout_seconds:g}s",
            timed_out=True,
        )
    except ScripturaError as exc:
        if exc.kind is ErrorKind.LOAD_FAILURE:
            logger.error("Search failed while loading corpora: %s", exc)
        else:
            logger.info("Search rejected (%s): %s", exc.kind.value, exc)
        return SearchResponse(results=(), error_kind=exc.kind, error=str(exc))

    return SearchResponse(results=tuple(results))
