"""Verse matching, highlighting and search orchestration."""

from .engine import SearchEngine, SearchOptions, SearchResult
from .highlight import render_highlights, render_result
from .matching import TextHighlight, find_matches
from .normalize import normalize_query, normalize_text
from .service import SearchResponse, search_verses

__all__ = [
    "SearchEngine",
    "SearchOptions",
    "SearchResponse",
    "SearchResult",
    "TextHighlight",
    "find_matches",
    "normalize_query",
    "normalize_text",
    "render_highlights",
    "render_result",
    "search_verses",
]
