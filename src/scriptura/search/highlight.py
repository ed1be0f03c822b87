"""Compose marker-wrapped text from highlight spans."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from scriptura.search.engine import SearchResult


DEFAULT_OPEN_TAG = "<mark>"
DEFAULT_CLOSE_TAG = "</mark>"


class _SpanLike(Protocol):
    start_index: int
    length: int


def render_highlights(
    text: str,
    highlights: Sequence[_SpanLike],
    *,
    open_tag: str = DEFAULT_OPEN_TAG,
    close_tag: str = DEFAULT_CLOSE_TAG,
) -> str:
    """Wrap each highlighted span of *text* in the marker pair.

    Spans may arrive unsorted or overlapping. They are ordered by start index;
    the part of a span already covered by an earlier one is not wrapped again,
    so the unmarked output always equals *text*.
    """
    if not text or not text.strip() or not highlights:
        return text

    text_length = len(text)
    parts: list[str] = []
    cursor = 0

    for span in sorted(highlights, key=lambda item: item.start_index):
        start = max(span.start_index, cursor)
        end = min(span.start_index + span.length, text_length)
        if end <= start:
            continue

        if start > cursor:
            parts.append(text[cursor:start])
        parts.append(open_tag)
        parts.append(text[start:end])
        parts.append(close_tag)
        cursor = end

    if cursor < text_length:
        parts.append(text[cursor:])

    return "".join(parts)


def render_result(
    result: "SearchResult",
    *,
    open_tag: str = DEFAULT_OPEN_TAG,
    close_tag: str = DEFAULT_CLOSE_TAG,
) -> str:
    """Render a search result's verse text with its highlights applied."""
    return render_highlights(result.verse.text, result.highlights, open_tag=open_tag, close_tag=close_tag)
