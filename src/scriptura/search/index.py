"""Normalized verse text kept per corpus for whole-text pre-filtering."""

from __future__ import annotations

from dataclasses import dataclass

from scriptura.corpus.models import Bible
from scriptura.search.normalize import normalize_text


@dataclass(frozen=True, slots=True)
class VerseTextIndex:
    bible: Bible
    normalized: dict[str, str]

    def may_contain(self, verse_id: str, normalized_query: str) -> bool:
        text = self.normalized.get(verse_id)
        if text is None:
            return True
        return normalized_query in text


def build_verse_index(bible: Bible) -> VerseTextIndex:
    normalized: dict[str, str] = {}
    for verse in bible.iter_verses():
        # Verses sharing an id share one entry holding every copy's text.
        if verse.id in normalized:
            normalized[verse.id] += "\n" + normalize_text(verse.text)
            continue
        normalized[verse.id] = normalize_text(verse.text)
    return VerseTextIndex(bible=bible, normalized=normalized)


class VerseIndexCache:
    """Memoize one index per corpus object, rebuilt when the corpus changes."""

    def __init__(self) -> None:
        self._indexes: dict[str, VerseTextIndex] = {}

    def get(self, bible: Bible) -> VerseTextIndex:
        index = self._indexes.get(bible.id)
        if index is None or index.bible is not bible:
            index = build_verse_index(bible)
            self._indexes[bible.id] = index
        return index
