"""Literal substring match enumeration for verse text."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TextHighlight:
    start_index: int
    length: int
    matched_text: str

    @property
    def end_index(self) -> int:
        return self.start_index + self.length

    def to_dict(self) -> dict[str, str | int]:
        return {
            "start_index": self.start_index,
            "length": self.length,
            "matched_text": self.matched_text,
        }


def _fold_char(char: str) -> str:
    upper = char.upper()
    if len(upper) == 1:
        return upper
    # Multi-character expansions (e.g. "ß" -> "SS") would shift offsets; the
    # title-case form is the single-character mapping where one exists.
    title = char.title()
    return title if len(title) == 1 else char


def fold_case(text: str) -> str:
    """Upper-case *text* one character at a time, keeping its length."""
    if text.isascii():
        return text.upper()
    return "".join(_fold_char(char) for char in text)


def find_matches(
    text: str | None,
    search_text: str | None,
    *,
    case_sensitive: bool = False,
) -> list[TextHighlight]:
    """Return non-overlapping occurrences of *search_text* in *text*.

    Comparison is ordinal; with ``case_sensitive=False`` it ignores case but
    does not strip diacritics. Scanning resumes after the end of each match,
    so an occurrence starting inside a previous match is not reported.
    """
    if not text or not search_text:
        return []

    if case_sensitive:
        haystack, needle = text, search_text
    else:
        haystack, needle = fold_case(text), fold_case(search_text)

    length = len(needle)
    matches: list[TextHighlight] = []
    index = haystack.find(needle)
    while index != -1:
        matches.append(
            TextHighlight(
                start_index=index,
                length=length,
                matched_text=text[index : index + length],
            )
        )
        index = haystack.find(needle, index + length)

    return matches
