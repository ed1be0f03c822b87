from __future__ import annotations

import unicodedata


_NON_SPACING_MARK = "Mn"


def _strip_marks(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(char for char in decomposed if unicodedata.category(char) != _NON_SPACING_MARK)


def normalize_text(text: str | None, *, preserve_case: bool = False) -> str:
    """Return the comparison form of *text*.

    Parameters
    ----------
    text:
        Raw text. ``None`` is treated as an empty string.
    preserve_case:
        When true the trimmed input is returned verbatim (display use).
        Otherwise the text is decomposed, stripped of non-spacing marks and
        upper-cased so that accent- and case-insensitive comparisons are
        consistent between indexing and querying.
    """
    if not text:
        return ""

    trimmed = text.strip()
    if not trimmed:
        return ""

    if preserve_case:
        return trimmed

    # Dropping a mark can expose whitespace at either end.
    return _strip_marks(trimmed).strip().upper()


def normalize_query(query: str | None, *, case_sensitive: bool = False) -> str:
    """Normalize a search query using the same contract as verse text."""
    return normalize_text(query, preserve_case=case_sensitive)
