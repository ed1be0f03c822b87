"""Runtime configuration for corpus loading and search defaults."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping


DEFAULT_BIBLES_DIR = "bibles"
DEFAULT_LANGUAGE = "en"
DEFAULT_MAX_RESULTS = 100
DEFAULT_SEARCH_TIMEOUT_SECONDS = 25.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_int(*, name: str, raw_value: str, minimum: int = 0) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_positive_float(*, name: str, raw_value: str, minimum: float = 0.001) -> float:
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_bool(*, name: str, raw_value: str) -> bool:
    lowered = raw_value.casefold()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of: {', '.join(sorted(_TRUE_VALUES | _FALSE_VALUES))}")


@dataclass(frozen=True, slots=True)
class ScripturaSettings:
    """Validated settings; consumed only as defaults for corpus access and search."""

    bibles_dir: Path
    default_language: str = DEFAULT_LANGUAGE
    max_results: int = DEFAULT_MAX_RESULTS
    case_sensitive: bool = False
    search_timeout_seconds: float = DEFAULT_SEARCH_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ScripturaSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        bibles_dir_raw = source.get("SCRIPTURA_BIBLES_DIR", DEFAULT_BIBLES_DIR).strip()
        if not bibles_dir_raw:
            raise ValueError("SCRIPTURA_BIBLES_DIR cannot be empty")

        language = source.get("SCRIPTURA_DEFAULT_LANGUAGE", DEFAULT_LANGUAGE).strip()
        if not language:
            raise ValueError("SCRIPTURA_DEFAULT_LANGUAGE cannot be empty")

        max_results_raw = source.get("SCRIPTURA_MAX_RESULTS", str(DEFAULT_MAX_RESULTS)).strip()
        case_sensitive_raw = source.get("SCRIPTURA_CASE_SENSITIVE", "false").strip()
        timeout_raw = source.get(
            "SCRIPTURA_SEARCH_TIMEOUT_SECONDS",
            str(DEFAULT_SEARCH_TIMEOUT_SECONDS),
        ).strip()

        if not max_results_raw:
            raise ValueError("SCRIPTURA_MAX_RESULTS cannot be empty")
        if not case_sensitive_raw:
            raise ValueError("SCRIPTURA_CASE_SENSITIVE cannot be empty")
        if not timeout_raw:
            raise ValueError("SCRIPTURA_SEARCH_TIMEOUT_SECONDS cannot be empty")

        return cls(
            bibles_dir=Path(bibles_dir_raw),
            default_language=language,
            max_results=_parse_int(name="SCRIPTURA_MAX_RESULTS", raw_value=max_results_raw, minimum=0),
            case_sensitive=_parse_bool(name="SCRIPTURA_CASE_SENSITIVE", raw_value=case_sensitive_raw),
            search_timeout_seconds=_parse_positive_float(
                name="SCRIPTURA_SEARCH_TIMEOUT_SECONDS",
                raw_value=timeout_raw,
                minimum=0.1,
            ),
        )
