"""Tagged error type shared by the corpus cache and the search engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    LOAD_FAILURE = "load_failure"


@dataclass(slots=True, eq=False)
class ScripturaError(Exception):
    """Domain error carrying its kind instead of a per-failure subclass."""

    kind: ErrorKind
    message: str
    subject: str | None = None

    def __str__(self) -> str:
        if self.subject is None:
            return self.message
        return f"{self.message} (subject={self.subject})"


def invalid_argument(message: str, *, subject: str | None = None) -> ScripturaError:
    return ScripturaError(ErrorKind.INVALID_ARGUMENT, message, subject)


def not_found(message: str, *, subject: str | None = None) -> ScripturaError:
    return ScripturaError(ErrorKind.NOT_FOUND, message, subject)


def load_failure(message: str, *, subject: str | None = None) -> ScripturaError:
    return ScripturaError(ErrorKind.LOAD_FAILURE, message, subject)
