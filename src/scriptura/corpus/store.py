"""Document store contract and its filesystem implementation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable


DEFAULT_DOCUMENT_PATTERN = "*.json"

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """Raw access to corpus documents; deserialization happens elsewhere."""

    def list_documents(self) -> list[str]:
        """Return the names of every corpus document, in load order."""

    def read_document(self, name: str) -> bytes:
        """Return the raw payload of one listed document."""


class FileSystemDocumentStore:
    """Serve corpus documents from a single directory."""

    def __init__(self, root: str | Path, *, pattern: str = DEFAULT_DOCUMENT_PATTERN) -> None:
        self._root = Path(root)
        self._pattern = pattern

    @property
    def root(self) -> Path:
        return self._root

    def list_documents(self) -> list[str]:
        if not self._root.is_dir():
            logger.warning("Corpus directory does not exist: %s", self._root)
            return []
        return sorted(path.name for path in self._root.glob(self._pattern) if path.is_file())

    def read_document(self, name: str) -> bytes:
        path = self._root / name
        if path.parent != self._root:
            raise ValueError(f"Document name must not contain path separators: {name}")
        return path.read_bytes()
