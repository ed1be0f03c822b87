"""Bible document model, storage access and the corpus cache."""

from .cache import CacheState, CorpusCache
from .models import Bible, Book, Chapter, Verse, split_verse_id
from .parser import CorpusParseError, bible_from_dict, bible_to_dict, parse_bible
from .store import DocumentStore, FileSystemDocumentStore

__all__ = [
    "Bible",
    "Book",
    "CacheState",
    "Chapter",
    "CorpusCache",
    "CorpusParseError",
    "DocumentStore",
    "FileSystemDocumentStore",
    "Verse",
    "bible_from_dict",
    "bible_to_dict",
    "parse_bible",
    "split_verse_id",
]
