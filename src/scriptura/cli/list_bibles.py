"""CLI entrypoint listing the corpora found in a corpus directory."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from dotenv import load_dotenv

from scriptura.config import ScripturaSettings
from scriptura.corpus.cache import CorpusCache
from scriptura.corpus.models import Bible
from scriptura.corpus.store import FileSystemDocumentStore
from scriptura.errors import ScripturaError


LOGGER = logging.getLogger(__name__)


def _describe(bible: Bible) -> dict[str, object]:
    return {
        "id": bible.id,
        "name": bible.name,
        "language": bible.language,
        "version": bible.version,
        "copyright": bible.copyright,
        "is_right_to_left": bible.is_right_to_left,
        "books": [
            {"id": book.id, "name": book.name, "abbreviation": book.abbreviation, "chapters": len(book.chapters)}
            for book in bible.books
        ],
        "verse_count": bible.verse_count(),
    }


async def _list(bibles_dir: str) -> list[Bible]:
    cache = CorpusCache(FileSystemDocumentStore(bibles_dir))
    return await cache.get_all_corpora()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(message)s")
    try:
        settings = ScripturaSettings.from_env()
    except ValueError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 2

    parser = argparse.ArgumentParser(description="List Bibles available in a corpus directory")
    parser.add_argument("--bibles-dir", default=str(settings.bibles_dir), help="Directory holding corpus documents")
    parser.add_argument("--language", default=None, help="Only list Bibles in this language")
    args = parser.parse_args(argv)

    try:
        bibles = asyncio.run(_list(args.bibles_dir))
    except ScripturaError as exc:
        print(json.dumps({"error": {"kind": exc.kind.value, "message": str(exc)}}, ensure_ascii=False, indent=2))
        return 2

    if args.language:
        bibles = [bible for bible in bibles if bible.language.casefold() == args.language.casefold()]

    payload = {
        "bibles_dir": args.bibles_dir,
        "default_language": settings.default_language,
        "bibles": [_describe(bible) for bible in bibles],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
