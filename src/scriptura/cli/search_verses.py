"""CLI entrypoint for verse text search."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from dotenv import load_dotenv

from scriptura.config import ScripturaSettings
from scriptura.corpus.cache import CorpusCache
from scriptura.corpus.store import FileSystemDocumentStore
from scriptura.search.engine import SearchEngine, SearchOptions
from scriptura.search.service import search_verses


LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None, settings: ScripturaSettings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search verse text in a Bible corpus")
    parser.add_argument("--bibles-dir", default=str(settings.bibles_dir), help="Directory holding corpus documents")
    parser.add_argument("--bible", required=True, help="Id of the Bible to search")
    parser.add_argument("--query", required=True, help="Literal text to search for")
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.max_results,
        help="Maximum number of results (0 for unbounded)",
    )
    parser.add_argument(
        "--case-sensitive",
        action=argparse.BooleanOptionalAction,
        default=settings.case_sensitive,
        help="Match letter case exactly",
    )
    parser.add_argument("--book", default=None, help="Only search verses of this book id")
    parser.add_argument("--chapter", default=None, help="Only search verses of this chapter id")
    parser.add_argument("--highlight", action="store_true", help="Include <mark>-wrapped verse text")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, settings: ScripturaSettings) -> tuple[int, dict[str, object]]:
    cache = CorpusCache(FileSystemDocumentStore(args.bibles_dir))
    engine = SearchEngine(cache)
    options = SearchOptions.from_settings(
        settings,
        case_sensitive=args.case_sensitive,
        highlight_results=args.highlight,
        max_results=args.limit,
        book_filter=args.book,
        chapter_filter=args.chapter,
    )

    response = await search_verses(
        engine,
        args.bible,
        args.query,
        options,
        timeout_seconds=settings.search_timeout_seconds,
    )

    payload: dict[str, object] = {
        "bible": args.bible,
        "query": args.query,
        "case_sensitive": options.case_sensitive,
        "limit": options.max_results,
        "book": options.book_filter,
        "chapter": options.chapter_filter,
    }
    if not response.ok:
        payload["error"] = {
            "kind": response.error_kind.value if response.error_kind is not None else "timeout",
            "message": response.error,
        }
        return 2, payload

    payload["results"] = [
        result.to_dict(include_highlighted_text=options.highlight_results) for result in response.results
    ]
    return 0, payload


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(message)s")
    try:
        settings = ScripturaSettings.from_env()
    except ValueError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 2

    args = _parse_args(argv, settings)
    exit_code, payload = asyncio.run(_run(args, settings))
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
