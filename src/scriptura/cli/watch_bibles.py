"""CLI entrypoint that keeps a corpus cache warm while documents change."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

from scriptura.config import ScripturaSettings
from scriptura.corpus.cache import CorpusCache
from scriptura.corpus.store import FileSystemDocumentStore
from scriptura.corpus.watcher import CorpusFolderWatcher
from scriptura.errors import ScripturaError


load_dotenv()

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = ScripturaSettings.from_env()
    parser = argparse.ArgumentParser(description="Watch a corpus directory and reload Bibles on change")
    parser.add_argument("--bibles-dir", default=str(settings.bibles_dir), help="Directory holding corpus documents")
    parser.add_argument("--debounce", type=float, default=1.0, help="Debounce delay in seconds")
    return parser.parse_args(argv)


async def _run_watcher(args: argparse.Namespace) -> int:
    bibles_dir = Path(args.bibles_dir)
    if not bibles_dir.exists() or not bibles_dir.is_dir():
        LOGGER.error("bibles-dir must exist and be a directory: %s", bibles_dir)
        return 2

    cache = CorpusCache(FileSystemDocumentStore(bibles_dir))
    try:
        corpora = await cache.get_all_corpora()
    except ScripturaError as exc:
        LOGGER.error("Initial corpus load failed: %s", exc)
    else:
        LOGGER.info("Loaded %d bibles from %s", len(corpora), bibles_dir)

    watcher = CorpusFolderWatcher(bibles_dir, cache, debounce_seconds=float(args.debounce))
    await watcher.start()
    LOGGER.info("Watching %s (debounce %.1fs)", bibles_dir, float(args.debounce))

    try:
        while True:
            await asyncio.sleep(1.0)
    finally:
        watcher.stop()
        LOGGER.info("Watcher stopped cleanly")


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = _parse_args(argv)
    try:
        return asyncio.run(_run_watcher(args))
    except KeyboardInterrupt:
        LOGGER.info("Shutdown requested")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
