"""Debounced corpus folder watcher that keeps the corpus cache fresh."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
import threading

from watchdog.events import FileSystemEvent, PatternMatchingEventHandler
from watchdog.observers import Observer

from scriptura.corpus.cache import CorpusCache
from scriptura.corpus.store import DEFAULT_DOCUMENT_PATTERN
from scriptura.errors import ScripturaError


LOGGER = logging.getLogger(__name__)


class DebouncedCorpusHandler(PatternMatchingEventHandler):
    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        queue: asyncio.Queue[Path],
        debounce_seconds: float = 1.0,
        pattern: str = DEFAULT_DOCUMENT_PATTERN,
    ) -> None:
        super().__init__(
            patterns=[pattern],
            ignore_patterns=["*.tmp", "*.part", ".*", "*~"],
            ignore_directories=True,
            case_sensitive=False,
        )
        self._loop = loop
        self._queue = queue
        self._debounce_seconds = debounce_seconds
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def _emit_path(self, raw_path: str) -> None:
        with self._lock:
            self._timers.pop(raw_path, None)
        self._loop.call_soon_threadsafe(self._queue.put_nowait, Path(raw_path))

    def _schedule(self, raw_path: str) -> None:
        with self._lock:
            existing = self._timers.pop(raw_path, None)
            if existing is not None:
                existing.cancel()

            timer = threading.Timer(self._debounce_seconds, self._emit_path, args=(raw_path,))
            timer.daemon = True
            self._timers[raw_path] = timer
            timer.start()

    def on_created(self, event: FileSystemEvent) -> None:
        self._schedule(str(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        self._schedule(str(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._schedule(str(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        self._schedule(str(event.dest_path or event.src_path))

    def close(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()


class CorpusFolderWatcher:
    """Reload the corpus cache whenever a document in the folder changes."""

    def __init__(
        self,
        watch_dir: str | Path,
        cache: CorpusCache,
        debounce_seconds: float = 1.0,
    ) -> None:
        self._watch_dir = Path(watch_dir)
        self._cache = cache
        self._debounce_seconds = debounce_seconds
        self._queue: asyncio.Queue[Path] | None = None
        self._handler: DebouncedCorpusHandler | None = None
        self._observer: Observer | None = None
        self._consumer_task: asyncio.Task[None] | None = None

    async def refresh(self, path: Path) -> None:
        LOGGER.info("Corpus document changed: %s", path)
        try:
            await self._cache.reload()
        except ScripturaError as exc:
            LOGGER.error("Corpus reload failed after change to %s: %s", path.name, exc)
            return

        corpora = await self._cache.get_all_corpora()
        LOGGER.info("Corpus cache reloaded with %d bibles", len(corpora))

    async def _consume(self) -> None:
        assert self._queue is not None
        while True:
            path = await self._queue.get()
            try:
                await self.refresh(path)
            except Exception:  # pragma: no cover
                LOGGER.exception("Corpus refresh failed for %s", path)
            finally:
                self._queue.task_done()

    async def start(self) -> None:
        if self._observer is not None:
            return
        if not self._watch_dir.exists() or not self._watch_dir.is_dir():
            raise ValueError(f"Watch directory does not exist or is not a directory: {self._watch_dir}")

        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._handler = DebouncedCorpusHandler(
            loop=loop,
            queue=self._queue,
            debounce_seconds=self._debounce_seconds,
        )

        observer = Observer()
        observer.schedule(self._handler, str(self._watch_dir), recursive=False)
        observer.start()
        self._observer = observer
        self._consumer_task = asyncio.create_task(self._consume())

    def stop(self) -> None:
        observer = self._observer
        if observer is not None:
            observer.stop()
            observer.join(timeout=5.0)
            self._observer = None

        if self._handler is not None:
            self._handler.close()
            self._handler = None

        if self._consumer_task is not None:
            self._consumer_task.cancel()
            self._consumer_task = None
