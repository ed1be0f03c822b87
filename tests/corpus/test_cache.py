from __future__ import annotations

import asyncio
import json
from pathlib import Path
import threading

import pytest

from scriptura.corpus.cache import CacheState, CorpusCache
from scriptura.corpus.parser import parse_bible
from scriptura.corpus.store import FileSystemDocumentStore
from scriptura.errors import ErrorKind, ScripturaError


def _bible(bible_id: str, *, name: str | None = None, text: str = "In the beginning.") -> dict:
    return {
        "id": bible_id,
        "name": name or bible_id.upper(),
        "language": "en",
        "version": bible_id.upper(),
        "copyright": "Public domain",
        "is_right_to_left": False,
        "books": [
            {
                "id": "GEN",
                "name": "Genesis",
                "abbreviation": "Gen",
                "number": 1,
                "chapters": [
                    {
                        "id": "1",
                        "number": 1,
                        "verses": [
                            {"id": "GEN.1.1", "number": 1, "text": text},
                            {"id": "GEN.1.2", "number": 2, "text": "And the earth was without form."},
                            {"id": "GEN.1.3", "number": 3, "text": "Let there be light."},
                        ],
                    }
                ],
            }
        ],
    }


class _CountingStore:
    """In-memory store recording every listing and read."""

    def __init__(self, documents: dict[str, bytes]) -> None:
        self.documents = dict(documents)
        self.list_calls = 0
        self.reads: list[str] = []
        self.gate: threading.Event | None = None

    def list_documents(self) -> list[str]:
        self.list_calls += 1
        if self.gate is not None:
            self.gate.wait(timeout=5.0)
        return list(self.documents)

    def read_document(self, name: str) -> bytes:
        self.reads.append(name)
        return self.documents[name]


def _encode(payload: dict) -> bytes:
    return json.dumps(payload).encode("utf-8")


def test_consecutive_lookups_trigger_one_bulk_load() -> None:
    store = _CountingStore({"kjv.json": _encode(_bible("kjv")), "web.json": _encode(_bible("web"))})
    cache = CorpusCache(store)

    async def _scenario() -> None:
        first = await cache.get_corpus("kjv")
        second = await cache.get_corpus("kjv")
        assert first is second
        assert {bible.id for bible in await cache.get_all_corpora()} == {"kjv", "web"}

    assert cache.state is CacheState.EMPTY
    asyncio.run(_scenario())

    assert store.list_calls == 1
    assert store.reads == ["kjv.json", "web.json"]
    assert cache.load_count == 1
    assert cache.state is CacheState.POPULATED


def test_documents_are_keyed_by_declared_id_not_file_name() -> None:
    store = _CountingStore({"first-file.json": _encode(_bible("kjv"))})
    cache = CorpusCache(store)

    bible = asyncio.run(cache.get_corpus("kjv"))

    assert bible.id == "kjv"
    with pytest.raises(ScripturaError) as excinfo:
        asyncio.run(cache.get_corpus("first-file"))
    assert excinfo.value.kind is ErrorKind.NOT_FOUND


def test_colliding_ids_keep_the_last_loaded_document() -> None:
    store = _CountingStore(
        {
            "a.json": _encode(_bible("kjv", name="First")),
            "b.json": _encode(_bible("kjv", name="Second")),
        }
    )
    cache = CorpusCache(store)

    bible = asyncio.run(cache.get_corpus("kjv"))

    assert bible.name == "Second"
    assert len(asyncio.run(cache.get_all_corpora())) == 1


def test_unknown_id_is_not_found_and_does_not_reload() -> None:
    store = _CountingStore({"kjv.json": _encode(_bible("kjv"))})
    cache = CorpusCache(store)

    async def _scenario() -> None:
        for _ in range(3):
            with pytest.raises(ScripturaError) as excinfo:
                await cache.get_corpus("esv")
            assert excinfo.value.kind is ErrorKind.NOT_FOUND

    asyncio.run(_scenario())

    assert store.list_calls == 1


def test_blank_id_is_invalid_argument() -> None:
    store = _CountingStore({})
    cache = CorpusCache(store)

    with pytest.raises(ScripturaError) as excinfo:
        asyncio.run(cache.get_corpus(" "))

    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT
    assert store.list_calls == 0


def test_malformed_document_clears_cache_and_retry_succeeds_after_fix() -> None:
    store = _CountingStore({"a.json": _encode(_bible("kjv")), "b.json": b'{"id": "broken"'})
    cache = CorpusCache(store)

    with pytest.raises(ScripturaError) as excinfo:
        asyncio.run(cache.get_corpus("kjv"))

    assert excinfo.value.kind is ErrorKind.LOAD_FAILURE
    assert excinfo.value.subject == "b.json"
    assert isinstance(excinfo.value.__cause__, ValueError)
    assert cache.state is CacheState.EMPTY

    store.documents["b.json"] = _encode(_bible("web"))
    corpora = asyncio.run(cache.get_all_corpora())

    assert sorted(bible.id for bible in corpora) == ["kjv", "web"]
    assert cache.load_count == 2
    assert cache.state is CacheState.POPULATED


def test_io_error_during_load_is_a_load_failure() -> None:
    class _BrokenStore(_CountingStore):
        def read_document(self, name: str) -> bytes:
            raise PermissionError(f"denied: {name}")

    cache = CorpusCache(_BrokenStore({"kjv.json": b""}))

    with pytest.raises(ScripturaError) as excinfo:
        asyncio.run(cache.get_all_corpora())

    assert excinfo.value.kind is ErrorKind.LOAD_FAILURE
    assert cache.state is CacheState.EMPTY


def test_concurrent_callers_share_one_load() -> None:
    store = _CountingStore({"kjv.json": _encode(_bible("kjv"))})
    store.gate = threading.Event()
    cache = CorpusCache(store)

    async def _scenario() -> None:
        waiters = [asyncio.create_task(cache.get_corpus("kjv")) for _ in range(8)]
        await asyncio.sleep(0.05)
        assert cache.state is CacheState.LOADING
        store.gate.set()
        bibles = await asyncio.gather(*waiters)
        assert all(bible is bibles[0] for bible in bibles)

    asyncio.run(_scenario())

    assert store.list_calls == 1
    assert cache.load_count == 1


def test_concurrent_callers_observe_the_same_failure() -> None:
    store = _CountingStore({"bad.json": b"not json"})
    store.gate = threading.Event()
    cache = CorpusCache(store)

    async def _scenario() -> list[BaseException | object]:
        waiters = [asyncio.create_task(cache.get_all_corpora()) for _ in range(4)]
        await asyncio.sleep(0.05)
        store.gate.set()
        return await asyncio.gather(*waiters, return_exceptions=True)

    outcomes = asyncio.run(_scenario())

    assert all(isinstance(outcome, ScripturaError) for outcome in outcomes)
    assert {outcome.kind for outcome in outcomes} == {ErrorKind.LOAD_FAILURE}  # type: ignore[union-attr]
    assert store.list_calls == 1


def test_abandoning_a_load_does_not_cancel_it() -> None:
    store = _CountingStore({"kjv.json": _encode(_bible("kjv"))})
    store.gate = threading.Event()
    cache = CorpusCache(store)

    async def _scenario() -> None:
        abandoned = asyncio.create_task(cache.get_corpus("kjv"))
        await asyncio.sleep(0.05)
        abandoned.cancel()
        with pytest.raises(asyncio.CancelledError):
            await abandoned

        store.gate.set()
        bible = await cache.get_corpus("kjv")
        assert bible.id == "kjv"

    asyncio.run(_scenario())

    assert store.list_calls == 1
    assert cache.state is CacheState.POPULATED


def test_invalidate_forces_a_fresh_bulk_load() -> None:
    store = _CountingStore({"kjv.json": _encode(_bible("kjv", text="Old text."))})
    cache = CorpusCache(store)

    async def _scenario() -> None:
        before = await cache.get_corpus("kjv")
        store.documents["kjv.json"] = _encode(_bible("kjv", text="New text."))
        cache.invalidate()
        assert cache.state is CacheState.EMPTY
        after = await cache.get_corpus("kjv")
        assert next(before.iter_verses()).text == "Old text."
        assert next(after.iter_verses()).text == "New text."

    asyncio.run(_scenario())

    assert store.list_calls == 2
    assert cache.load_count == 2


def test_invalidate_during_load_discards_the_stale_result() -> None:
    store = _CountingStore({"kjv.json": _encode(_bible("kjv", text="Old text."))})
    store.gate = threading.Event()
    cache = CorpusCache(store)

    async def _scenario() -> None:
        waiter = asyncio.create_task(cache.get_corpus("kjv"))
        await asyncio.sleep(0.05)
        store.documents["kjv.json"] = _encode(_bible("kjv", text="New text."))
        cache.invalidate()
        store.gate.set()
        bible = await waiter
        assert next(bible.iter_verses()).text == "New text."

    asyncio.run(_scenario())

    assert cache.load_count == 2


class _ListingSequenceStore(_CountingStore):
    """Store whose successive listings return different document names."""

    def __init__(self, documents: dict[str, bytes], listings: list[list[str]]) -> None:
        super().__init__(documents)
        self.listings = list(listings)

    def list_documents(self) -> list[str]:
        super().list_documents()
        return self.listings.pop(0) if len(self.listings) > 1 else list(self.listings[0])


def test_invalidate_during_failing_load_waits_for_the_fresh_load() -> None:
    store = _ListingSequenceStore(
        {"bad.json": b"{not json", "kjv.json": _encode(_bible("kjv"))},
        [["bad.json"], ["kjv.json"]],
    )
    store.gate = threading.Event()
    cache = CorpusCache(store)

    async def _scenario() -> None:
        waiter = asyncio.create_task(cache.get_corpus("kjv"))
        await asyncio.sleep(0.05)
        cache.invalidate()
        store.gate.set()
        bible = await waiter
        assert bible.id == "kjv"

    asyncio.run(_scenario())

    assert cache.load_count == 2
    assert cache.state is CacheState.POPULATED
    assert store.reads == ["bad.json", "kjv.json"]


def test_reload_rereads_documents() -> None:
    store = _CountingStore({"kjv.json": _encode(_bible("kjv"))})
    cache = CorpusCache(store)

    async def _scenario() -> None:
        await cache.ensure_loaded()
        store.documents["web.json"] = _encode(_bible("web"))
        await cache.reload()
        assert {bible.id for bible in await cache.get_all_corpora()} == {"kjv", "web"}

    asyncio.run(_scenario())

    assert cache.load_count == 2


def test_book_chapter_and_verse_lookups() -> None:
    cache = CorpusCache(_CountingStore({"kjv.json": _encode(_bible("kjv"))}))

    async def _scenario() -> None:
        book = await cache.get_book("kjv", "GEN")
        chapter = await cache.get_chapter("kjv", "GEN", "1")
        verses = await cache.get_verses("kjv", "GEN", "1", ["GEN.1.3", "GEN.1.1", "GEN.9.9"])

        assert book.name == "Genesis"
        assert chapter.number == 1
        assert [verse.id for verse in verses] == ["GEN.1.1", "GEN.1.3"]

        for lookup in (cache.get_book("kjv", "EXO"), cache.get_chapter("kjv", "GEN", "50")):
            with pytest.raises(ScripturaError) as excinfo:
                await lookup
            assert excinfo.value.kind is ErrorKind.NOT_FOUND

    asyncio.run(_scenario())


def test_loads_from_filesystem_store(tmp_path: Path) -> None:
    (tmp_path / "kjv.json").write_text(json.dumps(_bible("kjv")), encoding="utf-8")
    (tmp_path / "web.json").write_text(json.dumps(_bible("web")), encoding="utf-8")
    cache = CorpusCache(FileSystemDocumentStore(tmp_path), parser=parse_bible)

    corpora = asyncio.run(cache.get_all_corpora())

    assert [bible.id for bible in corpora] == ["kjv", "web"]
