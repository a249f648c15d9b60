import asyncio
import json

import aiofiles.os
import pytest

from quizzy.database import CorruptStoreError, FlatStore, StoreError, StoreUnavailableError
from quizzy.defaults import COLLECTIONS, DEFAULT_SETTINGS, SCHEMA_VERSION
from tests.helpers import run


def test_missing_file_is_initialized_and_persisted(store):
    document = run(store.load())

    assert store.path.exists()
    on_disk = json.loads(store.path.read_text(encoding="utf-8"))
    assert on_disk == document

    assert [q["id"] for q in document["questions"]] == ["q1"]
    assert document["quizzes"][0]["questions"] == ["q1"]
    assert document["results"] == []
    assert document["schemaVersion"] == SCHEMA_VERSION
    assert document["settings"]["quizTimeLimit"] == DEFAULT_SETTINGS["quizTimeLimit"]
    assert document["settings"]["lastUpdated"] is not None


def test_save_load_round_trip_is_idempotent(store):
    document = run(store.load())
    run(store.save(document))
    assert run(store.load()) == document


def test_missing_keys_are_defaulted(store):
    store.path.write_text(json.dumps({"questions": [{"id": "x"}], "settings": {"passingScore": 50}}))

    document = run(store.load())

    for key, kind in COLLECTIONS.items():
        assert isinstance(document[key], kind)
    assert document["questions"] == [{"id": "x"}]
    assert document["settings"]["passingScore"] == 50
    assert document["settings"]["feedbackMode"] == DEFAULT_SETTINGS["feedbackMode"]
    assert document["schemaVersion"] == SCHEMA_VERSION


def test_malformed_json_raises_instead_of_resetting(store):
    store.path.write_text("{not json")

    with pytest.raises(CorruptStoreError):
        run(store.load())

    assert store.path.read_text() == "{not json"


@pytest.mark.parametrize("content", ["[]", '"text"', '{"results": {}}', '{"settings": []}'])
def test_wrong_shapes_are_corrupt(store, content):
    store.path.write_text(content)
    with pytest.raises(CorruptStoreError):
        run(store.load())


def test_save_failure_propagates(tmp_path):
    store = FlatStore(tmp_path / "missing-dir" / "db.json", timeout=2.0)
    with pytest.raises(StoreError):
        run(store.save({"questions": []}))


def test_transaction_discards_changes_on_error(store):
    async def scenario():
        await store.load()
        with pytest.raises(RuntimeError):
            async with store.transaction() as document:
                document["results"].append({"id": "lost"})
                raise RuntimeError("boom")
        return await store.load()

    assert run(scenario())["results"] == []


def test_concurrent_transactions_do_not_lose_updates(store):
    async def append(i):
        async with store.transaction() as document:
            document["results"].append({"id": i})

    async def scenario():
        await store.load()
        await asyncio.gather(*(append(i) for i in range(25)))
        return await store.load()

    document = run(scenario())

    assert sorted(r["id"] for r in document["results"]) == list(range(25))


def test_lock_wait_is_bounded(tmp_path):
    store = FlatStore(tmp_path / "db.json", timeout=0.05)

    async def scenario():
        document = await store.load()
        await store._lock.acquire()
        try:
            with pytest.raises(StoreUnavailableError):
                await store.save(document)
        finally:
            store._lock.release()

    run(scenario())


def test_no_temp_files_left_behind(store):
    run(store.load())
    run(store.save(run(store.load())))
    assert [p.name for p in store.path.parent.iterdir()] == ["db.json"]


def test_abandoned_lock_acquire_releases_if_it_won(store):
    async def scenario():
        acquire = asyncio.ensure_future(store._lock.acquire())
        await asyncio.sleep(0)
        assert store._lock.locked()

        store._abandon(acquire)
        await asyncio.sleep(0)

        assert not store._lock.locked()
        await store.save(await store.load())

    run(scenario())


def test_replace_is_not_cut_short_by_the_timeout(tmp_path, monkeypatch):
    store = FlatStore(tmp_path / "db.json", timeout=0.05)
    real_replace = aiofiles.os.replace

    async def slow_replace(src, dst):
        await asyncio.sleep(0.2)
        await real_replace(src, dst)

    monkeypatch.setattr(aiofiles.os, "replace", slow_replace)

    async def scenario():
        async with store.transaction() as document:
            document["results"].append({"id": "r1"})
        return await store.load()

    document = run(scenario())

    assert [r["id"] for r in document["results"]] == ["r1"]
    assert [p.name for p in tmp_path.iterdir()] == ["db.json"]
