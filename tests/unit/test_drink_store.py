from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional
from uuid import uuid4

import pytest

from src.app.domain.errors import PersistenceReadError, PersistenceWriteError
from src.app.domain.models import ChangeKind, DrinkRecord, Found, NotFound, Rating, StoreChange
from src.app.infra.storage.base import BlobStorage
from src.app.infra.storage.local_provider import LocalFileStorage
from src.app.services.drink_store import DrinkStore
from src.services.persist_models import decode_records, encode_records


class InMemoryBlobStorage(BlobStorage):
    def __init__(self, data: Optional[bytes] = None) -> None:
        self.data = data
        self.writes = 0
        self.fail_reads = False
        self.fail_writes = False

    @property
    def location(self) -> str:
        return "memory"

    def read_bytes(self) -> Optional[bytes]:
        if self.fail_reads:
            raise PersistenceReadError(self.location, "Simulated read failure")
        return self.data

    def write_bytes(self, data: bytes) -> None:
        if self.fail_writes:
            raise PersistenceWriteError(self.location, "Simulated write failure")
        self.writes += 1
        self.data = data


def _persisted(storage: InMemoryBlobStorage) -> list[DrinkRecord]:
    assert storage.data is not None
    return decode_records(storage.data)


class TestDrinkStoreLoad:
    def test_empty_when_nothing_persisted(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())

        assert store.all() == []
        assert len(store) == 0

    def test_loads_persisted_records(self) -> None:
        records = [DrinkRecord(name="Stout"), DrinkRecord(name="Porter")]
        store = DrinkStore(storage=InMemoryBlobStorage(encode_records(records)))

        assert store.all() == records

    def test_corrupt_data_yields_empty_store(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage(b"{corrupt"))

        assert store.all() == []

    def test_read_failure_yields_empty_store(self) -> None:
        storage = InMemoryBlobStorage(encode_records([DrinkRecord(name="Stout")]))
        storage.fail_reads = True

        store = DrinkStore(storage=storage)

        assert store.all() == []

    def test_autoload_disabled(self) -> None:
        storage = InMemoryBlobStorage(encode_records([DrinkRecord(name="Stout")]))

        store = DrinkStore(storage=storage, autoload=False)

        assert store.all() == []
        store.load()
        assert len(store) == 1

    def test_load_does_not_write(self) -> None:
        storage = InMemoryBlobStorage(encode_records([DrinkRecord(name="Stout")]))

        DrinkStore(storage=storage)

        assert storage.writes == 0


class TestDrinkStoreAdd:
    def test_add_inserts_at_front(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        first = DrinkRecord(name="First")
        second = DrinkRecord(name="Second")

        store.add(first)
        store.add(second)

        assert store.all()[0] == second
        assert store.all() == [second, first]

    def test_add_persists_full_list(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)
        record = DrinkRecord(name="Hazy IPA", rating=Rating.LIKE)

        store.add(record)

        assert storage.writes == 1
        assert _persisted(storage) == [record]

    def test_add_rejects_duplicate_id(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)
        record = DrinkRecord(name="Stout")
        store.add(record)
        changes: list[StoreChange] = []
        store.subscribe(changes.append)

        with pytest.raises(ValueError):
            store.add(record.with_changes(name="Porter"))

        assert store.all() == [record]
        assert storage.writes == 1
        assert changes == []


class TestDrinkStoreUpdate:
    def test_update_replaces_in_place(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)
        older = DrinkRecord(name="Older")
        newer = DrinkRecord(name="Newer")
        store.add(older)
        store.add(newer)

        edited = older.with_changes(rating=Rating.LIKE, notes="Better on draft")
        assert store.update(edited) is True

        assert store.all() == [newer, edited]
        assert _persisted(storage) == [newer, edited]

    def test_update_missing_is_noop(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)
        store.add(DrinkRecord(name="Stout"))
        writes_before = storage.writes

        assert store.update(DrinkRecord(name="Ghost")) is False

        assert storage.writes == writes_before
        assert [r.name for r in store.all()] == ["Stout"]


class TestDrinkStoreDelete:
    def test_delete_removes_record(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)
        keep = DrinkRecord(name="Keep")
        drop = DrinkRecord(name="Drop")
        store.add(keep)
        store.add(drop)

        assert store.delete(drop.id) is True

        assert all(r.id != drop.id for r in store.all())
        assert _persisted(storage) == [keep]

    def test_delete_missing_is_noop(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)
        store.add(DrinkRecord(name="Stout"))
        writes_before = storage.writes

        assert store.delete(uuid4()) is False
        assert storage.writes == writes_before

    def test_delete_many_single_save(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)
        records = [DrinkRecord(name=f"Beer {i}") for i in range(4)]
        for record in records:
            store.add(record)
        writes_before = storage.writes

        removed = store.delete_many([records[0].id, records[2].id, uuid4()])

        assert removed == 2
        assert storage.writes == writes_before + 1
        assert store.all() == [records[3], records[1]]

    def test_delete_preserves_order(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        a, b, c = DrinkRecord(name="A"), DrinkRecord(name="B"), DrinkRecord(name="C")
        for record in (a, b, c):
            store.add(record)

        store.delete(b.id)

        assert store.all() == [c, a]


class TestDrinkStoreQueries:
    def test_recent_returns_first_n(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        records = [DrinkRecord(name=f"Beer {i}") for i in range(5)]
        for record in records:
            store.add(record)

        assert store.recent(2) == [records[4], records[3]]
        assert store.recent() == [records[4], records[3], records[2]]
        assert store.recent(10) == list(reversed(records))
        assert store.recent(0) == []

    def test_all_returns_copy(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        store.add(DrinkRecord(name="Stout"))

        store.all().clear()

        assert len(store) == 1

    def test_get(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        record = DrinkRecord(name="Stout")
        store.add(record)

        assert store.get(record.id) == record
        assert store.get(uuid4()) is None

    def test_find_match(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        record = DrinkRecord(name="Sierra Nevada Pale Ale")
        store.add(record)

        assert store.find_match("sierra nevada pale ale") == Found(record)
        assert store.find_match("Corona Extra") == NotFound()


class TestDrinkStoreSaveFailures:
    def test_failed_save_keeps_memory_state(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)
        storage.fail_writes = True
        record = DrinkRecord(name="Unsaved")

        store.add(record)

        assert store.all() == [record]
        assert storage.data is None
        assert isinstance(store.last_save_error, PersistenceWriteError)

    def test_next_successful_save_catches_up(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)
        storage.fail_writes = True
        first = DrinkRecord(name="First")
        store.add(first)

        storage.fail_writes = False
        second = DrinkRecord(name="Second")
        store.add(second)

        assert store.last_save_error is None
        assert _persisted(storage) == [second, first]

    def test_save_returns_status(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)

        assert store.save() is True
        storage.fail_writes = True
        assert store.save() is False


class TestDrinkStoreNotifications:
    def test_listeners_receive_changes(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        changes: list[StoreChange] = []
        store.subscribe(changes.append)
        record = DrinkRecord(name="Stout")

        store.add(record)
        store.update(record.with_changes(rating=Rating.LIKE))
        store.delete(record.id)
        store.load()

        assert [c.kind for c in changes] == [
            ChangeKind.ADDED,
            ChangeKind.UPDATED,
            ChangeKind.DELETED,
            ChangeKind.LOADED,
        ]
        assert changes[0].record_ids == (record.id,)

    def test_noop_mutations_do_not_notify(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        changes: list[StoreChange] = []
        store.subscribe(changes.append)

        store.update(DrinkRecord(name="Ghost"))
        store.delete(uuid4())

        assert changes == []

    def test_unsubscribe(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        changes: list[StoreChange] = []
        unsubscribe = store.subscribe(changes.append)

        unsubscribe()
        store.add(DrinkRecord(name="Stout"))

        assert changes == []

    def test_failing_listener_does_not_break_mutation(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)

        def broken(change: StoreChange) -> None:
            raise RuntimeError("listener bug")

        store.subscribe(broken)
        store.add(DrinkRecord(name="Stout"))

        assert len(store) == 1
        assert storage.writes == 1


class TestDrinkStoreWithLocalFile:
    def test_round_trip_through_file(self, tmp_path: Path) -> None:
        path = tmp_path / "drinks.json"
        store = DrinkStore(storage=LocalFileStorage(path))
        records = [DrinkRecord(name="Stout", rating=Rating.LIKE), DrinkRecord(name="Lager", notes="Crisp")]
        for record in records:
            store.add(record)

        reloaded = DrinkStore(storage=LocalFileStorage(path))

        assert reloaded.all() == store.all()

    def test_corrupt_file_yields_empty_store(self, tmp_path: Path) -> None:
        path = tmp_path / "drinks.json"
        path.write_text("[{\"id\": ")

        assert DrinkStore(storage=LocalFileStorage(path)).all() == []


class TestDrinkStoreConcurrency:
    def test_concurrent_adds_are_all_persisted(self) -> None:
        storage = InMemoryBlobStorage()
        store = DrinkStore(storage=storage)

        def add_many(worker: int) -> None:
            for i in range(20):
                store.add(DrinkRecord(name=f"Worker {worker} beer {i}"))

        threads = [threading.Thread(target=add_many, args=(n,)) for n in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store) == 100
        assert _persisted(storage) == store.all()

    def test_subscribe_while_mutating(self) -> None:
        store = DrinkStore(storage=InMemoryBlobStorage())
        seen: list[StoreChange] = []
        lock = threading.Lock()

        def record_change(change: StoreChange) -> None:
            with lock:
                seen.append(change)

        def churn_listeners() -> None:
            for _ in range(50):
                unsubscribe = store.subscribe(lambda change: None)
                unsubscribe()

        def add_many() -> None:
            for i in range(50):
                store.add(DrinkRecord(name=f"Beer {i}"))

        store.subscribe(record_change)
        threads = [threading.Thread(target=churn_listeners) for _ in range(3)]
        threads.append(threading.Thread(target=add_many))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store) == 50
        assert len(seen) == 50
        assert all(change.kind is ChangeKind.ADDED for change in seen)
