# src/app/services/drink_store.py
"""
The user's drink history.
Holds the records in memory (most recent first) and rewrites the whole
serialized list after every change.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional
from uuid import UUID

from src.app.config import settings
from src.app.domain.errors import PersistenceReadError, PersistenceWriteError
from src.app.domain.models import ChangeKind, DrinkRecord, MatchResult, StoreChange
from src.app.infra.storage.base import BlobStorage
from src.app.infra.storage.local_provider import LocalFileStorage
from src.services.matcher import find_match
from src.services.persist_models import decode_records, encode_records

logger = logging.getLogger(__name__)

StoreListener = Callable[[StoreChange], None]


class DrinkStore:
    """
    Service for the drink log.

    Responsibilities:
    - Keep the in-memory list (single source of truth for the process)
    - Persist the full list after each add/update/delete
    - Notify listeners of changes
    """

    def __init__(
        self,
        storage: Optional[BlobStorage] = None,
        autoload: bool = True,
    ):
        self._storage = storage or LocalFileStorage(settings.DRINKS_FILE)
        self._records: list[DrinkRecord] = []
        self._listeners: list[StoreListener] = []
        self._lock = threading.RLock()
        self.last_save_error: Optional[PersistenceWriteError] = None
        if autoload:
            self.load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory list with the persisted one. Never raises."""
        with self._lock:
            try:
                data = self._storage.read_bytes()
                records = decode_records(data) if data else []
            except PersistenceReadError as e:
                logger.warning("Starting with an empty drink log: %s", e)
                records = []
            self._records = records
            logger.info("Loaded %d drinks from %s", len(records), self._storage.location)
        self._notify(StoreChange(ChangeKind.LOADED, tuple(r.id for r in records)))

    def save(self) -> bool:
        """
        Write the full list. Failures are logged and kept on `last_save_error`;
        the in-memory list is left as it is.

        Returns:
            True if the write succeeded
        """
        with self._lock:
            try:
                self._storage.write_bytes(encode_records(self._records))
            except PersistenceWriteError as e:
                logger.error("Failed to save drinks: %s", e)
                self.last_save_error = e
                return False
            self.last_save_error = None
            logger.info("Saved %d drinks to %s", len(self._records), self._storage.location)
            return True

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def add(self, record: DrinkRecord) -> None:
        """Insert at the front. Raises ValueError if the id is already logged."""
        with self._lock:
            if self._index_of(record.id) is not None:
                raise ValueError(f"Drink {record.id} is already in the log")
            self._records.insert(0, record)
            self.save()
        self._notify(StoreChange(ChangeKind.ADDED, (record.id,)))

    def update(self, record: DrinkRecord) -> bool:
        """Replace the record with the same id in place. No-op if absent."""
        with self._lock:
            index = self._index_of(record.id)
            if index is None:
                return False
            self._records[index] = record
            self.save()
        self._notify(StoreChange(ChangeKind.UPDATED, (record.id,)))
        return True

    def delete(self, record_id: UUID) -> bool:
        return self.delete_many([record_id]) > 0

    def delete_many(self, record_ids: Iterable[UUID]) -> int:
        """Remove every listed record with a single save. Returns how many went."""
        wanted = set(record_ids)
        with self._lock:
            removed = tuple(r.id for r in self._records if r.id in wanted)
            if not removed:
                return 0
            self._records = [r for r in self._records if r.id not in wanted]
            self.save()
        self._notify(StoreChange(ChangeKind.DELETED, removed))
        return len(removed)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def all(self) -> list[DrinkRecord]:
        with self._lock:
            return list(self._records)

    def recent(self, n: int = settings.RECENT_DRINKS_COUNT) -> list[DrinkRecord]:
        with self._lock:
            return self._records[:max(n, 0)]

    def get(self, record_id: UUID) -> Optional[DrinkRecord]:
        with self._lock:
            index = self._index_of(record_id)
            return None if index is None else self._records[index]

    def find_match(self, query: str) -> MatchResult:
        return find_match(query, self.all())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener; the returned callable unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, change: StoreChange) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                logger.exception("Drink store listener failed on %s", change.kind.value)

    def _index_of(self, record_id: UUID) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None
