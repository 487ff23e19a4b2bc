# maonamassa/repositories/record_store.py
import copy
import threading
from typing import Any, Protocol

Record = dict[str, Any]


class RecordStore(Protocol):
    """
    Key-indexed document store, one ordered list of records per collection.

    Responsibilities:
      - Pure storage operations, ids assigned by the store
      - No FastAPI, no HTTP, no access rules

    Missing records are reported as None / False; mapping them to a 404
    is the service's job.
    """

    def list(self, collection: str, filters: dict[str, Any] | None = None) -> list[Record]:
        ...

    def get(self, collection: str, record_id: int) -> Record | None:
        ...

    def create(self, collection: str, record: Record) -> Record:
        ...

    def update(self, collection: str, record_id: int, record: Record) -> Record | None:
        ...

    def delete(self, collection: str, record_id: int) -> bool:
        ...

    def is_empty(self) -> bool:
        ...


def matches(record: Record, filters: dict[str, Any] | None) -> bool:
    """
    Exact-match filtering, json-server style (?field=value).

    Values are compared as strings since query parameters are strings.
    """
    if not filters:
        return True
    for field, expected in filters.items():
        if field not in record or str(record[field]) != str(expected):
            return False
    return True


def next_id(record: Record, taken: set[int]) -> int:
    """
    Id for a new record: its own integer id when still free (seed data),
    otherwise one past the highest id in the collection.
    """
    wanted = record.get("id")
    if isinstance(wanted, int) and not isinstance(wanted, bool) and wanted > 0:
        if wanted not in taken:
            return wanted
    return max(taken, default=0) + 1


class InMemoryRecordStore:
    """
    Dict-backed RecordStore for tests and demos.

    Records are deep-copied on the way in and out so callers can never
    mutate stored state by accident.
    """

    def __init__(self, initial: dict[str, list[Record]] | None = None):
        self._data: dict[str, list[Record]] = {}
        self._lock = threading.Lock()
        for collection, records in (initial or {}).items():
            for record in records:
                self.create(collection, record)

    def list(self, collection: str, filters: dict[str, Any] | None = None) -> list[Record]:
        with self._lock:
            rows = self._data.get(collection, [])
            return [copy.deepcopy(r) for r in rows if matches(r, filters)]

    def get(self, collection: str, record_id: int) -> Record | None:
        with self._lock:
            index = self._index_of(collection, record_id)
            if index is None:
                return None
            return copy.deepcopy(self._data[collection][index])

    def create(self, collection: str, record: Record) -> Record:
        with self._lock:
            rows = self._data.setdefault(collection, [])
            taken = {r["id"] for r in rows}
            new_id = next_id(record, taken)
            stored = {**copy.deepcopy(record), "id": new_id}
            rows.append(stored)
            return copy.deepcopy(stored)

    def update(self, collection: str, record_id: int, record: Record) -> Record | None:
        with self._lock:
            index = self._index_of(collection, record_id)
            if index is None:
                return None
            stored = {**copy.deepcopy(record), "id": record_id}
            self._data[collection][index] = stored
            return copy.deepcopy(stored)

    def delete(self, collection: str, record_id: int) -> bool:
        with self._lock:
            index = self._index_of(collection, record_id)
            if index is None:
                return False
            del self._data[collection][index]
            return True

    def is_empty(self) -> bool:
        with self._lock:
            return not any(self._data.values())

    def _index_of(self, collection: str, record_id: int) -> int | None:
        for i, row in enumerate(self._data.get(collection, [])):
            if row["id"] == record_id:
                return i
        return None
