import json

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from maonamassa.database import seed_store
from maonamassa.repositories.record_store import InMemoryRecordStore
from maonamassa.repositories.sql_store import SQLRecordStore


def make_sql_store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return SQLRecordStore(engine)


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    if request.param == "memory":
        return InMemoryRecordStore()
    return make_sql_store()


def test_create_assigns_sequential_ids(any_store):
    assert any_store.is_empty()

    first = any_store.create("favorites", {"userId": 1})
    second = any_store.create("favorites", {"userId": 2})
    other = any_store.create("contracts", {"clientId": 1})

    assert (first["id"], second["id"], other["id"]) == (1, 2, 1)
    assert not any_store.is_empty()


def test_explicit_free_id_is_kept(any_store):
    any_store.create("favorites", {"id": 10})
    clash = any_store.create("favorites", {"id": 10})
    assert clash["id"] == 11


def test_get_update_delete(any_store):
    created = any_store.create("favorites", {"userId": 1, "tags": ["a"]})

    assert any_store.get("favorites", created["id"]) == created
    assert any_store.get("favorites", 99) is None

    updated = any_store.update("favorites", created["id"], {"userId": 1, "tags": ["b"]})
    assert updated == {"id": created["id"], "userId": 1, "tags": ["b"]}
    assert any_store.get("favorites", created["id"])["tags"] == ["b"]
    assert any_store.update("favorites", 99, {}) is None

    assert any_store.delete("favorites", created["id"]) is True
    assert any_store.delete("favorites", created["id"]) is False
    assert any_store.list("favorites") == []


def test_list_filters(any_store):
    any_store.create("portfolios", {"userId": 1, "serviceId": 2})
    any_store.create("portfolios", {"userId": 2, "serviceId": 2})

    assert len(any_store.list("portfolios")) == 2
    assert [r["userId"] for r in any_store.list("portfolios", {"userId": "2"})] == [2]
    assert any_store.list("portfolios", {"missing": "x"}) == []


def test_in_memory_store_returns_copies():
    store = InMemoryRecordStore()
    created = store.create("favorites", {"tags": ["a"]})
    created["tags"].append("b")
    assert store.get("favorites", created["id"])["tags"] == ["a"]


def test_seed_store_maps_legacy_names(tmp_path, any_store):
    seed = tmp_path / "db.json"
    seed.write_text(
        json.dumps(
            {
                "contratacao": [{"id": 7, "clientId": 1, "professionalId": 2}],
                "professional": [{"id": 2, "userId": 2}],
                "unknown": [{"id": 1}],
            }
        ),
        encoding="utf-8",
    )

    assert seed_store(any_store, seed) == 2
    assert any_store.get("contracts", 7)["professionalId"] == 2
    assert any_store.get("professionals", 2)["userId"] == 2
    # Second run is a no-op
    assert seed_store(any_store, seed) == 0


def test_seed_store_moves_legacy_password_hash(tmp_path, any_store):
    seed = tmp_path / "db.json"
    seed.write_text(
        json.dumps({"users": [{"id": 1, "email": "Ana@b.com", "password": "$2a$10$legacy"}]}),
        encoding="utf-8",
    )

    seed_store(any_store, seed)

    user = any_store.get("users", 1)
    assert "password" not in user
    assert user["passwordHash"] == "$2a$10$legacy"
    assert user["email"] == "ana@b.com"
