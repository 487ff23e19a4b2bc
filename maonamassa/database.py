# maonamassa/database.py
import json
import logging
from functools import lru_cache
from pathlib import Path

from sqlmodel import SQLModel, create_engine

from maonamassa.core.config import get_settings
from maonamassa.core.permissions import Collection
from maonamassa.repositories.record_store import RecordStore
from maonamassa.repositories.sql_store import SQLRecordStore

# Import models so SQLModel metadata is populated before create_all()
from maonamassa.models import record as _record_models  # noqa: F401

logger = logging.getLogger(__name__)

settings = get_settings()

# ---------------------------------------------------------
# Record store connection
#
# - SQLite (default) is used from FastAPI's thread pool, so the
#   same-thread check has to be disabled.
# - pool_pre_ping=True: validate connections before using them
# ---------------------------------------------------------

db_url = settings.DATABASE_URL

connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}

engine = create_engine(
    db_url,
    echo=False,        # set to True if you want to debug SQL queries
    pool_pre_ping=True,
    connect_args=connect_args,
)

# Collection names of the legacy json-server db.json
LEGACY_COLLECTIONS: dict[str, Collection] = {
    "cliente": Collection.CLIENTS,
    "professional": Collection.PROFESSIONALS,
    "portfolio": Collection.PORTFOLIOS,
    "contratacao": Collection.CONTRACTS,
    "servico": Collection.SERVICES,
    "notificacao": Collection.NOTIFICATIONS,
    "favorito": Collection.FAVORITES,
}


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


@lru_cache
def get_store() -> RecordStore:
    """
    FastAPI dependency returning the process-wide record store.

    Tests swap it out with:

        app.dependency_overrides[get_store] = lambda: InMemoryRecordStore()
    """
    return SQLRecordStore(engine)


def resolve_collection(name: str) -> Collection | None:
    """Map a db.json key (current or legacy name) to a Collection."""
    if name in LEGACY_COLLECTIONS:
        return LEGACY_COLLECTIONS[name]
    try:
        return Collection(name)
    except ValueError:
        return None


def seed_store(store: RecordStore, path: str | Path) -> int:
    """
    Load a json-server style document ({collection: [records]}) into `store`.

    - Skipped entirely if the store already holds data.
    - Record ids from the file are preserved.
    - Unknown collections are skipped with a warning.
    - json-server-auth users keep their bcrypt hash in `password`; it is
      moved to `passwordHash` so they can still log in.

    Returns:
        Number of records inserted.
    """
    if not store.is_empty():
        logger.info("Seed skipped: record store is not empty")
        return 0

    with open(path, encoding="utf-8") as fh:
        document = json.load(fh)

    inserted = 0
    for name, records in document.items():
        collection = resolve_collection(name)
        if collection is None or not isinstance(records, list):
            logger.warning(f"Seed: skipping unknown collection '{name}'")
            continue
        for record in records:
            if isinstance(record, dict):
                if collection is Collection.USERS:
                    record = _import_legacy_user(record)
                store.create(collection.value, record)
                inserted += 1

    return inserted


def _import_legacy_user(record: dict) -> dict:
    record = dict(record)
    legacy_hash = record.pop("password", None)
    if legacy_hash and not record.get("passwordHash"):
        record["passwordHash"] = legacy_hash
    if isinstance(record.get("email"), str):
        record["email"] = record["email"].strip().lower()
    return record
