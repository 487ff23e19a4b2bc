# maonamassa/repositories/sql_store.py
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from maonamassa.models.record import StoredRecord
from maonamassa.repositories.record_store import Record, matches, next_id


class SQLRecordStore:
    """
    RecordStore backed by the `records` table.

    NOTE:
      - One Session per operation, committed before returning.
      - Filtering happens in Python on the decoded documents; there is
        no per-field index.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def list(self, collection: str, filters: dict[str, Any] | None = None) -> list[Record]:
        stmt = (
            select(StoredRecord)
            .where(StoredRecord.collection == collection)
            .order_by(StoredRecord.id)
        )
        with Session(self.engine) as session:
            rows = session.exec(stmt).all()
            return [dict(row.data) for row in rows if matches(row.data, filters)]

    def get(self, collection: str, record_id: int) -> Record | None:
        with Session(self.engine) as session:
            row = session.get(StoredRecord, (collection, record_id))
            return dict(row.data) if row else None

    def create(self, collection: str, record: Record) -> Record:
        with Session(self.engine) as session:
            stmt = select(StoredRecord.id).where(
                StoredRecord.collection == collection
            )
            taken = set(session.exec(stmt).all())
            new_id = next_id(record, taken)

            data = {**record, "id": new_id}
            session.add(StoredRecord(collection=collection, id=new_id, data=data))
            session.commit()
            return dict(data)

    def update(self, collection: str, record_id: int, record: Record) -> Record | None:
        with Session(self.engine) as session:
            row = session.get(StoredRecord, (collection, record_id))
            if row is None:
                return None
            # Assign a new dict so SQLAlchemy sees the JSON column as dirty
            row.data = {**record, "id": record_id}
            session.add(row)
            session.commit()
            return dict(row.data)

    def delete(self, collection: str, record_id: int) -> bool:
        with Session(self.engine) as session:
            row = session.get(StoredRecord, (collection, record_id))
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    def is_empty(self) -> bool:
        with Session(self.engine) as session:
            return session.exec(select(StoredRecord.id).limit(1)).first() is None
