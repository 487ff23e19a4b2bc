# maonamassa/models/record.py
from typing import Any

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class StoredRecord(SQLModel, table=True):
    """
    One document of the record store.

    Identity:
      - (collection, id): ids are sequential per collection, like json-server.

    The document itself lives in `data` as JSON and always contains
    its own `id` as well.
    """

    __tablename__ = "records"

    collection: str = Field(
        primary_key=True,
        index=True,
        description="Collection name, e.g. contracts",
    )

    id: int = Field(
        primary_key=True,
        description="Record id, unique inside its collection",
    )

    data: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Record document (field name -> value)",
    )
