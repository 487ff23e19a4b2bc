# maonamassa/schemas/search.py
from sqlmodel import SQLModel


class SearchParams(SQLModel):
    """Normalized proximity-search parameters echoed back to the caller."""

    lat: float
    lon: float
    radius: float
    serviceId: str | None = None


class SearchResult(SQLModel):
    message: str
    params: SearchParams
    note: str
