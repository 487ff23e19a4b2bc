# maonamassa/routers/search.py
from fastapi import APIRouter, Query

from maonamassa.schemas.search import SearchResult
from maonamassa.services.search_service import SearchService

router = APIRouter(prefix="/professionals", tags=["Professionals"])

service = SearchService()


@router.get("/search", response_model=SearchResult)
def search_professionals(
    lat: str | None = None,
    lon: str | None = None,
    radius: str | None = None,
    service_id: str | None = Query(default=None, alias="serviceId"),
    servico_id: str | None = None,
):
    """
    Proximity search of professionals (public).

    Validates lat/lon (required) and radius (default 8 km) and echoes
    them back; the distance filter itself runs on the client.
    """
    return service.search(lat, lon, radius, service_id or servico_id)
