# maonamassa/services/search_service.py
import math

from maonamassa.core.errors import InvalidParameter, MissingParameter
from maonamassa.schemas.search import SearchParams, SearchResult

DEFAULT_RADIUS_KM = 8

REQUIRED_PARAMS = ["lat", "lon"]
EXAMPLE_QUERY = "/professionals/search?lat=-19.9167&lon=-43.9345&radius=8"


class SearchService:
    """
    Input contract of the proximity search.

    Only validates and normalizes the query; distance filtering
    (Haversine) is done by the client.
    """

    def search(
        self,
        lat: str | None,
        lon: str | None,
        radius: str | None = None,
        service_id: str | None = None,
    ) -> SearchResult:
        if not lat or not lon:
            raise MissingParameter(
                f"Required parameters: {', '.join(REQUIRED_PARAMS)}",
                required=REQUIRED_PARAMS,
                example=EXAMPLE_QUERY,
            )

        lat_value = self._number("lat", lat)
        lon_value = self._number("lon", lon)
        radius_value = (
            self._number("radius", radius) if radius else float(DEFAULT_RADIUS_KM)
        )

        if not -90 <= lat_value <= 90:
            raise InvalidParameter("lat must be between -90 and 90", example=EXAMPLE_QUERY)
        if not -180 <= lon_value <= 180:
            raise InvalidParameter("lon must be between -180 and 180", example=EXAMPLE_QUERY)
        if radius_value <= 0:
            raise InvalidParameter("radius must be positive", example=EXAMPLE_QUERY)

        return SearchResult(
            message="Proximity search available",
            params=SearchParams(
                lat=lat_value,
                lon=lon_value,
                radius=radius_value,
                serviceId=service_id,
            ),
            note="Distance calculation is performed by the client (Haversine)",
        )

    def _number(self, name: str, raw: str) -> float:
        try:
            value = float(raw)
        except ValueError:
            raise InvalidParameter(f"{name} must be a number", example=EXAMPLE_QUERY)
        # float() accepts "nan" / "inf"
        if not math.isfinite(value):
            raise InvalidParameter(f"{name} must be a number", example=EXAMPLE_QUERY)
        return value
