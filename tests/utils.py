"""
Test utility functions and helpers.

This module provides fake upstream servers for Nominatim and Geoapify and
helpers to build provider payloads.
"""

from typing import Any, Dict, List, Optional

import httpx

from geoscout.distance import KM_PER_DEGREE

NYC_LAT = 40.7128
NYC_LON = -74.0060

# ============================================================================
# Payload Builders
# ============================================================================


def latitudeNorthOf(lat: float, km: float) -> float:
    """Latitude km kilometers north of lat on the same meridian."""
    return lat + km / KM_PER_DEGREE


def createNominatimPlace(
    placeId: int,
    name: str,
    km: float,
    centerLat: float = NYC_LAT,
    centerLon: float = NYC_LON,
) -> Dict[str, Any]:
    """
    Create a Nominatim /search entry km kilometers north of the center.

    Returns:
        Dict shaped like a Nominatim search result
    """
    return {
        "place_id": placeId,
        "lat": str(latitudeNorthOf(centerLat, km)),
        "lon": str(centerLon),
        "name": name,
        "display_name": f"{name}, Manhattan, New York, United States",
        "class": "amenity",
        "type": "veterinary",
        "address": {"road": "Broadway", "city": "New York", "country": "United States"},
    }


def createGeoapifyFeature(
    name: str,
    km: float,
    centerLat: float = NYC_LAT,
    centerLon: float = NYC_LON,
    categories: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Create a Geoapify place feature km kilometers north of the center.

    Returns:
        Dict shaped like a GeoJSON feature from /v2/places
    """
    lat = latitudeNorthOf(centerLat, km)
    return {
        "type": "Feature",
        "properties": {
            "name": name,
            "categories": categories or ["pet", "pet.veterinary"],
            "formatted": f"{name}, New York, NY, United States of America",
            "city": "New York",
            "place_id": f"geo-{name.lower().replace(' ', '-')}",
        },
        "geometry": {"type": "Point", "coordinates": [centerLon, lat]},
    }


# ============================================================================
# Fake Upstream
# ============================================================================


class FakeUpstream:
    """
    Fake HTTP upstream for provider clients.

    Responses are registered per path ("/search", "/reverse", "/v2/places")
    and every request is recorded.

    Example:
        upstream = FakeUpstream()
        upstream.addJson("/search", [])
        client = NominatimClient(transport=upstream.transport)
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: Dict[str, httpx.Response] = {}
        self.transport = httpx.MockTransport(self._handle)

    def addJson(self, path: str, payload: Any, statusCode: int = 200) -> None:
        self._responses[path] = httpx.Response(statusCode, json=payload)

    def addText(self, path: str, text: str, statusCode: int = 200) -> None:
        self._responses[path] = httpx.Response(statusCode, text=text)

    def requestsTo(self, path: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"error": f"No fake response for {request.url.path}"})
        return httpx.Response(response.status_code, content=response.content, headers=response.headers)
