"""
Nominatim API Data Models

TypedDict models for the OpenStreetMap Nominatim responses (format=json).
Only the fields geoscout reads are listed; payloads carry more.
"""

import sys
from typing import List, NotRequired

if sys.version_info >= (3, 14):
    from typing import TypedDict
else:
    from typing_extensions import TypedDict


class NominatimAddress(TypedDict, total=False, closed=False):
    """Structured address components (addressdetails=1), dood!

    All fields are optional as different locations have different address structures.
    """

    house_number: str  # House number
    road: str  # Street name
    neighbourhood: str  # Neighbourhood/district
    suburb: str  # Suburb name
    city: str  # City name
    town: str  # Town name (used instead of city for smaller places)
    village: str  # Village name
    hamlet: str  # Hamlet name
    county: str  # County/district name
    state: str  # State/region name
    postcode: str  # Postal code
    country: str  # Country name
    country_code: str  # ISO country code (e.g., "us")


class SearchResult(TypedDict):
    """Single result from /search endpoint, dood!"""

    place_id: int  # Unique place identifier
    osm_type: str  # OSM object type (node/way/relation)
    osm_id: int  # OSM object ID
    lat: str  # Latitude (string in API response)
    lon: str  # Longitude (string in API response)
    display_name: str  # Full display name
    name: NotRequired[str]  # Place name
    # format=json uses "class", format=jsonv2 uses "category"
    type: NotRequired[str]  # Place type (e.g. "veterinary")
    address: NotRequired[NominatimAddress]  # Structured address components
    importance: NotRequired[float]  # Importance score (0-1)
    boundingbox: NotRequired[List[str]]  # [min_lat, max_lat, min_lon, max_lon]


class ReverseResult(TypedDict):
    """Result from /reverse endpoint, dood!

    On failure Nominatim answers 200 with {"error": "Unable to geocode"}.
    """

    place_id: int  # Unique place identifier
    lat: str  # Latitude (string in API response)
    lon: str  # Longitude (string in API response)
    display_name: str  # Full display name
    address: NominatimAddress  # Structured address components
    error: NotRequired[str]  # Error message instead of a result


SearchResponse = List[SearchResult]  # /search returns array
ReverseResponse = ReverseResult  # /reverse returns single object
