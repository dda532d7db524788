"""
Geoapify Places API Data Models

TypedDict models for the GeoJSON-like /v2/places response.
"""

import sys
from typing import Dict, List, NotRequired

if sys.version_info >= (3, 14):
    from typing import TypedDict
else:
    from typing_extensions import TypedDict


class GeoapifyProperties(TypedDict, total=False, closed=False):
    """Properties bag of a place feature, dood!

    All fields are optional; Geoapify omits what it doesn't know.
    """

    place_id: str  # Geoapify place identifier
    name: str  # Place name
    name_international: Dict[str, str]  # Names by language code {"en": "..."}
    formatted: str  # Full formatted address
    address_line1: str  # First address line (often the name)
    address_line2: str  # Second address line
    street: str  # Street name
    housenumber: str  # House number
    city: str  # City name
    state: str  # State/region name
    postcode: str  # Postal code
    country: str  # Country name
    country_code: str  # ISO country code
    categories: List[str]  # Category list (e.g. ["pet", "pet.veterinary"])
    lat: float  # Latitude
    lon: float  # Longitude
    distance: int  # Distance from bias point in meters


class GeoapifyGeometry(TypedDict):
    """Point geometry, coordinates are [lon, lat]."""

    type: str
    coordinates: List[float]


class GeoapifyFeature(TypedDict):
    """Single place feature, dood!"""

    type: str  # Always "Feature"
    id: NotRequired[str]  # Feature identifier (not always present)
    properties: GeoapifyProperties
    geometry: GeoapifyGeometry


class PlacesResponse(TypedDict):
    """Response of GET /v2/places"""

    type: str  # Always "FeatureCollection"
    features: List[GeoapifyFeature]
