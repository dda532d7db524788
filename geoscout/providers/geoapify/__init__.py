"""
Geoapify Places API client.

Example usage:
    from geoscout.providers.geoapify import GeoapifyPlacesClient

    client = GeoapifyPlacesClient(apiKey="your_api_key")
    places = await client.searchPlacesByCategories(40.7128, -74.0060, {"pet.veterinary"})
"""

from geoscout.providers.geoapify.client import GeoapifyPlacesClient
from geoscout.providers.geoapify.models import (
    GeoapifyFeature,
    GeoapifyGeometry,
    GeoapifyProperties,
    PlacesResponse,
)

__all__ = [
    "GeoapifyPlacesClient",
    "GeoapifyFeature",
    "GeoapifyGeometry",
    "GeoapifyProperties",
    "PlacesResponse",
]
