"""
Geocoding and places providers.

- NominatimClient: free, quota-limited OpenStreetMap text search
  (geocode, reverse geocode, nearby text search)
- GeoapifyPlacesClient: paid, category-based places search
"""

from .geoapify import GeoapifyPlacesClient
from .interface import GeocoderInterface, PlacesProviderInterface
from .nominatim import NominatimClient

__all__ = [
    "GeocoderInterface",
    "PlacesProviderInterface",
    "NominatimClient",
    "GeoapifyPlacesClient",
]
