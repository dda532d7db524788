"""
Nominatim (OpenStreetMap) client.

Example usage:
    from geoscout.providers.nominatim import NominatimClient

    client = NominatimClient(userAgent="my-app/1.0 (me@example.com)")
    result = await client.geocode("123 Main St", city="Springfield")
"""

from geoscout.providers.nominatim.client import NominatimClient
from geoscout.providers.nominatim.models import (
    NominatimAddress,
    ReverseResponse,
    ReverseResult,
    SearchResponse,
    SearchResult,
)

__all__ = [
    "NominatimClient",
    "NominatimAddress",
    "SearchResult",
    "ReverseResult",
    "SearchResponse",
    "ReverseResponse",
]
