"""
Proximity search over an ordered list of places providers.

Example usage:
    from geoscout.proximity import ProximitySearch

    search = ProximitySearch([geoapifyClient, nominatimClient])
    places = await search.search(PlaceSearchRequest(latitude=40.7128, longitude=-74.0060, query="vet"))
"""

from .search import ProximitySearch

__all__ = [
    "ProximitySearch",
]
