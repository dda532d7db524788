"""
Geoscout Data Models

Provider-independent result types returned by geoscout clients and services.
Raw provider payloads are described by TypedDicts in each provider package.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class GeocodeResult:
    """Coordinates for a geocoded address, dood!"""

    latitude: float
    longitude: float
    displayName: Optional[str] = None


@dataclass(frozen=True)
class ReverseGeocodeResult:
    """Address for a coordinate pair.

    Attributes:
        address: Raw provider address block (opaque, provider specific keys)
        displayName: Full human-readable address
    """

    address: Dict[str, Any]
    displayName: str


@dataclass(frozen=True)
class PlaceAddress:
    """Structured address of a place, all fields optional."""

    road: Optional[str] = None
    houseNumber: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None

    def isEmpty(self) -> bool:
        return not any((self.road, self.houseNumber, self.city, self.state, self.postcode, self.country))


@dataclass(frozen=True)
class PlaceSearchResult:
    """Single point of interest found by a proximity search.

    placeId is only unique within one provider's response.
    """

    placeId: str
    name: str
    latitude: float
    longitude: float
    displayName: str
    address: Optional[PlaceAddress] = None
    type: Optional[str] = None
    category: Optional[str] = None
    distanceKm: float = 0.0
    provider: str = ""


@dataclass(frozen=True)
class PlaceSearchRequest:
    """Proximity search request, dood!

    Attributes:
        latitude: Center latitude (-90 to 90)
        longitude: Center longitude (-180 to 180)
        categories: Category filters for category-based providers
        query: Free-text query for text-search providers
        radiusKm: Search radius in kilometers
        limit: Maximum number of results
        providerOrder: Optional provider names to try, in order
    """

    latitude: float
    longitude: float
    categories: FrozenSet[str] = field(default_factory=frozenset)
    query: Optional[str] = None
    radiusKm: float = 10.0
    limit: int = 50
    providerOrder: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        """Validate request values"""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude must be between -90 and 90, got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude must be between -180 and 180, got {self.longitude}")
        if self.radiusKm <= 0:
            raise ValueError("radiusKm must be positive")
        if self.limit <= 0:
            raise ValueError("limit must be positive")
        # Accept any iterable of categories, but store a frozenset
        if not isinstance(self.categories, frozenset):
            object.__setattr__(self, "categories", frozenset(self.categories))
        if self.providerOrder is not None and not isinstance(self.providerOrder, tuple):
            object.__setattr__(self, "providerOrder", tuple(self.providerOrder))
