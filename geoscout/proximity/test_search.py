"""
Tests for ProximitySearch fallback chain, dood!
"""

import math
import unittest
from dataclasses import replace
from typing import List, Optional

import httpx

from geoscout.distance import KM_PER_DEGREE, distanceKm
from geoscout.exceptions import ConfigurationError, PlaceSearchError
from geoscout.models import PlaceSearchRequest, PlaceSearchResult
from geoscout.providers.geoapify import GeoapifyPlacesClient
from geoscout.providers.interface import PlacesProviderInterface
from geoscout.providers.nominatim import NominatimClient
from geoscout.proximity import ProximitySearch
from geoscout.rate_limiter import NullRateLimiter, RateLimiterManager

NYC_LAT = 40.7128
NYC_LON = -74.0060


def placeNorth(name: str, km: float, provider: str = "fake", reportedKm: Optional[float] = None) -> PlaceSearchResult:
    lat = NYC_LAT + km / KM_PER_DEGREE
    return PlaceSearchResult(
        placeId=name,
        name=name,
        latitude=lat,
        longitude=NYC_LON,
        displayName=name,
        distanceKm=reportedKm if reportedKm is not None else km,
        provider=provider,
    )


class FakeProvider(PlacesProviderInterface):
    """Places provider returning canned results or raising a canned error."""

    def __init__(
        self,
        providerName: str,
        places: Optional[List[PlaceSearchResult]] = None,
        error: Optional[Exception] = None,
        available: bool = True,
        needsCategories: bool = False,
    ):
        self._name = providerName
        self.places = places or []
        self.error = error
        self.available = available
        self.needsCategories = needsCategories
        self.calls: List[PlaceSearchRequest] = []

    @property
    def name(self) -> str:
        return self._name

    def isAvailable(self) -> bool:
        return self.available

    def supports(self, request: PlaceSearchRequest) -> bool:
        return bool(request.categories) if self.needsCategories else True

    async def searchPlaces(self, request: PlaceSearchRequest) -> List[PlaceSearchResult]:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return list(self.places)


def makeRequest(**kwargs) -> PlaceSearchRequest:
    kwargs.setdefault("latitude", NYC_LAT)
    kwargs.setdefault("longitude", NYC_LON)
    kwargs.setdefault("radiusKm", 10)
    return PlaceSearchRequest(**kwargs)


class TestProximitySearch(unittest.IsolatedAsyncioTestCase):
    """Fallback, ordering and result validation"""

    async def testFirstNonEmptyResultWins(self):
        primary = FakeProvider("primary", [placeNorth("A", 1)])
        secondary = FakeProvider("secondary", [placeNorth("B", 2)])
        search = ProximitySearch([primary, secondary])

        results = await search.search(makeRequest(query="vet"))

        self.assertEqual([place.name for place in results], ["A"])
        self.assertEqual(len(secondary.calls), 0)

    async def testFallbackOnError(self):
        primary = FakeProvider("primary", error=PlaceSearchError("Place search failed for query: vet", query="vet"))
        secondary = FakeProvider("secondary", [placeNorth("B", 2)])
        search = ProximitySearch([primary, secondary])

        results = await search.search(makeRequest(query="vet"))

        self.assertEqual([place.name for place in results], ["B"])
        self.assertEqual(len(primary.calls), 1)

    async def testFallbackOnEmptyResult(self):
        primary = FakeProvider("primary", [])
        secondary = FakeProvider("secondary", [placeNorth("B", 2)])
        search = ProximitySearch([primary, secondary])

        results = await search.search(makeRequest(query="vet"))

        self.assertEqual([place.name for place in results], ["B"])

    async def testResultsAreNotMerged(self):
        primary = FakeProvider("primary", [placeNorth("A", 3)])
        secondary = FakeProvider("secondary", [placeNorth("B", 1)])
        search = ProximitySearch([primary, secondary])

        results = await search.search(makeRequest(query="vet"))

        self.assertEqual([place.name for place in results], ["A"])

    async def testSkipsUnavailableAndUnsupportedProviders(self):
        noKey = FakeProvider("nokey", [placeNorth("A", 1)], available=False)
        categoryOnly = FakeProvider("category", [placeNorth("B", 1)], needsCategories=True)
        text = FakeProvider("text", [placeNorth("C", 1)])
        search = ProximitySearch([noKey, categoryOnly, text])

        results = await search.search(makeRequest(query="vet"))

        self.assertEqual([place.name for place in results], ["C"])
        self.assertEqual(noKey.calls, [])
        self.assertEqual(categoryOnly.calls, [])

    async def testAllFailedRaisesLastError(self):
        firstError = PlaceSearchError("first")
        lastError = PlaceSearchError("last")
        search = ProximitySearch([FakeProvider("one", error=firstError), FakeProvider("two", error=lastError)])

        with self.assertRaises(PlaceSearchError) as context:
            await search.search(makeRequest(query="vet"))

        self.assertIs(context.exception, lastError)

    async def testSucceededWithoutDataReturnsEmpty(self):
        search = ProximitySearch(
            [FakeProvider("one", error=PlaceSearchError("boom")), FakeProvider("two", [placeNorth("Far", 50)])]
        )

        self.assertEqual(await search.search(makeRequest(query="vet")), [])

    async def testNoEligibleProviderRaisesConfigurationError(self):
        search = ProximitySearch([FakeProvider("nokey", available=False)])

        with self.assertRaises(ConfigurationError):
            await search.search(makeRequest(query="vet"))

        with self.assertRaises(ConfigurationError):
            await ProximitySearch([]).search(makeRequest(query="vet"))

    async def testResultsAreRevalidated(self):
        """Distances are recomputed, out-of-radius dropped, sorted and trimmed"""
        provider = FakeProvider(
            "sloppy",
            [
                placeNorth("Five", 5, reportedKm=0.5),
                placeNorth("Fifteen", 15, reportedKm=1.0),
                placeNorth("Two", 2),
                placeNorth("Eight", 8),
                placeNorth("Nine", 9),
            ],
        )
        search = ProximitySearch([provider])

        results = await search.search(makeRequest(query="vet", limit=3))

        self.assertEqual([place.name for place in results], ["Two", "Five", "Eight"])
        for place in results:
            self.assertEqual(place.distanceKm, distanceKm(NYC_LAT, NYC_LON, place.latitude, place.longitude))
            self.assertLessEqual(place.distanceKm, 10 + 0.01)
        distances = [place.distanceKm for place in results]
        self.assertEqual(distances, sorted(distances))

    async def testProviderOrderRestrictsAndReorders(self):
        first = FakeProvider("first", [placeNorth("A", 1)])
        second = FakeProvider("second", [placeNorth("B", 1)])
        third = FakeProvider("third", [placeNorth("C", 1)])
        search = ProximitySearch([first, second, third])

        results = await search.search(makeRequest(query="vet", providerOrder=["third", "unknown", "first"]))
        self.assertEqual([place.name for place in results], ["C"])

        third.places = []
        results = await search.search(makeRequest(query="vet", providerOrder=("third", "first")))
        self.assertEqual([place.name for place in results], ["A"])
        self.assertEqual(second.calls, [])

    async def testProviderOrderWithOnlyUnknownNames(self):
        search = ProximitySearch([FakeProvider("first", [placeNorth("A", 1)])])

        with self.assertRaises(ConfigurationError):
            await search.search(makeRequest(query="vet", providerOrder=["missing"]))

    async def testNonFiniteCoordinatesAreDropped(self):
        broken = replace(placeNorth("Broken", 1), latitude=math.nan, distanceKm=0.0)
        provider = FakeProvider("primary", [placeNorth("Far", 5), broken, placeNorth("Near", 1)])
        search = ProximitySearch([provider])

        results = await search.search(makeRequest(query="vet"))

        self.assertEqual([place.name for place in results], ["Near", "Far"])

    async def testFallbackWhenPrimaryBodyIsNotUtf8(self):
        geoapify = GeoapifyPlacesClient(
            apiKey="test_key",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"\xff")),
        )
        nominatimPlace = {"place_id": 7, "name": "Near Vet", "lat": str(NYC_LAT + 0.01), "lon": str(NYC_LON)}
        nominatim = NominatimClient(
            rateLimiter=RateLimiterManager.forQueue("nominatim", NullRateLimiter()),
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[nominatimPlace])),
        )
        search = ProximitySearch([geoapify, nominatim])

        results = await search.search(makeRequest(categories=frozenset({"pet.veterinary"}), query="vet"))

        self.assertEqual([(place.name, place.provider) for place in results], [("Near Vet", "nominatim")])

    def testListProviders(self):
        search = ProximitySearch([FakeProvider("geoapify"), FakeProvider("nominatim")])

        self.assertEqual(search.listProviders(), ["geoapify", "nominatim"])


if __name__ == "__main__":
    unittest.main()
