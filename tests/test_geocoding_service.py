"""
Scenario tests for GeocodingService, dood!

Both providers talk to fake upstreams, so these tests exercise the whole
stack: service, proximity fallback, clients, cache and rate limiter.
"""

import asyncio

import pytest

from geoscout.cache import NullCache
from geoscout.config import ConfigManager
from geoscout.exceptions import ConfigurationError, GeocodeError, PlaceSearchError, ReverseGeocodeError
from geoscout.models import PlaceSearchRequest
from geoscout.providers import GeoapifyPlacesClient
from geoscout.service import GeocodingService
from tests.utils import NYC_LAT, NYC_LON, createGeoapifyFeature, createNominatimPlace

# ============================================================================
# Geocoding
# ============================================================================


@pytest.mark.asyncio
async def testGeocodeNotFoundMessageContainsFullAddress(geocodingService, nominatimUpstream):
    nominatimUpstream.addJson("/search", [])

    with pytest.raises(GeocodeError) as excInfo:
        await geocodingService.geocodeAddress("123 Main St", "Springfield")

    assert "123 Main St, Springfield" in str(excInfo.value)
    assert excInfo.value.query == "123 Main St, Springfield"
    assert geocodingService.getCacheSize() == 0


@pytest.mark.asyncio
async def testGeocodeIsCachedByNormalizedAddress(geocodingService, nominatimUpstream):
    nominatimUpstream.addJson("/search", [{"lat": "39.7817", "lon": "-89.6501", "display_name": "Springfield, IL"}])

    first = await geocodingService.geocodeAddress("123 Main St", "Springfield", "IL")
    second = await geocodingService.geocodeAddress("  123 MAIN   st", "springfield ", "il")

    assert first == second
    assert len(nominatimUpstream.requestsTo("/search")) == 1
    assert geocodingService.getCacheSize() == 1

    geocodingService.clearCache()
    assert geocodingService.getCacheSize() == 0

    await geocodingService.geocodeAddress("123 Main St", "Springfield", "IL")
    assert len(nominatimUpstream.requestsTo("/search")) == 2


@pytest.mark.asyncio
async def testConcurrentGeocodesAgree(geocodingService, nominatimUpstream):
    nominatimUpstream.addJson("/search", [{"lat": "51.5074", "lon": "-0.1278", "display_name": "London"}])

    results = await asyncio.gather(*(geocodingService.geocodeAddress("London") for _ in range(5)))

    assert all(result == results[0] for result in results)
    assert geocodingService.getCacheSize() == 1


@pytest.mark.asyncio
async def testReverseGeocode(geocodingService, nominatimUpstream):
    nominatimUpstream.addJson(
        "/reverse",
        {"display_name": "City Hall, New York, United States", "address": {"city": "New York", "country_code": "us"}},
    )

    result = await geocodingService.reverseGeocode(NYC_LAT, NYC_LON)

    assert result.displayName == "City Hall, New York, United States"
    assert result.address["city"] == "New York"
    # Reverse geocoding is never cached
    assert geocodingService.getCacheSize() == 0


@pytest.mark.asyncio
async def testReverseGeocodeUnableToGeocode(geocodingService, nominatimUpstream):
    nominatimUpstream.addJson("/reverse", {"error": "Unable to geocode"})

    with pytest.raises(ReverseGeocodeError):
        await geocodingService.reverseGeocode(0.0, -160.0)


# ============================================================================
# Direct Place Searches
# ============================================================================


@pytest.mark.asyncio
async def testSearchPlacesByTagsNewYork(geocodingService, geoapifyUpstream):
    geoapifyUpstream.addJson(
        "/v2/places",
        {
            "type": "FeatureCollection",
            "features": [
                createGeoapifyFeature("Two Km Vet", 2, categories=["healthcare", "healthcare.veterinary"]),
                createGeoapifyFeature("Fifteen Km Vet", 15, categories=["healthcare", "healthcare.veterinary"]),
                createGeoapifyFeature("Five Km Vet", 5, categories=["healthcare", "healthcare.veterinary"]),
            ],
        },
    )

    places = await geocodingService.searchPlacesByTags(NYC_LAT, NYC_LON, ["healthcare.veterinary"], radiusKm=10)

    assert [round(place.distanceKm) for place in places] == [2, 5]
    assert [place.name for place in places] == ["Two Km Vet", "Five Km Vet"]


@pytest.mark.asyncio
async def testSearchPlacesByTagsWithoutGeoapify(nominatimClient):
    service = GeocodingService(nominatimClient)

    with pytest.raises(ConfigurationError):
        await service.searchPlacesByTags(NYC_LAT, NYC_LON, ["pet.veterinary"])
    assert service.proximitySearch.listProviders() == ["nominatim"]


@pytest.mark.asyncio
async def testSearchPlacesNearbyFiltersByRadius(geocodingService, nominatimUpstream):
    nominatimUpstream.addJson(
        "/search",
        [
            createNominatimPlace(1, "Far Vet", 12),
            createNominatimPlace(2, "Near Vet", 1),
            createNominatimPlace(3, "Mid Vet", 4),
        ],
    )

    places = await geocodingService.searchPlacesNearby(NYC_LAT, NYC_LON, "veterinary clinic", radiusKm=5)

    assert [place.name for place in places] == ["Near Vet", "Mid Vet"]
    for place in places:
        assert place.distanceKm <= 5 + 0.01


# ============================================================================
# Proximity Search with Fallback
# ============================================================================


@pytest.mark.asyncio
async def testFallbackToTextSearchWhenGeoapifyFails(geocodingService, geoapifyUpstream, nominatimUpstream):
    geoapifyUpstream.addJson("/v2/places", {"message": "Internal error"}, statusCode=500)
    nominatimUpstream.addJson("/search", [createNominatimPlace(7, "Fallback Vet", 3)])

    places = await geocodingService.findNearbyByServiceType(NYC_LAT, NYC_LON, "veterinary")

    assert [place.name for place in places] == ["Fallback Vet"]
    assert places[0].provider == "nominatim"
    assert nominatimUpstream.requestsTo("/search")[0].url.params["q"] == "veterinary clinic"


@pytest.mark.asyncio
async def testGeoapifyResultsWinWithoutFallback(geocodingService, geoapifyUpstream, nominatimUpstream):
    geoapifyUpstream.addJson("/v2/places", {"features": [createGeoapifyFeature("Groomer", 1, categories=["pet", "pet.service"])]})
    nominatimUpstream.addJson("/search", [createNominatimPlace(1, "Other", 1)])

    places = await geocodingService.findNearbyByServiceType(NYC_LAT, NYC_LON, "Grooming")

    assert [place.name for place in places] == ["Groomer"]
    assert nominatimUpstream.requests == []
    assert geoapifyUpstream.requests[0].url.params["categories"] == "pet.service,pet.shop"


@pytest.mark.asyncio
async def testFallbackWhenGeoapifyFindsNothing(geocodingService, geoapifyUpstream, nominatimUpstream):
    geoapifyUpstream.addJson("/v2/places", {"features": []})
    nominatimUpstream.addJson("/search", [createNominatimPlace(1, "Animal Shelter", 2)])

    closest = await geocodingService.findClosestByServiceType(NYC_LAT, NYC_LON, "shelter")

    assert closest is not None
    assert closest.name == "Animal Shelter"
    assert nominatimUpstream.requestsTo("/search")[0].url.params["q"] == "animal shelter"


@pytest.mark.asyncio
async def testUnknownServiceTypeReturnsEmpty(geocodingService, geoapifyUpstream, nominatimUpstream):
    assert await geocodingService.findNearbyByServiceType(NYC_LAT, NYC_LON, "spaceship repair") == []
    assert await geocodingService.findClosestByServiceType(NYC_LAT, NYC_LON, "spaceship repair") is None
    assert geoapifyUpstream.requests == []
    assert nominatimUpstream.requests == []


@pytest.mark.asyncio
async def testAllProvidersFailingYieldsEmpty(geocodingService, geoapifyUpstream, nominatimUpstream):
    geoapifyUpstream.addJson("/v2/places", {}, statusCode=503)
    nominatimUpstream.addJson("/search", {}, statusCode=503)

    assert await geocodingService.findNearbyByServiceType(NYC_LAT, NYC_LON, "dental") == []


@pytest.mark.asyncio
async def testSearchNearbyRaisesWhenAllProvidersFail(geocodingService, geoapifyUpstream, nominatimUpstream):
    geoapifyUpstream.addJson("/v2/places", {}, statusCode=503)
    nominatimUpstream.addJson("/search", {}, statusCode=502)

    request = PlaceSearchRequest(latitude=NYC_LAT, longitude=NYC_LON, categories={"pet.shop"}, query="pet shop")
    with pytest.raises(PlaceSearchError) as excInfo:
        await geocodingService.searchNearby(request)

    # The most recent error is surfaced
    assert excInfo.value.statusCode == 502


@pytest.mark.asyncio
async def testSearchNearbyProviderOrder(geocodingService, geoapifyUpstream, nominatimUpstream):
    geoapifyUpstream.addJson("/v2/places", {"features": [createGeoapifyFeature("Category Shop", 1)]})
    nominatimUpstream.addJson("/search", [createNominatimPlace(1, "Text Shop", 1)])

    request = PlaceSearchRequest(
        latitude=NYC_LAT,
        longitude=NYC_LON,
        categories={"pet.shop"},
        query="pet shop",
        providerOrder=["nominatim", "geoapify"],
    )
    places = await geocodingService.searchNearby(request)

    assert [place.name for place in places] == ["Text Shop"]
    assert geoapifyUpstream.requests == []


@pytest.mark.asyncio
async def testMissingApiKeySkipsGeoapify(nominatimClient, nominatimUpstream, rateLimiterManager):
    service = GeocodingService(nominatimClient, GeoapifyPlacesClient(apiKey=None), rateLimiterManager)
    nominatimUpstream.addJson("/search", [createNominatimPlace(1, "Pet Store", 2)])

    places = await service.findNearbyByServiceType(NYC_LAT, NYC_LON, "retail")

    assert [place.name for place in places] == ["Pet Store"]
    assert nominatimUpstream.requestsTo("/search")[0].url.params["q"] == "pet store"


@pytest.mark.asyncio
async def testProximityResultsAreWithinRadiusAndSorted(geocodingService, geoapifyUpstream):
    geoapifyUpstream.addJson(
        "/v2/places",
        {"features": [createGeoapifyFeature(f"Vet {km}", km) for km in (9, 0.5, 11, 3, 7, 25)]},
    )

    places = await geocodingService.findNearbyByServiceType(NYC_LAT, NYC_LON, "vaccination", radiusKm=8, limit=3)

    distances = [place.distanceKm for place in places]
    assert len(places) == 3
    assert distances == sorted(distances)
    assert all(distance <= 8 + 0.01 for distance in distances)


# ============================================================================
# Utilities and Construction
# ============================================================================


def testCalculateDistance(geocodingService):
    assert geocodingService.calculateDistance(0, 0, 0, 1) == pytest.approx(111.19, abs=0.1)
    assert geocodingService.calculateDistance(NYC_LAT, NYC_LON, NYC_LAT, NYC_LON) == 0


@pytest.mark.asyncio
async def testFromConfig(tmp_path, monkeypatch):
    monkeypatch.setenv("GEOSCOUT_TEST_GEOAPIFY_KEY", "from_env")
    configPath = tmp_path / "config.toml"
    configPath.write_text(
        """
[nominatim]
user-agent = "geoscout-tests/1.0 (tests@example.com)"
min-interval = 2.0
accept-language = "en"

[geoapify]
api-key = "${GEOSCOUT_TEST_GEOAPIFY_KEY}"
timeout = 5

[cache]
enabled = false
"""
    )

    service = await GeocodingService.fromConfig(ConfigManager(str(configPath), dotEnvFile=None))

    assert service.proximitySearch.listProviders() == ["geoapify", "nominatim"]
    assert service.geoapifyClient is not None
    assert service.geoapifyClient.isAvailable()
    assert service.geoapifyClient.requestTimeout == 5
    assert service.nominatimClient.userAgent == "geoscout-tests/1.0 (tests@example.com)"
    assert service.nominatimClient.acceptLanguage == "en"
    assert isinstance(service.nominatimClient.cache, NullCache)

    manager = service.rateLimiterManager
    assert manager is not None
    assert manager.getQueueMappings()["nominatim"] == "nominatim"
    await manager.applyLimit("nominatim")
    assert manager.getStats("nominatim")["minIntervalSeconds"] == 2.0

    await service.destroy()
    assert manager.listRateLimiters() == []


@pytest.mark.asyncio
async def testFromConfigWithoutApiKey(tmp_path, monkeypatch):
    monkeypatch.delenv("GEOSCOUT_TEST_GEOAPIFY_KEY", raising=False)
    configPath = tmp_path / "config.toml"
    configPath.write_text('[geoapify]\napi-key = "${GEOSCOUT_TEST_GEOAPIFY_KEY}"\n')

    service = await GeocodingService.fromConfig(ConfigManager(str(configPath), dotEnvFile=None))

    assert service.geoapifyClient is not None
    assert not service.geoapifyClient.isAvailable()
    with pytest.raises(ConfigurationError):
        await service.searchPlacesByTags(NYC_LAT, NYC_LON, ["pet.veterinary"])
    await service.destroy()


@pytest.mark.asyncio
async def testFromConfigExplicitRateLimiter(tmp_path):
    configPath = tmp_path / "config.toml"
    configPath.write_text(
        """
[ratelimiter.ratelimiters.slow]
type = "interval"
config = { minIntervalSeconds = 3.0 }

[ratelimiter.queues]
nominatim = "slow"
"""
    )

    service = await GeocodingService.fromConfig(ConfigManager(str(configPath), dotEnvFile=None))
    manager = service.rateLimiterManager

    assert manager is not None
    assert manager.getQueueMappings()["nominatim"] == "slow"
    assert "nominatim" not in manager.listRateLimiters()
    await service.destroy()
