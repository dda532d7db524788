"""
geoscout - geocoding and nearby places lookup from the command line.

Examples:
    python main.py geocode "123 Main St" --city Springfield --state IL
    python main.py reverse 40.7128 -74.0060
    python main.py nearby 40.7128 -74.0060 veterinary --radius 5
    python main.py places 40.7128 -74.0060 pet.veterinary pet.shop
    python main.py distance 40.7128 -74.0060 51.5074 -0.1278
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from typing import Any, List, Optional

from geoscout.config import ConfigManager
from geoscout.distance import distanceKm
from geoscout.exceptions import GeoError
from geoscout.logging_utils import initLogging
from geoscout.models import PlaceSearchRequest
from geoscout.service import GeocodingService

# Configure basic logging first, stdout is reserved for JSON output
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.WARNING, stream=sys.stderr
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

SECRET_KEYS = ("api-key", "token", "password", "secret")


def parseArguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="geoscout - geocoding and nearby places lookup, dood!")
    parser.add_argument(
        "-c",
        "--config",
        default="config.toml",
        help="Path to configuration file (default: config.toml)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (can be specified multiple times), dood!",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Pretty-print loaded configuration and exit, dood!",
    )

    subparsers = parser.add_subparsers(dest="command")

    geocodeParser = subparsers.add_parser("geocode", help="Convert an address into coordinates")
    geocodeParser.add_argument("address", help="Street address")
    geocodeParser.add_argument("--city")
    geocodeParser.add_argument("--state")
    geocodeParser.add_argument("--postal-code", dest="postalCode")

    reverseParser = subparsers.add_parser("reverse", help="Convert coordinates into an address")
    reverseParser.add_argument("latitude", type=float)
    reverseParser.add_argument("longitude", type=float)

    nearbyParser = subparsers.add_parser(
        "nearby", help="Find places by service type (grooming, veterinary, shop, ...) or free text"
    )
    nearbyParser.add_argument("latitude", type=float)
    nearbyParser.add_argument("longitude", type=float)
    nearbyParser.add_argument("what", help="Service type, or search text with --text")
    nearbyParser.add_argument("--text", action="store_true", help="Treat WHAT as free-text query")
    nearbyParser.add_argument("--radius", type=float, default=10.0, help="Radius in km (default: 10)")
    nearbyParser.add_argument("--limit", type=int, default=20, help="Maximum results (default: 20)")
    nearbyParser.add_argument(
        "--provider",
        action="append",
        dest="providers",
        help="Provider to try, in order (can be specified multiple times)",
    )

    placesParser = subparsers.add_parser("places", help="Find places by Geoapify categories")
    placesParser.add_argument("latitude", type=float)
    placesParser.add_argument("longitude", type=float)
    placesParser.add_argument("categories", nargs="+", help="Categories, e.g. pet.veterinary")
    placesParser.add_argument("--radius", type=float, default=10.0, help="Radius in km (default: 10)")
    placesParser.add_argument("--limit", type=int, default=50, help="Maximum results (default: 50)")

    distanceParser = subparsers.add_parser("distance", help="Great-circle distance between two points in km")
    distanceParser.add_argument("lat1", type=float)
    distanceParser.add_argument("lon1", type=float)
    distanceParser.add_argument("lat2", type=float)
    distanceParser.add_argument("lon2", type=float)

    args = parser.parse_args(argv)
    if args.command is None and not args.print_config:
        parser.error("a command is required")

    args.config = os.path.abspath(args.config)
    if args.config_dir:
        args.config_dir = [os.path.abspath(dirPath) for dirPath in args.config_dir]

    return args


def maskSecrets(value: Any) -> Any:
    """Copy of the config with secret values replaced by '***'."""
    if isinstance(value, dict):
        return {
            k: "***" if any(secret in str(k).lower() for secret in SECRET_KEYS) and v else maskSecrets(v)
            for k, v in value.items()
        }
    elif isinstance(value, list):
        return [maskSecrets(item) for item in value]
    return value


def prettyPrintConfig(configManager: ConfigManager) -> None:
    """Pretty-print the loaded configuration, dood!"""
    print(json.dumps(maskSecrets(configManager.config), indent=2, ensure_ascii=False, sort_keys=True))


def toJson(value: Any) -> str:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    elif isinstance(value, list):
        value = [dataclasses.asdict(item) if dataclasses.is_dataclass(item) else item for item in value]
    return json.dumps(value, indent=2, ensure_ascii=False)


async def runCommand(service: GeocodingService, args: argparse.Namespace) -> Any:
    """Run one sub-command against the service and return its result."""
    match args.command:
        case "geocode":
            return await service.geocodeAddress(
                args.address, city=args.city, state=args.state, postalCode=args.postalCode
            )
        case "reverse":
            return await service.reverseGeocode(args.latitude, args.longitude)
        case "nearby":
            if args.text or args.providers:
                request = PlaceSearchRequest(
                    latitude=args.latitude,
                    longitude=args.longitude,
                    query=args.what,
                    radiusKm=args.radius,
                    limit=args.limit,
                    providerOrder=args.providers,
                )
                return await service.searchNearby(request)
            return await service.findNearbyByServiceType(
                args.latitude, args.longitude, args.what, radiusKm=args.radius, limit=args.limit
            )
        case "places":
            return await service.searchPlacesByTags(
                args.latitude, args.longitude, args.categories, radiusKm=args.radius, limit=args.limit
            )
        case _:
            raise ValueError(f"Unknown command: {args.command}")


async def runWithConfig(configManager: ConfigManager, args: argparse.Namespace) -> Any:
    service = await GeocodingService.fromConfig(configManager)
    try:
        return await runCommand(service, args)
    finally:
        await service.destroy()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point, returns the process exit code."""
    args = parseArguments(argv)

    try:
        # Distance needs neither config nor network
        if args.command == "distance" and not args.print_config:
            print(toJson({"distanceKm": distanceKm(args.lat1, args.lon1, args.lat2, args.lon2)}))
            return 0

        configManager = ConfigManager(configPath=args.config, configDirs=args.config_dir)
        if args.print_config:
            prettyPrintConfig(configManager)
            return 0

        initLogging(configManager.getLoggingConfig())
        result = asyncio.run(runWithConfig(configManager, args))
        print(toJson(result))
        return 0
    except GeoError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(toJson({"error": type(e).__name__, "message": str(e), "statusCode": e.statusCode}))
        return 1
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        return 2
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
