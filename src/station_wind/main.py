"""
Main entry point for the wind resolution system.

Answers wind queries for a point and time, and refreshes the observation
cache from the live station networks.
"""

import json
import sys
from datetime import datetime
from typing import Any, Dict, Optional, Union

from .core import Config, setup_logger, LoggerContext, constants
from .core.date_utils import DateUtils
from .api import create_station_reader
from .processing import QueryValidator
from .services import (
    CacheStore,
    ObservationIngestor,
    ReadingRouter,
    StationCatalog,
    WindResolver,
)
from .services.router import age_ms


class StationWindApp:
    """Main application for wind measurement resolution."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize application.

        Args:
            config_file: Path to configuration file
        """
        self.config = Config(config_file)

        self.logger = setup_logger(
            log_file=self.config.log_file,
            log_level=self.config.log_level
        )
        self.logger.debug(f"Configuration: {self.config}")

        self.readers: Dict[str, Any] = {}
        self.catalog: Optional[StationCatalog] = None
        self.router: Optional[ReadingRouter] = None
        self.resolver: Optional[WindResolver] = None
        self.validator = QueryValidator(self.logger)

    def initialize_components(self) -> None:
        """Initialize all application components."""
        if self.resolver is not None:
            return

        self.catalog = StationCatalog.from_config(self.config, self.logger)

        self.readers = {
            kind: create_station_reader(self.config, kind, self.logger)
            for kind in constants.STATION_KINDS
        }
        caches = {
            kind: CacheStore(self.config.cache_path(kind), logger=self.logger)
            for kind in constants.STATION_KINDS
        }

        self.router = ReadingRouter(
            readers=self.readers,
            caches=caches,
            request_delay=self.config.request_delay,
            logger=self.logger
        )
        self.resolver = WindResolver(router=self.router, logger=self.logger)

    def search(
        self,
        lat: float,
        lon: float,
        date: Union[str, datetime, None] = None,
        kind: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Resolve the wind at a point and time.

        Without an explicit kind, air stations are tried first and ground
        stations second when the query is within the ground history horizon.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees
            date: ISO-8601 time (defaults to now)
            kind: "air", "ground" or None for both

        Returns:
            Result dictionary, or an empty dictionary when no data exists or
            the query is invalid
        """
        if not self.validator.validate_query(lat, lon, date, kind):
            return {}

        self.initialize_components()

        now = DateUtils.now_utc()
        target = DateUtils.coerce(date) if date is not None else now

        kinds = [kind] if kind else [constants.AIR, constants.GROUND]
        for current in kinds:
            if (
                kind is None and current == constants.GROUND and
                age_ms(target, now) >= constants.GROUND_HORIZON_MS
            ):
                break

            station_set = self.catalog.load(current)
            result = self.resolver.resolve(station_set, lat, lon, target, now=now)
            if result is not None:
                return result.to_dict()

        return {}

    def ingest(self, kind: str = constants.AIR, repeat: bool = False) -> None:
        """
        Refresh the observation cache of a station kind.

        Args:
            kind: Station kind
            repeat: Keep ingesting on the configured interval
        """
        self.initialize_components()

        ingestor = ObservationIngestor(
            catalog=self.catalog,
            router=self.router,
            retention_days=self.config.cache_retention_days,
            logger=self.logger
        )

        if repeat:
            ingestor.run_forever(kind, self.config.ingestion_interval_hours)
        else:
            ingestor.run(kind)

    def close(self) -> None:
        for reader in self.readers.values():
            reader.close()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Station network wind resolution"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Resolve the wind at a point")
    search_parser.add_argument("lat", type=float, help="Latitude")
    search_parser.add_argument("lon", type=float, help="Longitude")
    search_parser.add_argument(
        "date",
        nargs="?",
        default=None,
        help="ISO-8601 time (default: now)"
    )
    search_parser.add_argument(
        "--kind",
        choices=constants.STATION_KINDS,
        default=None,
        help="Station network (default: air, then ground)"
    )

    ingest_parser = subparsers.add_parser("ingest", help="Refresh the observation cache")
    ingest_parser.add_argument(
        "--kind",
        choices=constants.STATION_KINDS,
        default=constants.AIR,
        help="Station network to ingest"
    )
    ingest_parser.add_argument(
        "--repeat",
        action="store_true",
        help="Keep ingesting on the configured interval"
    )

    args = parser.parse_args()

    try:
        app = StationWindApp(config_file=args.config)
    except (OSError, ValueError) as e:
        print(f"Configuration failed: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "search":
            result = app.search(args.lat, args.lon, args.date, args.kind)
            print(json.dumps(result, ensure_ascii=False))
        else:
            with LoggerContext(app.logger, f"{args.kind} ingestion"):
                app.ingest(args.kind, repeat=args.repeat)
    except KeyboardInterrupt:
        app.logger.info("Interrupted")
    except Exception as e:
        app.logger.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        app.close()


if __name__ == "__main__":
    main()
