"""
Observation ingestion service.

Refreshes a station kind's observation cache from the live source.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..core import LoggerContext, constants
from ..core.date_utils import DateUtils
from .cache_store import CacheStore
from .catalog import StationCatalog
from .router import ReadingRouter


@dataclass
class IngestionSummary:
    """Outcome of one ingestion cycle."""

    kind: str
    stations_polled: int = 0
    stations_responding: int = 0
    rows_inserted: int = 0
    rows_pruned: int = 0
    duration_seconds: float = 0.0


class ObservationIngestor:
    """Poll every catalog station and append its readings to the cache."""

    def __init__(
        self,
        catalog: StationCatalog,
        router: ReadingRouter,
        retention_days: int = constants.CACHE_RETENTION_DAYS,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize observation ingestor.

        Args:
            catalog: Station catalog
            router: Reading router (its live sources, caches and pacing are used)
            retention_days: Days of observations kept in the cache
            sleep: Sleep function between repeated runs (injectable for tests)
            logger: Logger instance
        """
        self.catalog = catalog
        self.router = router
        self.retention_ms = retention_days * constants.DAY_MS
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)

    def run(self, kind: str = constants.AIR) -> IngestionSummary:
        """
        Run one ingestion cycle for a station kind.

        Old rows are pruned first, then each station's short live view is
        stored. Stations that fail are skipped.

        Args:
            kind: Station kind

        Returns:
            IngestionSummary with counts for the cycle

        Raises:
            ValueError: If no cache store is configured for the kind
        """
        cache: Optional[CacheStore] = self.router.caches.get(kind)
        if cache is None:
            raise ValueError(f"No cache store configured for {kind} stations")

        summary = IngestionSummary(kind=kind)
        station_set = self.catalog.load(kind)

        with LoggerContext(self.logger, f"{kind} cache prune", level=logging.DEBUG):
            summary.rows_pruned = cache.prune(
                self.retention_ms, DateUtils.to_ms(DateUtils.now_utc())
            )

        with LoggerContext(self.logger, f"{kind} observation ingestion") as ctx:
            for station in station_set.stations:
                summary.stations_polled += 1
                readings = self.router.fetch_live(station, kind, extended_history=False)
                if not readings:
                    self.logger.debug(f"Station {station.id} ({station.name}) returned nothing")
                    continue

                summary.stations_responding += 1
                summary.rows_inserted += cache.put(station.id, readings)
        summary.duration_seconds = ctx.duration

        self.logger.info(
            f"Ingested {summary.rows_inserted} readings from "
            f"{summary.stations_responding}/{summary.stations_polled} {kind} stations, "
            f"pruned {summary.rows_pruned}"
        )
        return summary

    def run_forever(
        self,
        kind: str = constants.AIR,
        interval_hours: float = constants.DEFAULT_INGESTION_INTERVAL_HOURS,
        max_runs: Optional[int] = None
    ) -> None:
        """
        Repeat ingestion on a fixed interval.

        Args:
            kind: Station kind
            interval_hours: Hours between the start of consecutive runs
            max_runs: Stop after this many runs (None runs until interrupted)
        """
        runs = 0
        while max_runs is None or runs < max_runs:
            started = time.monotonic()
            try:
                self.run(kind)
            except (OSError, ValueError) as e:
                self.logger.error(f"Ingestion cycle for {kind} failed: {e}", exc_info=True)
            runs += 1

            if max_runs is not None and runs >= max_runs:
                break

            remaining = interval_hours * 3600 - (time.monotonic() - started)
            if remaining > 0:
                self.logger.info(f"Next {kind} ingestion in {remaining / 60:.0f} minutes")
                self.sleep(remaining)
