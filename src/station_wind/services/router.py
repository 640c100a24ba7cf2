"""
Reading source routing service.

Decides per query whether readings come from a live station fetch or from
the observation cache, and paces live requests.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol, TYPE_CHECKING

from ..core import constants
from ..core.date_utils import DateUtils
from ..models import Reading, Station

if TYPE_CHECKING:
    from .cache_store import CacheStore


class LiveSource(Protocol):
    """Anything that can fetch a station's live observation table."""

    def fetch_live(self, station_id: int, extended_history: bool = False) -> List[Reading]:
        ...


def age_ms(target: datetime, now: datetime) -> int:
    """Age of a query timestamp relative to now, in milliseconds."""
    return DateUtils.to_ms(now) - DateUtils.to_ms(target)


def is_fresh(target: datetime, now: datetime) -> bool:
    """Air queries younger than the freshness threshold go to the live source."""
    return age_ms(target, now) < constants.AIR_FRESHNESS_MS


def is_stale(target: datetime, now: datetime) -> bool:
    """Ground queries older than the staleness threshold need the 6 day view."""
    return age_ms(target, now) > constants.GROUND_STALENESS_MS


def is_beyond_ground_horizon(target: datetime, now: datetime) -> bool:
    """No source can serve ground queries older than the 6 day view."""
    return age_ms(target, now) > constants.GROUND_HORIZON_MS


def rounding_minutes(kind: str) -> int:
    if kind == constants.GROUND:
        return constants.GROUND_ROUNDING_MINUTES
    return constants.AIR_ROUNDING_MINUTES


@dataclass(frozen=True)
class SourceRoute:
    """Where and how readings for one query are obtained."""

    kind: str
    use_cache: bool
    extended_history: bool
    rejected: bool
    rounding_minutes: int
    # Consult the cache when the live view has no reading at the target time
    cache_fallback: bool = False


class ReadingRouter:
    """Route reading fetches to the live source or the cache."""

    def __init__(
        self,
        readers: Dict[str, LiveSource],
        caches: Dict[str, "CacheStore"],
        request_delay: float = constants.DEFAULT_REQUEST_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reading router.

        Args:
            readers: Live source per station kind
            caches: Cache store per station kind
            request_delay: Minimum seconds between consecutive live requests
            sleep: Sleep function (injectable for tests)
            clock: Monotonic clock (injectable for tests)
            logger: Logger instance
        """
        self.readers = readers
        self.caches = caches
        self.request_delay = request_delay
        self.sleep = sleep
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self._last_request: Optional[float] = None
        self._pace_lock = threading.Lock()

    def plan(self, kind: str, target: datetime, now: datetime) -> SourceRoute:
        """
        Classify a query by the age of its timestamp.

        Air: fresh queries are fetched live, older ones from the cache.
        Ground: live first, with the extended view for stale queries, and
        the ground cache when the live view has no matching reading;
        queries past the 6 day horizon are rejected.

        Raises:
            ValueError: If the kind is unknown
        """
        if kind == constants.AIR:
            return SourceRoute(
                kind=kind,
                use_cache=not is_fresh(target, now),
                extended_history=False,
                rejected=False,
                rounding_minutes=rounding_minutes(kind),
            )

        if kind == constants.GROUND:
            return SourceRoute(
                kind=kind,
                use_cache=False,
                extended_history=is_stale(target, now),
                rejected=is_beyond_ground_horizon(target, now),
                rounding_minutes=rounding_minutes(kind),
                cache_fallback=True,
            )

        raise ValueError(f"Unknown station kind: {kind}")

    def fetch(self, station: Station, route: SourceRoute, target: datetime) -> List[Reading]:
        """
        Fetch readings for a station along a route.

        Args:
            station: Station to query
            route: Planned route for the query
            target: Query timestamp

        Returns:
            The station's readings (a single cached reading or the live
            table), empty when the station has nothing
        """
        if route.rejected:
            return []

        if route.use_cache:
            return self.fetch_cached(station, route.kind, target)

        return self.fetch_live(station, route.kind, route.extended_history)

    def fetch_cached(
        self,
        station: Station,
        kind: str,
        target: datetime,
        minutes: Optional[int] = None
    ) -> List[Reading]:
        """Look up the cached reading at the rounded timestamp (kind granularity by default)."""
        cache = self.caches.get(kind)
        if cache is None:
            self.logger.warning(f"No cache store configured for {kind} stations")
            return []

        timestamp_ms = DateUtils.floor_to_minutes(target, minutes or rounding_minutes(kind))
        reading = cache.get(station.id, timestamp_ms)
        return [reading] if reading is not None else []

    def fetch_live(self, station: Station, kind: str, extended_history: bool) -> List[Reading]:
        """
        Fetch a station's live table, respecting the inter-request delay.

        Any failure of the live source counts as no readings.
        """
        reader = self.readers.get(kind)
        if reader is None:
            self.logger.warning(f"No live source configured for {kind} stations")
            return []

        self._pace()
        try:
            readings = reader.fetch_live(station.id, extended_history)
        except Exception as e:
            self.logger.error(
                f"Live fetch failed for {kind} station {station.id} ({station.name}): {e}",
                exc_info=True
            )
            return []

        return list(readings or [])

    def _pace(self) -> None:
        # Held while sleeping so concurrent callers share one request cadence
        with self._pace_lock:
            if self._last_request is not None and self.request_delay > 0:
                wait = self.request_delay - (self.clock() - self._last_request)
                if wait > 0:
                    self.sleep(wait)
            self._last_request = self.clock()
