"""
Wind measurement resolution service.

Drives station selection, source routing, blacklist-and-retry and
interpolation to estimate the wind at a point and time.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from ..algorithms import WindInterpolator, barycentric_weights, distance
from ..core import constants
from ..core.date_utils import DateUtils
from ..models import Reading, ResolutionResult, Station, StationSet
from .router import ReadingRouter, SourceRoute
from .selector import StationSelector

Point = Tuple[float, float]


@dataclass(frozen=True)
class RetryState:
    """
    Bounded retry state of one triangulated resolution.

    The blacklist only grows and the cycle count never exceeds max_cycles.
    """

    cycle: int = 0
    blacklist: FrozenSet[int] = field(default_factory=frozenset)
    max_cycles: int = constants.MAX_RESOLUTION_CYCLES

    @property
    def exhausted(self) -> bool:
        return self.cycle >= self.max_cycles

    def advance(self, failed_ids: Iterable[int]) -> "RetryState":
        """Move to the next cycle, blacklisting the stations that failed."""
        return replace(
            self,
            cycle=self.cycle + 1,
            blacklist=self.blacklist | frozenset(failed_ids),
        )


def find_match(readings: Sequence[Reading], target: datetime, minutes: int) -> Optional[Reading]:
    """
    Find the reading taken at the target time snapped to a granularity.

    Args:
        readings: Station readings
        target: Query timestamp
        minutes: Rounding granularity in minutes

    Returns:
        The matching reading or None
    """
    target_ms = DateUtils.floor_to_minutes(target, minutes)
    for reading in readings:
        if reading.timestamp_ms == target_ms:
            return reading
    return None


class WindResolver:
    """Resolve a wind estimate from a station network."""

    def __init__(
        self,
        router: ReadingRouter,
        selector: Optional[StationSelector] = None,
        interpolator: Optional[WindInterpolator] = None,
        now: Callable[[], datetime] = DateUtils.now_utc,
        max_cycles: int = constants.MAX_RESOLUTION_CYCLES,
        nearest_count: int = constants.NEAREST_STATION_COUNT,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize wind resolver.

        Args:
            router: Reading source router
            selector: Station selector
            interpolator: Wind interpolator
            now: Current time provider (injectable for tests)
            max_cycles: Retry cycle ceiling for triangulation
            nearest_count: Stations tried by k-nearest resolution
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.router = router
        self.selector = selector or StationSelector(self.logger)
        self.interpolator = interpolator or WindInterpolator(self.logger)
        self.now = now
        self.max_cycles = max_cycles
        self.nearest_count = nearest_count

    def resolve(
        self,
        station_set: StationSet,
        lat: float,
        lon: float,
        date: Union[str, datetime],
        now: Optional[datetime] = None
    ) -> Optional[ResolutionResult]:
        """
        Estimate the wind at a point and time from one station network.

        Inside the network bounds the surrounding triangle is tried first;
        the k-nearest stations are the final fallback in every case.

        Args:
            station_set: Responding stations of one kind
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees
            date: Query time (ISO-8601 string or datetime)
            now: Reference time (defaults to the current time)

        Returns:
            ResolutionResult, or None when no data is available
        """
        kind = station_set.kind
        target = DateUtils.coerce(date)
        now = DateUtils.to_utc(now) if now is not None else self.now()

        route = self.router.plan(kind, target, now)
        if route.rejected:
            self.logger.info(
                f"No {kind} source covers {target.isoformat()}, skipping resolution"
            )
            return None

        if not station_set.stations:
            self.logger.warning(f"Empty {kind} station catalog")
            return None

        point = (lat, lon)
        # Readings per (station id, cache route) for this call only
        fetched: Dict[Tuple[int, bool], List[Reading]] = {}

        result = None
        if station_set.contains(lat, lon):
            result = self._resolve_triangulated(point, station_set.stations, route, target, fetched)
        else:
            self.logger.debug(f"{point} outside {kind} network bounds")

        if result is None:
            self.logger.debug(f"Trying the {self.nearest_count} nearest {kind} stations to {point}")
            result = self._resolve_nearest(point, station_set.stations, route, target, fetched)

        if result is None:
            self.logger.info(f"No {kind} data for {point} at {target.isoformat()}")
        else:
            result.source = kind
            self.logger.info(
                f"Resolved {kind} wind for {point} at {target.isoformat()} by {result.method} "
                f"from stations {[s.id for s in result.stations]}"
            )
        return result

    def _resolve_triangulated(
        self,
        point: Point,
        stations: Sequence[Station],
        route: SourceRoute,
        target: datetime,
        fetched: Dict[Tuple[int, bool], List[Reading]]
    ) -> Optional[ResolutionResult]:
        state = RetryState(max_cycles=self.max_cycles)
        candidates: List[Station] = []
        series: Dict[int, List[Reading]] = {}
        # Matches from every cycle, kept when a later triangle drops the station
        matched: Dict[int, Tuple[Station, Reading]] = {}

        while not state.exhausted:
            selected = self.selector.surrounding_or_nearest(point, state.blacklist, stations)
            if not selected:
                self.logger.debug("Every station is blacklisted")
                break

            candidates, series = selected, {}
            failed = []
            for station in candidates:
                readings = self._fetch(station, route, target, fetched)
                series[station.id] = readings
                reading = find_match(readings, target, route.rounding_minutes)
                if reading is None:
                    failed.append(station.id)
                else:
                    matched[station.id] = (station, reading)

            state = state.advance(failed)
            self.logger.debug(
                f"Cycle {state.cycle}: candidates {[s.id for s in candidates]}, "
                f"failed {failed}"
            )

            if len(candidates) == 1:
                break
            if len(candidates) == constants.TRIANGLE_SIZE and not failed:
                break

        result = None
        if any(series.values()):
            matches = self._match(candidates, series, target, route.rounding_minutes)
            if not matches and route.kind == constants.GROUND:
                matches = self._match(
                    candidates, series, target, constants.GROUND_COARSE_ROUNDING_MINUTES
                )
            result = self._combine(point, candidates, matches)

        if result is None and matched:
            station, reading = min(matched.values(), key=lambda m: distance(point, m[0].point))
            self.logger.debug(f"Using station {station.id} matched in an earlier cycle")
            result = self._nearest_result(station, reading)

        return result

    def _resolve_nearest(
        self,
        point: Point,
        stations: Sequence[Station],
        route: SourceRoute,
        target: datetime,
        fetched: Dict[Tuple[int, bool], List[Reading]]
    ) -> Optional[ResolutionResult]:
        nearest = self.selector.k_nearest(point, self.nearest_count, stations)

        result = self._first_responding(nearest, route, target, fetched)
        if result is None and route.use_cache:
            self.logger.debug("Cache has none of the nearest stations, trying live source")
            result = self._first_responding(
                nearest, replace(route, use_cache=False), target, fetched
            )

        return result

    def _first_responding(
        self,
        stations: Sequence[Station],
        route: SourceRoute,
        target: datetime,
        fetched: Dict[Tuple[int, bool], List[Reading]]
    ) -> Optional[ResolutionResult]:
        for station in stations:
            readings = self._fetch(station, route, target, fetched)
            reading = self._find(readings, target, route)
            if reading is not None:
                return self._nearest_result(station, reading)
        return None

    def _fetch(
        self,
        station: Station,
        route: SourceRoute,
        target: datetime,
        fetched: Dict[Tuple[int, bool], List[Reading]]
    ) -> List[Reading]:
        """Fetch a station once per route, adding cached readings when the live view misses."""
        key = (station.id, route.use_cache)
        if key in fetched:
            return fetched[key]

        readings = self.router.fetch(station, route, target)
        if route.cache_fallback and self._find(readings, target, route) is None:
            cached: Dict[int, Reading] = {}
            for minutes in (route.rounding_minutes, constants.GROUND_COARSE_ROUNDING_MINUTES):
                for reading in self.router.fetch_cached(station, route.kind, target, minutes):
                    cached[reading.timestamp_ms] = reading
            if cached:
                self.logger.debug(f"Station {station.id}: {len(cached)} readings from cache")
                readings = sorted(list(readings) + list(cached.values()), key=lambda r: r.time)

        fetched[key] = readings
        return readings

    @staticmethod
    def _find(readings: Sequence[Reading], target: datetime, route: SourceRoute) -> Optional[Reading]:
        reading = find_match(readings, target, route.rounding_minutes)
        if reading is None and route.kind == constants.GROUND:
            reading = find_match(readings, target, constants.GROUND_COARSE_ROUNDING_MINUTES)
        return reading

    @staticmethod
    def _match(
        candidates: Sequence[Station],
        series: Dict[int, List[Reading]],
        target: datetime,
        minutes: int
    ) -> List[Tuple[Station, Reading]]:
        matches = []
        for station in candidates:
            reading = find_match(series.get(station.id, []), target, minutes)
            if reading is not None:
                matches.append((station, reading))
        return matches

    def _combine(
        self,
        point: Point,
        candidates: Sequence[Station],
        matches: List[Tuple[Station, Reading]]
    ) -> Optional[ResolutionResult]:
        if len(matches) == constants.TRIANGLE_SIZE and len(candidates) == constants.TRIANGLE_SIZE:
            weights = barycentric_weights(point, [s.point for s in candidates])
            wind_avg, wind_max, wind_dir = self.interpolator.interpolate(
                [reading for _, reading in matches], weights
            )
            return ResolutionResult(
                stations=list(candidates),
                method=constants.METHOD_INTERPOLATION,
                wind_avg=wind_avg,
                wind_max=wind_max,
                wind_dir=wind_dir,
            )

        if matches:
            station, reading = matches[0]
            return self._nearest_result(station, reading)

        return None

    @staticmethod
    def _nearest_result(station: Station, reading: Reading) -> ResolutionResult:
        return ResolutionResult(
            stations=[station],
            method=constants.METHOD_NEAREST,
            wind_avg=reading.wind_avg,
            wind_max=reading.wind_max,
            wind_dir=reading.wind_dir,
        )
