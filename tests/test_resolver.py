"""
Tests for wind measurement resolution.
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from src.station_wind.algorithms import barycentric_weights
from src.station_wind.models import Bounds, Station, StationSet
from src.station_wind.services.cache_store import CacheStore
from src.station_wind.services.resolver import RetryState, WindResolver, find_match
from src.station_wind.services.router import ReadingRouter
from src.station_wind.services.selector import StationSelector

from conftest import NOW, QUERY_POINT, FakeReader, make_reading


RECENT = NOW - timedelta(minutes=10)  # 11:57 -> 11:50
RECENT_SLOT = NOW.replace(hour=11, minute=50)


def empty_cache():
    cache = Mock(spec=CacheStore)
    cache.get.return_value = None
    return cache


def build_resolver(
    air_reader=None,
    ground_reader=None,
    air_cache=None,
    ground_cache=None,
    selector=None,
    max_cycles=3
):
    router = ReadingRouter(
        readers={"air": air_reader or FakeReader(), "ground": ground_reader or FakeReader()},
        caches={"air": air_cache or empty_cache(), "ground": ground_cache or empty_cache()},
        request_delay=0,
        logger=Mock()
    )
    return WindResolver(
        router, selector=selector, now=lambda: NOW, max_cycles=max_cycles, logger=Mock()
    )


def ring_network(rings):
    """Concentric triangles around (0, 0); every ring surrounds the origin."""
    stations = []
    for r in range(1, rings + 1):
        base = r * 10
        stations.extend([
            Station(id=base + 1, name=f"ring{r}-a", lat=float(r), lon=0.0),
            Station(id=base + 2, name=f"ring{r}-b", lat=-0.5 * r, lon=0.866 * r),
            Station(id=base + 3, name=f"ring{r}-c", lat=-0.5 * r, lon=-0.866 * r),
        ])
    return StationSet(kind="air", stations=tuple(stations), bounds=Bounds.from_stations(stations))


class TestRetryState:
    """Test the bounded retry state machine."""

    def test_starts_empty(self):
        state = RetryState()
        assert state.cycle == 0
        assert state.blacklist == frozenset()
        assert not state.exhausted

    def test_advance_grows_blacklist(self):
        state = RetryState().advance([1, 2]).advance([3])

        assert state.cycle == 2
        assert state.blacklist == {1, 2, 3}

    def test_exhausted_after_max_cycles(self):
        state = RetryState(max_cycles=3)
        for _ in range(3):
            state = state.advance([])
        assert state.exhausted


class TestFindMatch:
    """Test timestamp matching."""

    def test_matches_rounded_target(self):
        readings = [make_reading(RECENT_SLOT - timedelta(minutes=10)), make_reading(RECENT_SLOT)]
        assert find_match(readings, RECENT, 10) is readings[1]

    def test_no_match(self):
        readings = [make_reading(RECENT_SLOT - timedelta(minutes=10))]
        assert find_match(readings, RECENT, 10) is None


class TestTriangulatedResolution:
    """Test resolution inside the station network."""

    def test_interpolates_surrounding_stations(self, air_stations):
        reader = FakeReader({
            101: [make_reading(RECENT_SLOT - timedelta(minutes=10)),
                  make_reading(RECENT_SLOT, wind_avg=4.0, wind_max=7.0, wind_dir=80.0)],
            102: [make_reading(RECENT_SLOT, wind_avg=6.0, wind_max=9.0, wind_dir=100.0)],
            103: [make_reading(RECENT_SLOT, wind_avg=8.0, wind_max=12.0, wind_dir=120.0)],
        })
        resolver = build_resolver(air_reader=reader)

        result = resolver.resolve(air_stations, *QUERY_POINT, RECENT)

        weights = barycentric_weights(
            QUERY_POINT, [(65.35, -14.4), (65.25, -14.5), (65.24, -14.3)]
        )
        assert result.method == "interpolation"
        assert [s.id for s in result.stations] == [101, 102, 103]
        assert sum(weights) == pytest.approx(1.0, abs=1e-9)
        assert result.wind_avg == pytest.approx(4 * weights[0] + 6 * weights[1] + 8 * weights[2])
        assert result.wind_max == pytest.approx(7 * weights[0] + 9 * weights[1] + 12 * weights[2])
        assert result.wind_dir == pytest.approx(80 * weights[0] + 100 * weights[1] + 120 * weights[2])
        assert result.source == "air"
        assert reader.station_ids == [101, 102, 103]

    def test_equal_readings_survive_interpolation(self, air_stations):
        reader = FakeReader({sid: [make_reading(RECENT_SLOT, wind_avg=6.0)] for sid in (101, 102, 103)})
        result = build_resolver(air_reader=reader).resolve(air_stations, *QUERY_POINT, RECENT)

        assert result.wind_avg == pytest.approx(6.0)

    def test_failed_station_is_replaced(self, air_stations):
        reader = FakeReader({
            101: [make_reading(RECENT_SLOT)],
            102: [make_reading(RECENT_SLOT)],
            104: [make_reading(RECENT_SLOT)],
        })
        resolver = build_resolver(air_reader=reader)

        result = resolver.resolve(air_stations, *QUERY_POINT, RECENT)

        assert result.method == "interpolation"
        assert [s.id for s in result.stations] == [101, 102, 104]
        # 101 and 102 are not fetched twice
        assert reader.station_ids == [101, 102, 103, 104]

    def test_erroring_station_is_blacklisted(self, air_stations):
        reader = FakeReader(
            {sid: [make_reading(RECENT_SLOT)] for sid in (101, 102, 103, 104)},
            errors=[103]
        )
        result = build_resolver(air_reader=reader).resolve(air_stations, *QUERY_POINT, RECENT)

        assert [s.id for s in result.stations] == [101, 102, 104]

    def test_blacklist_is_monotonic(self, air_stations):
        selector = Mock(wraps=StationSelector())
        reader = FakeReader({101: [make_reading(RECENT_SLOT)]})
        resolver = build_resolver(air_reader=reader, selector=selector)

        resolver.resolve(air_stations, *QUERY_POINT, RECENT)

        blacklists = [set(c.args[1]) for c in selector.surrounding_or_nearest.call_args_list]

        assert len(blacklists) == 3
        for earlier, later in zip(blacklists, blacklists[1:]):
            assert earlier <= later
        assert blacklists[1] == {102, 103}
        assert blacklists[2] == {102, 103, 104, 105}

    def test_single_station_fallback_returns_nearest(self, air_stations):
        # 102/103 fail, then 104/105 fail, leaving only 101 and 106
        reader = FakeReader({101: [make_reading(RECENT_SLOT, wind_avg=3.0)]})
        result = build_resolver(air_reader=reader).resolve(air_stations, *QUERY_POINT, RECENT)

        assert result.method == "nearest"
        assert [s.id for s in result.stations] == [101]
        assert result.wind_avg == 3.0

    def test_single_candidate_stops_retrying(self):
        stations = (
            Station(id=1, name="a", lat=0.0, lon=0.0),
            Station(id=2, name="b", lat=1.0, lon=1.0),
        )
        station_set = StationSet(kind="air", stations=stations, bounds=Bounds.from_stations(stations))
        selector = Mock(wraps=StationSelector())
        reader = FakeReader()

        result = build_resolver(air_reader=reader, selector=selector).resolve(
            station_set, 0.4, 0.5, RECENT
        )

        assert result is None
        assert selector.surrounding_or_nearest.call_count == 1
        # Station 2 is only tried by the k-nearest fallback
        assert reader.station_ids == [1, 2]

    def test_retry_cap(self):
        station_set = ring_network(4)
        selector = Mock(wraps=StationSelector())
        reader = FakeReader()

        result = build_resolver(air_reader=reader, selector=selector).resolve(
            station_set, 0.0, 0.0, RECENT
        )

        assert result is None
        assert selector.surrounding_or_nearest.call_count == 3
        assert sorted(reader.station_ids) == [11, 12, 13, 21, 22, 23, 31, 32, 33]

    def test_no_matching_time_yields_nothing(self, air_stations):
        stale_slot = RECENT_SLOT - timedelta(hours=1)
        reader = FakeReader({sid: [make_reading(stale_slot)] for sid in range(101, 107)})

        result = build_resolver(air_reader=reader).resolve(air_stations, *QUERY_POINT, RECENT)

        assert result is None

    def test_old_air_query_reads_cache(self, air_stations):
        target = NOW - timedelta(hours=6)  # 06:07 -> 06:00
        slot = NOW.replace(hour=6, minute=0)
        cache = Mock(spec=CacheStore)
        cache.get.side_effect = lambda station_id, ts: make_reading(slot, wind_avg=float(station_id - 100))
        reader = FakeReader()

        result = build_resolver(air_reader=reader, air_cache=cache).resolve(
            air_stations, *QUERY_POINT, target
        )

        assert result.method == "interpolation"
        assert reader.calls == []
        for c in cache.get.call_args_list:
            assert c.args[1] == make_reading(slot).timestamp_ms

    def test_inside_bounds_falls_back_to_nearest_live(self, air_stations):
        target = NOW - timedelta(hours=5)  # 07:07 -> 07:00, served by the cache
        slot = NOW.replace(hour=7, minute=0)
        reader = FakeReader({
            101: [make_reading(slot, wind_avg=3.0)],
            102: [make_reading(slot)],
            103: [make_reading(slot)],
        })

        result = build_resolver(air_reader=reader).resolve(air_stations, *QUERY_POINT, target)

        assert result.method == "nearest"
        assert [s.id for s in result.stations] == [101]
        assert result.wind_avg == 3.0
        assert result.source == "air"
        assert reader.station_ids == [101]

    def test_earlier_match_survives_dropped_triangle(self):
        # Cycle 1 picks (p1, p2, a); once p1 and p2 fail, cycle 2 picks
        # (p3, x, y), which no longer contains a
        stations = (
            Station(id=1, name="p1", lat=1.0, lon=0.0),
            Station(id=2, name="p2", lat=1.0833, lon=0.1910),
            Station(id=3, name="p3", lat=1.1276, lon=0.4104),
            Station(id=4, name="a", lat=-1.2950, lon=-0.1133),
            Station(id=5, name="x", lat=-1.3523, lon=-0.3623),
            Station(id=6, name="y", lat=1.4772, lon=0.2605),
        )
        station_set = StationSet(kind="air", stations=stations, bounds=Bounds.from_stations(stations))
        reader = FakeReader({4: [make_reading(RECENT_SLOT, wind_avg=2.5)]})

        result = build_resolver(air_reader=reader, max_cycles=2).resolve(
            station_set, 0.0, 0.0, RECENT
        )

        assert reader.station_ids == [1, 2, 4, 3, 5, 6]
        assert result.method == "nearest"
        assert [s.id for s in result.stations] == [4]
        assert result.wind_avg == 2.5


class TestGroundResolution:
    """Test ground network specifics."""

    def test_beyond_horizon_is_rejected_without_fetch(self, ground_stations):
        reader = FakeReader({sid: [make_reading(NOW - timedelta(days=7))] for sid in (201, 202, 203)})
        resolver = build_resolver(ground_reader=reader)

        result = resolver.resolve(ground_stations, *QUERY_POINT, NOW - timedelta(days=7))

        assert result is None
        assert reader.calls == []

    def test_hourly_match(self, ground_stations):
        target = NOW - timedelta(hours=1)  # 11:07 -> 11:00
        slot = NOW.replace(hour=11, minute=0)
        reader = FakeReader({sid: [make_reading(slot)] for sid in (201, 202, 203)})

        result = build_resolver(ground_reader=reader).resolve(ground_stations, *QUERY_POINT, target)

        assert result.method == "interpolation"
        assert result.source == "ground"
        assert all(extended is False for _, extended in reader.calls)

    def test_three_hourly_stations_use_coarse_rounding(self, ground_stations):
        target = NOW - timedelta(hours=1)  # 11:07 -> 11:00, coarse 09:00
        coarse_slot = NOW.replace(hour=9, minute=0)
        reader = FakeReader({
            sid: [make_reading(coarse_slot, wind_avg=5.0)] for sid in (201, 202, 203)
        })

        result = build_resolver(ground_reader=reader).resolve(ground_stations, *QUERY_POINT, target)

        assert result.method == "interpolation"
        assert result.wind_avg == pytest.approx(5.0)

    def test_stale_query_uses_extended_history(self, ground_stations):
        target = NOW - timedelta(days=2)
        reader = FakeReader()

        build_resolver(ground_reader=reader).resolve(ground_stations, *QUERY_POINT, target)

        assert reader.calls
        assert all(extended is True for _, extended in reader.calls)


    def test_ground_cache_fills_missing_live_readings(self, ground_stations):
        target = NOW - timedelta(hours=1)  # 11:07 -> 11:00
        slot_ms = make_reading(NOW.replace(hour=11, minute=0)).timestamp_ms
        coarse_ms = make_reading(NOW.replace(hour=9, minute=0)).timestamp_ms
        cache = empty_cache()
        cache.get.side_effect = lambda station_id, ts: (
            make_reading(NOW.replace(hour=11, minute=0), wind_avg=4.0) if ts == slot_ms else None
        )
        reader = FakeReader()

        result = build_resolver(ground_reader=reader, ground_cache=cache).resolve(
            ground_stations, *QUERY_POINT, target
        )

        assert result.method == "interpolation"
        assert result.source == "ground"
        assert result.wind_avg == pytest.approx(4.0)
        assert reader.station_ids == [201, 202, 203]
        looked_up = {c.args[1] for c in cache.get.call_args_list}
        assert looked_up == {slot_ms, coarse_ms}

    def test_ground_cache_coarse_slot(self, ground_stations):
        target = NOW - timedelta(hours=1)  # 11:07 -> coarse 09:00
        coarse = NOW.replace(hour=9, minute=0)
        cache = empty_cache()
        cache.get.side_effect = lambda station_id, ts: (
            make_reading(coarse) if ts == make_reading(coarse).timestamp_ms else None
        )

        result = build_resolver(ground_cache=cache).resolve(ground_stations, *QUERY_POINT, target)

        assert result.method == "interpolation"

    def test_live_match_skips_ground_cache(self, ground_stations):
        target = NOW - timedelta(hours=1)
        slot = NOW.replace(hour=11, minute=0)
        reader = FakeReader({sid: [make_reading(slot)] for sid in (201, 202, 203)})
        cache = empty_cache()

        build_resolver(ground_reader=reader, ground_cache=cache).resolve(
            ground_stations, *QUERY_POINT, target
        )

        cache.get.assert_not_called()


class TestNearestResolution:
    """Test k-nearest resolution outside the network bounds."""

    OUTSIDE = (70.0, -14.4)

    def test_first_responding_station(self, air_stations):
        reader = FakeReader({
            102: [make_reading(RECENT_SLOT, wind_avg=2.0)],
            103: [make_reading(RECENT_SLOT, wind_avg=9.0)],
        })

        result = build_resolver(air_reader=reader).resolve(air_stations, *self.OUTSIDE, RECENT)

        assert result.method == "nearest"
        assert [s.id for s in result.stations] == [102]
        assert result.wind_avg == 2.0
        assert reader.station_ids == [101, 102]

    def test_fresh_query_without_data(self, air_stations):
        reader = FakeReader()

        result = build_resolver(air_reader=reader).resolve(air_stations, *self.OUTSIDE, RECENT)

        assert result is None
        assert reader.station_ids == [101, 102, 103]

    def test_cache_miss_falls_back_to_live(self, air_stations):
        target = NOW - timedelta(hours=5)  # 07:07 -> 07:00
        slot = NOW.replace(hour=7, minute=0)
        reader = FakeReader({103: [make_reading(slot, wind_avg=7.5)]})

        result = build_resolver(air_reader=reader).resolve(air_stations, *self.OUTSIDE, target)

        assert result.method == "nearest"
        assert [s.id for s in result.stations] == [103]
        assert reader.station_ids == [101, 102, 103]

    def test_empty_catalog(self):
        station_set = StationSet(kind="air", stations=(), bounds=Bounds(0, 1, 0, 1))
        assert build_resolver().resolve(station_set, 0.5, 0.5, RECENT) is None
