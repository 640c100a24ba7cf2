"""
Tests for the wind interpolator.
"""

from datetime import datetime

import pytest
import pytz

from src.station_wind.algorithms import WindInterpolator
from src.station_wind.models import Reading


def circular_distance(a, b):
    diff = abs(a - b) % 360
    return min(diff, 360 - diff)


def readings_with(directions, avgs=(4.0, 6.0, 8.0), maxes=(7.0, 9.0, 11.0)):
    time = datetime(2024, 3, 1, 12, 0, tzinfo=pytz.UTC)
    return [
        Reading(time=time, wind_avg=a, wind_max=m, wind_dir=d)
        for a, m, d in zip(avgs, maxes, directions)
    ]


class TestWindInterpolator:
    """Test cases for WindInterpolator."""

    @pytest.fixture
    def interpolator(self):
        return WindInterpolator()

    def test_weighted_speeds(self, interpolator):
        wind_avg, wind_max, _ = interpolator.interpolate(
            readings_with([90, 100, 110]), [0.5, 0.25, 0.25]
        )

        assert wind_avg == pytest.approx(0.5 * 4 + 0.25 * 6 + 0.25 * 8)
        assert wind_max == pytest.approx(0.5 * 7 + 0.25 * 9 + 0.25 * 11)

    def test_direction_without_wraparound(self, interpolator):
        _, _, wind_dir = interpolator.interpolate(
            readings_with([90, 120, 150]), [1 / 3, 1 / 3, 1 / 3]
        )
        assert wind_dir == pytest.approx(120.0)

    def test_direction_across_north(self, interpolator):
        _, _, wind_dir = interpolator.interpolate(
            readings_with([350, 10, 355]), [1 / 3, 1 / 3, 1 / 3]
        )

        assert circular_distance(wind_dir, 180) > 170
        assert circular_distance(wind_dir, 0) < 5
        assert 0 <= wind_dir < 360

    def test_direction_across_north_resolving_east_of_north(self, interpolator):
        _, _, wind_dir = interpolator.interpolate(
            readings_with([350, 10, 15]), [0.2, 0.4, 0.4]
        )

        # 350 -> -10: -2 + 4 + 6
        assert wind_dir == pytest.approx(8.0)

    def test_wide_spread_below_threshold_is_not_corrected(self, interpolator):
        # Spread of 300 degrees does not trigger the wraparound shift
        _, _, wind_dir = interpolator.interpolate(
            readings_with([10, 310, 160]), [1 / 3, 1 / 3, 1 / 3]
        )
        assert wind_dir == pytest.approx(160.0)

    def test_mismatched_weights_raise(self, interpolator):
        with pytest.raises(ValueError):
            interpolator.interpolate(readings_with([1, 2, 3]), [0.5, 0.5])
