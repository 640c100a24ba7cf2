"""
Pytest configuration and shared fixtures for all tests.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import pytz

# Add the project root to sys.path so we can import from src
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.station_wind.models import Reading  # noqa: E402
from src.station_wind.services.catalog import StationCatalog  # noqa: E402


# Query point surrounded by stations 101, 102 and 103 of the air fixture
QUERY_POINT = (65.283, -14.4025)
NOW = datetime(2024, 3, 1, 12, 7, tzinfo=pytz.UTC)


class FakeReader:
    """Live source returning canned readings per station id."""

    def __init__(self, tables=None, errors=None):
        self.tables = tables or {}
        self.errors = set(errors or [])
        self.calls = []

    def fetch_live(self, station_id, extended_history=False):
        self.calls.append((station_id, extended_history))
        if station_id in self.errors:
            raise RuntimeError(f"station {station_id} timed out")
        return list(self.tables.get(station_id, []))

    @property
    def station_ids(self):
        return [station_id for station_id, _ in self.calls]


def make_reading(time, wind_avg=5.0, wind_max=8.0, wind_dir=90.0):
    """Build a reading at a UTC time."""
    return Reading(time=time, wind_avg=wind_avg, wind_max=wind_max, wind_dir=wind_dir)


@pytest.fixture(scope="session")
def fixtures_dir():
    """Get the fixtures directory path."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def catalog(fixtures_dir):
    """Station catalog over the fixture snapshots."""
    return StationCatalog({
        "air": str(fixtures_dir / "air_stations.json"),
        "ground": str(fixtures_dir / "ground_stations.json"),
    })


@pytest.fixture
def air_stations(catalog):
    return catalog.load("air")


@pytest.fixture
def ground_stations(catalog):
    return catalog.load("ground")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def recent_time():
    """Query time ten minutes before NOW (10 minute boundary 11:50)."""
    return NOW - timedelta(minutes=10)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test touching files or sqlite"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test (no external dependencies)"
    )
