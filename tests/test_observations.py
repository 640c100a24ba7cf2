"""
Tests for the live station observation reader.
"""

import unittest
from datetime import datetime
from unittest.mock import Mock, patch

import pytest
import pytz
import requests

from src.station_wind.api import StationReader, create_station_reader
from src.station_wind.core.config import Config


def response_with(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestStationReader(unittest.TestCase):
    """Test cases for StationReader."""

    def setUp(self):
        self.reader = StationReader(
            base_url="http://example.test/air/",
            observations_path="/observations/{station_id}",
            logger=Mock()
        )
        self.reader.session = Mock()

    def test_requests_short_view(self):
        self.reader.session.request.return_value = response_with([])

        self.reader.fetch_live(571)

        kwargs = self.reader.session.request.call_args.kwargs
        self.assertEqual(kwargs["method"], "GET")
        self.assertEqual(kwargs["url"], "http://example.test/air/observations/571")
        self.assertEqual(kwargs["params"], {"view": "12h"})
        self.assertEqual(kwargs["timeout"], 30)

    def test_requests_extended_view(self):
        self.reader.session.request.return_value = response_with([])

        self.reader.fetch_live(571, extended_history=True)

        kwargs = self.reader.session.request.call_args.kwargs
        self.assertEqual(kwargs["params"], {"view": "6d"})

    def test_parses_and_sorts_rows(self):
        self.reader.session.request.return_value = response_with({
            "observations": [
                {"time": "2024-03-01T11:50:00Z", "windAvg": 4, "windMax": 7, "windDir": 45},
                {"time": "2024-03-01T11:40:30Z", "windAvg": "3.5", "windMax": 6, "windDir": "NNE"},
            ]
        })

        readings = self.reader.fetch_live(571)

        self.assertEqual(len(readings), 2)
        first, second = readings
        self.assertEqual(first.time, datetime(2024, 3, 1, 11, 40, tzinfo=pytz.UTC))
        self.assertEqual(first.wind_avg, 3.5)
        self.assertEqual(first.wind_dir, 22.5)
        self.assertEqual(second.time, datetime(2024, 3, 1, 11, 50, tzinfo=pytz.UTC))
        self.assertEqual(second.wind_max, 7.0)
        self.assertEqual(second.wind_dir, 45.0)

    def test_skips_unusable_rows(self):
        self.reader.session.request.return_value = response_with([
            {"time": "2024-03-01T11:50:00Z", "windAvg": 4, "windMax": 7, "windDir": 45},
            {"time": "2024-03-01T11:40:00Z", "windAvg": None, "windMax": 7, "windDir": 45},
            {"time": "2024-03-01T11:30:00Z", "windAvg": 4, "windMax": 7, "windDir": "calm"},
            {"time": "not a time", "windAvg": 4, "windMax": 7, "windDir": 45},
            {"time": "2024-03-01T11:20:00Z", "windAvg": "nan", "windMax": 7, "windDir": 45},
            {"time": "2024-03-01T11:10:00Z", "windMax": 7, "windDir": 45},
            "garbage",
        ])

        readings = self.reader.fetch_live(571)

        self.assertEqual(len(readings), 1)
        self.assertEqual(readings[0].wind_avg, 4.0)

    def test_unexpected_payload(self):
        self.reader.session.request.return_value = response_with("maintenance")
        self.assertEqual(self.reader.fetch_live(571), [])

    def test_request_failure_is_empty(self):
        self.reader.session.request.side_effect = requests.exceptions.ConnectionError("refused")
        self.assertEqual(self.reader.fetch_live(571), [])

    def test_http_error_is_empty(self):
        response = Mock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("503")
        self.reader.session.request.return_value = response

        self.assertEqual(self.reader.fetch_live(571), [])

    def test_invalid_json_is_empty(self):
        response = Mock()
        response.raise_for_status.return_value = None
        response.json.side_effect = ValueError("Expecting value")
        self.reader.session.request.return_value = response

        self.assertEqual(self.reader.fetch_live(571), [])


class TestSpeedUnits:
    """Test wind speed normalization per network."""

    def test_km_per_hour_is_converted(self):
        reader = StationReader(base_url="http://example.test/ground", speed_unit="km/h", logger=Mock())
        reader.session = Mock()
        reader.session.request.return_value = response_with([
            {"time": "2024-03-01T11:00:00Z", "windAvg": 36, "windMax": 72, "windDir": 180},
        ])

        readings = reader.fetch_live(201)

        assert readings[0].wind_avg == pytest.approx(10.0)
        assert readings[0].wind_max == pytest.approx(20.0)


class TestReaderFactory:
    """Test reader construction from configuration."""

    def test_create_station_reader(self):
        config = Mock(spec=Config)
        config.source_base_url.return_value = "http://example.test/ground"
        config.observations_path.return_value = "/stations/{station_id}/obs"
        config.speed_unit.return_value = "km/h"
        config.source_timeout = 10
        config.source_verify_ssl = True

        reader = create_station_reader(config, "ground", logger=Mock())

        config.source_base_url.assert_called_once_with("ground")
        assert reader.base_url == "http://example.test/ground"
        assert reader.observations_path == "/stations/{station_id}/obs"
        assert reader.speed_unit == "km/h"
        assert reader.timeout == 10

    def test_insecure_reader_silences_warnings(self):
        with patch("src.station_wind.api.client.urllib3.disable_warnings") as disable:
            StationReader(base_url="https://example.test", verify_ssl=False, logger=Mock())
        disable.assert_called_once()
