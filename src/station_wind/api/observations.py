"""
Live station observation reader.

Fetches recent wind observations for a single station and normalizes them
into readings in m/s, sorted by time.
"""

import logging
import math
from typing import Any, Dict, List, Optional

import requests  # type: ignore

from .client import APIClient
from ..core import constants
from ..core.date_utils import DateUtils
from ..models import Reading
from ..processing import UnitConverter


class StationReader(APIClient):
    """
    Reader for one station network's observation endpoint.

    The endpoint is expected at ``{base_url}{observations_path}`` where the
    path template contains ``{station_id}``, and to accept a ``view`` query
    parameter of ``12h`` or ``6d``. The payload is either a list of rows or an
    object with an ``observations`` list:

    {"observations": [{"time": "...Z", "windAvg": 4, "windMax": 7, "windDir": "NNE"}]}
    """

    def __init__(
        self,
        base_url: str,
        observations_path: str = "/observations/{station_id}",
        speed_unit: str = "m/s",
        timeout: int = 30,
        verify_ssl: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize station reader.

        Args:
            base_url: Base URL for the observation endpoint
            observations_path: Path template containing {station_id}
            speed_unit: Unit the network reports wind speed in
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            logger: Logger instance
        """
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            verify_ssl=verify_ssl,
            logger=logger
        )
        self.observations_path = observations_path
        self.speed_unit = speed_unit
        self.converter = UnitConverter(self.logger)

    def fetch_live(self, station_id: int, extended_history: bool = False) -> List[Reading]:
        """
        Fetch the current observation table for a station.

        Args:
            station_id: Station identifier
            extended_history: Request the 6 day view instead of 12 hours

        Returns:
            Readings in ascending time order, empty on any failure
        """
        view = constants.EXTENDED_HISTORY_VIEW if extended_history else constants.SHORT_HISTORY_VIEW
        endpoint = self.observations_path.format(station_id=station_id)

        try:
            payload = self.get(endpoint, params={"view": view})
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Failed to fetch observations for station {station_id}: {e}")
            return []
        except ValueError as e:
            self.logger.error(f"Malformed observation payload for station {station_id}: {e}")
            return []

        rows = self._extract_rows(payload)
        readings = []
        for row in rows:
            reading = self._parse_row(row)
            if reading is not None:
                readings.append(reading)

        readings.sort(key=lambda r: r.time)

        self.logger.debug(
            f"Station {station_id} ({view}): {len(readings)} of {len(rows)} rows usable"
        )
        return readings

    def _extract_rows(self, payload: Any) -> List[Dict[str, Any]]:
        # Endpoint may return: {"observations": [...]} or just [...]
        if isinstance(payload, dict):
            rows = payload.get("observations", [])
        elif isinstance(payload, list):
            rows = payload
        else:
            self.logger.warning(f"Unexpected observation format: {type(payload)}")
            return []

        return [row for row in rows if isinstance(row, dict)]

    def _parse_row(self, row: Dict[str, Any]) -> Optional[Reading]:
        """Parse and normalize one observation row, or None if unusable."""
        try:
            wind_avg = self.converter.convert_wind_speed(float(row["windAvg"]), self.speed_unit)
            wind_max = self.converter.convert_wind_speed(float(row["windMax"]), self.speed_unit)
            wind_dir = self.converter.convert_direction(row["windDir"])
            time = DateUtils.coerce(row["time"])
        except (KeyError, TypeError, ValueError) as e:
            self.logger.debug(f"Skipping observation row {row}: {e}")
            return None

        if not all(math.isfinite(v) for v in (wind_avg, wind_max, wind_dir)):
            self.logger.debug(f"Skipping non-finite observation row {row}")
            return None

        return Reading(
            time=time.replace(second=0, microsecond=0),
            wind_avg=wind_avg,
            wind_max=wind_max,
            wind_dir=wind_dir,
        )
