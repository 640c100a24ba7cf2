"""
Station catalog service.

Loads the snapshot of responding stations for a station kind.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..core import constants
from ..models import Bounds, Station, StationSet

if TYPE_CHECKING:
    from ..core.config import Config


class StationCatalog:
    """Load per-kind station snapshots produced by the discovery process."""

    def __init__(
        self,
        paths: Dict[str, str],
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize station catalog.

        Args:
            paths: Snapshot file path per station kind
            logger: Logger instance
        """
        self.paths = dict(paths)
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(
        cls,
        config: "Config",
        logger: Optional[logging.Logger] = None
    ) -> "StationCatalog":
        return cls(
            paths={kind: config.catalog_path(kind) for kind in constants.STATION_KINDS},
            logger=logger
        )

    def load(self, kind: str) -> StationSet:
        """
        Load the station set for a kind.

        Args:
            kind: Station kind ("air" or "ground")

        Returns:
            StationSet read from the snapshot file

        Raises:
            ValueError: If the kind is unknown or the snapshot is malformed
            FileNotFoundError: If the snapshot file does not exist
        """
        if kind not in self.paths:
            raise ValueError(f"No station catalog configured for kind: {kind}")

        path = Path(self.paths[kind])
        if not path.exists():
            raise FileNotFoundError(f"Station catalog not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            snapshot = json.load(f)

        station_set = self.parse_snapshot(kind, snapshot)
        self.logger.debug(f"Loaded {len(station_set)} {kind} stations from {path}")
        return station_set

    def parse_snapshot(self, kind: str, snapshot: Any) -> StationSet:
        """
        Parse a catalog snapshot.

        Expected format:
        {
            "stations": [{"id": 571, "name": "...", "lat": 65.28, "lon": -14.40}],
            "bounds": {"minLat": ..., "maxLat": ..., "minLon": ..., "maxLon": ...}
        }

        A bare list of stations is accepted as well; missing bounds are
        computed from the stations.

        Raises:
            ValueError: If the snapshot cannot be parsed
        """
        if isinstance(snapshot, list):
            snapshot = {"stations": snapshot}
        if not isinstance(snapshot, dict):
            raise ValueError(f"Unexpected catalog format: {type(snapshot)}")

        try:
            stations = tuple(Station.from_dict(s) for s in snapshot.get("stations", []))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed station entry in {kind} catalog: {e}")

        if "bounds" in snapshot:
            try:
                bounds = Bounds.from_dict(snapshot["bounds"])
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Malformed bounds in {kind} catalog: {e}")
        elif stations:
            bounds = Bounds.from_stations(stations)
        else:
            raise ValueError(f"Empty {kind} catalog without bounds")

        return StationSet(kind=kind, stations=stations, bounds=bounds)
