"""
Station data models.

Contains DTOs for station descriptors and per-kind station catalogs.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple


@dataclass(frozen=True)
class Station:
    """A weather station descriptor."""

    id: int
    name: str
    lat: float
    lon: float

    @property
    def point(self) -> Tuple[float, float]:
        return (self.lat, self.lon)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Station":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name", "")),
            lat=float(data["lat"]),
            lon=float(data["lon"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "lat": self.lat, "lon": self.lon}


@dataclass(frozen=True)
class Bounds:
    """Bounding box of a station network in degrees."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, lat: float, lon: float) -> bool:
        """Check whether a point lies inside the box (edges included)."""
        return (
            self.min_lat <= lat <= self.max_lat and
            self.min_lon <= lon <= self.max_lon
        )

    @classmethod
    def from_stations(cls, stations: Iterable[Station]) -> "Bounds":
        """
        Compute the bounding box of a set of stations.

        Raises:
            ValueError: If no stations are given
        """
        stations = list(stations)
        if not stations:
            raise ValueError("Cannot compute bounds of an empty station list")

        return cls(
            min_lat=min(s.lat for s in stations),
            max_lat=max(s.lat for s in stations),
            min_lon=min(s.lon for s in stations),
            max_lon=max(s.lon for s in stations),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bounds":
        return cls(
            min_lat=float(data["minLat"]),
            max_lat=float(data["maxLat"]),
            min_lon=float(data["minLon"]),
            max_lon=float(data["maxLon"]),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "minLat": self.min_lat,
            "maxLat": self.max_lat,
            "minLon": self.min_lon,
            "maxLon": self.max_lon,
        }


@dataclass(frozen=True)
class StationSet:
    """
    The responding stations of one measurement kind.

    Loaded read-only per resolution call. Anything that needs a different
    ordering sorts a copy.
    """

    kind: str
    stations: Tuple[Station, ...]
    bounds: Bounds

    def __len__(self) -> int:
        return len(self.stations)

    def contains(self, lat: float, lon: float) -> bool:
        return self.bounds.contains(lat, lon)
