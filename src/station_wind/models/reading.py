"""
Reading data models.

Contains the DTO for a single wind observation from a station.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from ..core.date_utils import DateUtils


@dataclass(frozen=True)
class Reading:
    """A wind observation at minute precision (UTC)."""

    time: datetime
    wind_avg: float  # m/s
    wind_max: float  # m/s
    wind_dir: float  # degrees [0, 360)

    @property
    def timestamp_ms(self) -> int:
        return DateUtils.to_ms(self.time)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reading":
        """
        Build a reading from its wire form.

        Expected format:
        {"time": "2024-03-01T12:00:00Z", "windAvg": 4.0, "windMax": 7.0, "windDir": 90}

        Raises:
            KeyError: If a field is missing
            ValueError: If a field cannot be parsed
        """
        return cls(
            time=DateUtils.coerce(data["time"]),
            wind_avg=float(data["windAvg"]),
            wind_max=float(data["windMax"]),
            wind_dir=float(data["windDir"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time.isoformat(),
            "windAvg": self.wind_avg,
            "windMax": self.wind_max,
            "windDir": self.wind_dir,
        }
