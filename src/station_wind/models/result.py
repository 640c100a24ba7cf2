"""
Resolution result models.

Contains the DTO returned by a wind measurement query.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .station import Station


@dataclass
class ResolutionResult:
    """Wind estimate for a point and time."""

    stations: List[Station]
    method: str  # "interpolation" or "nearest"
    wind_avg: float
    wind_max: float
    wind_dir: float
    source: Optional[str] = None  # station kind that produced the estimate

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "stations": [station.to_dict() for station in self.stations],
            "method": self.method,
            "windAvg": self.wind_avg,
            "windMax": self.wind_max,
            "windDir": self.wind_dir,
        }
        if self.source:
            result["source"] = self.source
        return result
