"""
Unit conversion module.

Normalizes wind measurements from the station networks to m/s and degrees.
"""

import logging
from typing import Optional, Union

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


class UnitConverter:
    """Convert between different wind units."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize unit converter.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def convert_wind_speed(self, value: float, from_unit: str, to_unit: str = "m/s") -> float:
        """
        Convert wind speed between units.

        Args:
            value: Wind speed value
            from_unit: Source unit (km/h, m/s, mph, knots)
            to_unit: Target unit

        Returns:
            Converted wind speed value
        """
        if from_unit == to_unit:
            return value

        # Convert to m/s first
        from_unit_lower = from_unit.lower()
        if from_unit_lower in ["km/h", "kmh", "kph"]:
            ms = value / 3.6
        elif from_unit_lower in ["mph", "mi/h"]:
            ms = value * 0.44704
        elif from_unit_lower in ["knots", "kt", "kn"]:
            ms = value * 0.514444
        elif from_unit_lower in ["m/s", "ms", "mps"]:
            ms = value
        else:
            self.logger.warning(f"Unknown wind speed unit '{from_unit}', assuming m/s")
            ms = value

        # Convert from m/s to target
        to_unit_lower = to_unit.lower()
        if to_unit_lower in ["km/h", "kmh", "kph"]:
            return ms * 3.6
        elif to_unit_lower in ["mph", "mi/h"]:
            return ms / 0.44704
        elif to_unit_lower in ["knots", "kt", "kn"]:
            return ms / 0.514444
        else:
            return ms

    def convert_direction(self, value: Union[str, float, int]) -> float:
        """
        Normalize a wind direction to degrees in [0, 360).

        Accepts numeric degrees (or numeric strings) and 16-point compass
        names such as "NNE".

        Raises:
            ValueError: If the value is neither numeric nor a compass point
        """
        if isinstance(value, str):
            text = value.strip().upper()
            if text in COMPASS_POINTS:
                return self.compass_to_degrees(text)
            value = float(text)

        return float(value) % 360.0

    @staticmethod
    def compass_to_degrees(point: str) -> float:
        """
        Convert a 16-point compass name to degrees (N = 0, clockwise).

        Raises:
            ValueError: If the name is not a compass point
        """
        text = point.strip().upper()
        if text not in COMPASS_POINTS:
            raise ValueError(f"Unknown compass point: {point}")
        return COMPASS_POINTS.index(text) * 22.5
