"""
Wind interpolation module.

Combines readings from the three stations around a point into one
estimate using barycentric weights.
"""

import logging
from typing import Optional, Sequence, Tuple

from ..core import constants
from ..models import Reading


class WindInterpolator:
    """Weighted combination of station readings."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize interpolator.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def interpolate(
        self,
        readings: Sequence[Reading],
        weights: Sequence[float]
    ) -> Tuple[float, float, float]:
        """
        Interpolate wind speed, gust and direction.

        Args:
            readings: One reading per triangle vertex
            weights: Barycentric weight per reading

        Returns:
            Tuple of (wind_avg, wind_max, wind_dir)

        Raises:
            ValueError: If readings and weights differ in length or are empty
        """
        if not readings or len(readings) != len(weights):
            raise ValueError(
                f"Need one weight per reading, got {len(readings)} readings "
                f"and {len(weights)} weights"
            )

        wind_avg = sum(r.wind_avg * w for r, w in zip(readings, weights))
        wind_max = sum(r.wind_max * w for r, w in zip(readings, weights))
        wind_dir = self.interpolate_direction([r.wind_dir for r in readings], weights)

        self.logger.debug(
            f"Interpolated avg={wind_avg:.2f} max={wind_max:.2f} dir={wind_dir:.1f} "
            f"with weights {[round(w, 3) for w in weights]}"
        )

        return wind_avg, wind_max, wind_dir

    @staticmethod
    def interpolate_direction(
        directions: Sequence[float],
        weights: Sequence[float]
    ) -> float:
        """
        Weighted mean of wind directions across the 0/360 boundary.

        When the directions span more than DIRECTION_WRAP_THRESHOLD degrees
        the set straddles north, so every direction above the threshold is
        shifted down by a full circle before weighting.

        Args:
            directions: Directions in degrees [0, 360)
            weights: Weight per direction

        Returns:
            Weighted direction in degrees [0, 360)
        """
        threshold = constants.DIRECTION_WRAP_THRESHOLD

        if max(directions) - min(directions) > threshold:
            directions = [
                d - constants.FULL_CIRCLE if d > threshold else d
                for d in directions
            ]

        direction = sum(d * w for d, w in zip(directions, weights))

        if direction < 0:
            direction += constants.FULL_CIRCLE

        return direction
