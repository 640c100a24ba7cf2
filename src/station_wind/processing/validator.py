"""
Query validation module.

Validates coordinates, dates and identifiers at the query boundary.
"""

import logging
import math
from datetime import datetime
from typing import Any, List, Optional, Tuple

from ..core import constants
from ..core.date_utils import DateUtils


def is_int(value: Any) -> bool:
    """
    Check whether a value is an integer or an integer-valued string.

    Booleans and floats with a fractional part are rejected.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return False
        try:
            int(text)
        except ValueError:
            return False
        return True
    return False


def validate_number(value: Any) -> bool:
    """Check whether a value is a finite real number (bool excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    return False


def validate_date(value: Any) -> bool:
    """Check whether a value is an ISO-8601 date string (bare numbers rejected)."""
    if isinstance(value, datetime):
        return True
    if not isinstance(value, str):
        return False
    try:
        float(value)
        return False
    except ValueError:
        pass
    try:
        DateUtils.parse_iso_utc(value)
    except ValueError:
        return False
    return True


class QueryValidator:
    """Validate wind query input."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize query validator.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_coordinates(self, lat: Any, lon: Any) -> Tuple[bool, List[str]]:
        """
        Validate latitude and longitude.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        if not validate_number(lat):
            errors.append(f"Latitude is invalid: {lat!r}")
        elif not -90 <= lat <= 90:
            errors.append(f"Latitude out of range: {lat} (must be -90 to 90)")

        if not validate_number(lon):
            errors.append(f"Longitude is invalid: {lon!r}")
        elif not -180 <= lon <= 180:
            errors.append(f"Longitude out of range: {lon} (must be -180 to 180)")

        return len(errors) == 0, errors

    def validate_query(
        self,
        lat: Any,
        lon: Any,
        date: Any = None,
        kind: Optional[str] = None
    ) -> bool:
        """
        Validate a complete wind query, logging every problem found.

        Args:
            lat: Latitude
            lon: Longitude
            date: ISO-8601 string, datetime or None for now
            kind: Station kind or None for any

        Returns:
            True if the query can be resolved
        """
        _, errors = self.validate_coordinates(lat, lon)

        if date is not None and not validate_date(date):
            errors.append(f"Date is invalid: {date!r}")

        if kind is not None and kind not in constants.STATION_KINDS:
            errors.append(
                f"Station kind is invalid: {kind!r} "
                f"(expected one of {', '.join(constants.STATION_KINDS)})"
            )

        for error in errors:
            self.logger.warning(error)

        return len(errors) == 0
