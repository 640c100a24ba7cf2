"""
Date and time utilities.

Centralizes UTC handling, epoch millisecond conversion and timestamp
rounding used to match discrete station reporting intervals.
"""

from datetime import datetime
from typing import Union

import pytz

from . import constants


class DateUtils:
    """Utilities for UTC date handling."""

    @staticmethod
    def now_utc() -> datetime:
        """Get the current time as an aware UTC datetime."""
        return datetime.now(pytz.UTC)

    @staticmethod
    def to_utc(dt: datetime) -> datetime:
        """
        Convert datetime to UTC.

        Args:
            dt: Datetime object (can be naive or aware)

        Returns:
            Datetime in UTC (timezone-aware)
        """
        if dt.tzinfo is None:
            # Assume UTC if no timezone
            return pytz.UTC.localize(dt)
        return dt.astimezone(pytz.UTC)

    @classmethod
    def parse_iso_utc(cls, value: str) -> datetime:
        """
        Parse an ISO-8601 string into an aware UTC datetime.

        Accepts a trailing 'Z' designator. Strings without an offset are
        taken to be UTC.

        Args:
            value: ISO-8601 date or datetime string

        Returns:
            Aware UTC datetime

        Raises:
            ValueError: If the string is not a valid ISO-8601 date
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Invalid ISO-8601 date: {value!r}")

        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"

        return cls.to_utc(datetime.fromisoformat(text))

    @classmethod
    def coerce(cls, value: Union[str, datetime]) -> datetime:
        """Accept either an ISO string or a datetime and return aware UTC."""
        if isinstance(value, datetime):
            return cls.to_utc(value)
        return cls.parse_iso_utc(value)

    @classmethod
    def to_ms(cls, dt: datetime) -> int:
        """Convert a datetime to integer milliseconds since the epoch."""
        return int(round(cls.to_utc(dt).timestamp() * 1000))

    @staticmethod
    def from_ms(timestamp_ms: int) -> datetime:
        """Convert integer milliseconds since the epoch to aware UTC."""
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=pytz.UTC)

    @classmethod
    def floor_to_minutes(cls, dt: datetime, minutes: int) -> int:
        """
        Snap a datetime down to a minute granularity boundary.

        Args:
            dt: Datetime to round
            minutes: Granularity in minutes (10, 60, 180, ...)

        Returns:
            Rounded timestamp in epoch milliseconds
        """
        step = constants.MINUTE_MS * minutes
        return (cls.to_ms(dt) // step) * step
