"""
Data processing module for the wind resolution system.

Provides unit normalization of live readings and query validation.
"""

from .converter import UnitConverter, COMPASS_POINTS
from .validator import QueryValidator, is_int, validate_number, validate_date

__all__ = [
    "UnitConverter",
    "COMPASS_POINTS",
    "QueryValidator",
    "is_int",
    "validate_number",
    "validate_date",
]
