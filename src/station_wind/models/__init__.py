"""
Data models for the wind resolution system.

Contains DTOs for stations, readings and resolution results.
"""

from .station import Station, Bounds, StationSet
from .reading import Reading
from .result import ResolutionResult

__all__ = [
    "Station",
    "Bounds",
    "StationSet",
    "Reading",
    "ResolutionResult",
]
