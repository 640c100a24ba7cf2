"""
Station Wind Resolution System

This package estimates wind speed and direction at any point by
triangulating readings from a sparse network of weather stations.
"""

__version__ = "0.1.0"
__description__ = "Wind estimation from sparse weather station networks"


def __getattr__(name):
    """Lazy import to avoid importing dependencies when not needed."""
    if name == "StationWindApp":
        from .main import StationWindApp
        return StationWindApp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "StationWindApp",
]
