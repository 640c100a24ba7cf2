"""
Calculation algorithms for wind resolution.

Provides triangle geometry and the barycentric wind interpolator.
"""

from .geometry import distance, point_in_triangle, barycentric_weights
from .interpolation import WindInterpolator

__all__ = [
    "distance",
    "point_in_triangle",
    "barycentric_weights",
    "WindInterpolator",
]
