"""
Planar geometry helpers for station triangulation.

Points are (lat, lon) pairs treated as plane coordinates in degree space.
Over the extent of a national station network this is close enough to
geodesic for choosing and weighting surrounding stations.
"""

import math
from typing import Sequence, Tuple

Point = Tuple[float, float]
Triangle = Sequence[Point]


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points in degree space."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def point_in_triangle(point: Point, triangle: Triangle) -> bool:
    """
    Test whether a point lies inside a triangle.

    Solves for the barycentric coordinates (u, v) of the point relative to
    the first vertex. A point exactly on an edge may be reported either way.
    A zero-area triangle contains nothing.

    Args:
        point: (x, y) point
        triangle: Three (x, y) vertices

    Returns:
        True if the point is inside the triangle
    """
    cx, cy = point
    t0, t1, t2 = triangle

    v0x, v0y = t2[0] - t0[0], t2[1] - t0[1]
    v1x, v1y = t1[0] - t0[0], t1[1] - t0[1]
    v2x, v2y = cx - t0[0], cy - t0[1]

    dot00 = v0x * v0x + v0y * v0y
    dot01 = v0x * v1x + v0y * v1y
    dot02 = v0x * v2x + v0y * v2y
    dot11 = v1x * v1x + v1y * v1y
    dot12 = v1x * v2x + v1y * v2y

    denominator = dot00 * dot11 - dot01 * dot01
    if denominator == 0:
        return False

    inv = 1 / denominator
    u = (dot11 * dot02 - dot01 * dot12) * inv
    v = (dot00 * dot12 - dot01 * dot02) * inv

    return u >= 0 and v >= 0 and u + v < 1


def barycentric_weights(point: Point, triangle: Triangle) -> Tuple[float, float, float]:
    """
    Compute the barycentric weights of a point relative to a triangle.

    The weights satisfy point = w0*t0 + w1*t1 + w2*t2 and w0 + w1 + w2 = 1.
    For a point inside the triangle all weights are in [0, 1].

    Args:
        point: (x, y) point
        triangle: Three (x, y) vertices

    Returns:
        Tuple of weights (w0, w1, w2), one per vertex in order

    Raises:
        ValueError: If the triangle is degenerate (colinear vertices)
    """
    cx, cy = point
    t0, t1, t2 = triangle

    denominator = (
        (t1[1] - t2[1]) * (t0[0] - t2[0]) +
        (t2[0] - t1[0]) * (t0[1] - t2[1])
    )
    if denominator == 0:
        raise ValueError("Cannot compute weights for a degenerate triangle")

    w0 = ((t1[1] - t2[1]) * (cx - t2[0]) + (t2[0] - t1[0]) * (cy - t2[1])) / denominator
    w1 = ((t2[1] - t0[1]) * (cx - t2[0]) + (t0[0] - t2[0]) * (cy - t2[1])) / denominator
    w2 = 1 - w0 - w1

    return w0, w1, w2
