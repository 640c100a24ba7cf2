"""
Station selection service.

Chooses which stations to query for a point: the k nearest, or the first
distance-ordered triangle of stations that surrounds it.
"""

import logging
from itertools import combinations
from typing import AbstractSet, List, Optional, Sequence, Tuple

from ..algorithms import distance, point_in_triangle
from ..models import Station

Point = Tuple[float, float]


class StationSelector:
    """Select candidate stations around a query point."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize station selector.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def sort_by_distance(point: Point, stations: Sequence[Station]) -> List[Station]:
        """
        Order stations by distance to a point.

        Returns a new list; ties keep catalog order.
        """
        return sorted(stations, key=lambda s: distance(point, s.point))

    def k_nearest(self, point: Point, k: int, stations: Sequence[Station]) -> List[Station]:
        """
        Get the k stations nearest to a point.

        Args:
            point: (lat, lon) query point
            k: Number of stations
            stations: Candidate stations

        Returns:
            Up to k stations in ascending distance
        """
        return self.sort_by_distance(point, stations)[:k]

    def surrounding_or_nearest(
        self,
        point: Point,
        blacklist: AbstractSet[int],
        stations: Sequence[Station]
    ) -> List[Station]:
        """
        Find three stations whose triangle contains the point.

        Triples (i < j < k) of the distance-sorted, non-blacklisted stations
        are scanned in order and the first containing triangle wins. This
        favours compact nearby triangles and can miss a containing triangle
        made of farther stations.

        Args:
            point: (lat, lon) query point
            blacklist: Station ids to exclude
            stations: Candidate stations

        Returns:
            Three surrounding stations, else the single nearest usable
            station, else an empty list when every station is blacklisted
        """
        usable = [s for s in stations if s.id not in blacklist]
        ordered = self.sort_by_distance(point, usable)

        for triple in combinations(ordered, 3):
            if point_in_triangle(point, [s.point for s in triple]):
                self.logger.debug(
                    f"Surrounding stations for {point}: {[s.id for s in triple]}"
                )
                return list(triple)

        if ordered:
            self.logger.debug(
                f"No surrounding triangle for {point}, nearest is {ordered[0].id}"
            )
            return ordered[:1]

        return []
