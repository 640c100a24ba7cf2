"""
Business logic services for the wind resolution system.

Services select stations, route reading fetches, manage the observation
cache and orchestrate resolution.
"""

from .catalog import StationCatalog
from .selector import StationSelector
from .router import ReadingRouter, SourceRoute
from .cache_store import CacheStore
from .resolver import WindResolver, RetryState, find_match
from .ingestion import ObservationIngestor, IngestionSummary

__all__ = [
    "StationCatalog",
    "StationSelector",
    "ReadingRouter",
    "SourceRoute",
    "CacheStore",
    "WindResolver",
    "RetryState",
    "find_match",
    "ObservationIngestor",
    "IngestionSummary",
]
