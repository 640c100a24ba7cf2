"""
API layer for live station observations.

Provides the HTTP client and the per-network station reader.
"""

import logging
from typing import Optional

from .client import APIClient
from .observations import StationReader
from ..core.config import Config


def create_station_reader(
    config: Config,
    kind: str,
    logger: Optional[logging.Logger] = None
) -> StationReader:
    """
    Build the station reader for a station kind from configuration.

    Args:
        config: Application configuration
        kind: Station kind ("air" or "ground")
        logger: Logger instance

    Returns:
        Configured StationReader
    """
    return StationReader(
        base_url=config.source_base_url(kind),
        observations_path=config.observations_path(kind),
        speed_unit=config.speed_unit(kind),
        timeout=config.source_timeout,
        verify_ssl=config.source_verify_ssl,
        logger=logger
    )


__all__ = [
    "APIClient",
    "StationReader",
    "create_station_reader",
]
