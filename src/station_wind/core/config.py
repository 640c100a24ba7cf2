"""
Configuration module for the wind resolution system.

Loads configuration from JSON file and environment variables.
"""

import json
import os
from typing import Dict, Any, Optional
from pathlib import Path

from . import constants


class Config:
    """Configuration manager for the application."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration JSON file. If None, uses CONFIG_FILE env var
                        or defaults to 'config.json'
        """
        self.config_file = config_file or os.getenv("CONFIG_FILE", "config.json")
        self.config: Dict[str, Any] = {}
        self._load_config()
        self._override_from_env()
        self._validate_config()

    def _load_config(self) -> None:
        """Load configuration from JSON file."""
        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        with open(config_path, "r", encoding="utf-8") as f:
            self.config = json.load(f)

    def _override_from_env(self) -> None:
        """Override configuration with environment variables."""
        stations = self.config.setdefault("stations", {})

        # Live source endpoints
        if os.getenv("AIR_SOURCE_URL"):
            stations.setdefault(constants.AIR, {})["base_url"] = os.getenv("AIR_SOURCE_URL")

        if os.getenv("GROUND_SOURCE_URL"):
            stations.setdefault(constants.GROUND, {})["base_url"] = os.getenv("GROUND_SOURCE_URL")

        # Pacing
        if os.getenv("REQUEST_DELAY"):
            try:
                delay = float(os.getenv("REQUEST_DELAY"))
            except ValueError:
                raise ValueError(f"REQUEST_DELAY must be a number, got {os.getenv('REQUEST_DELAY')!r}")
            self.config.setdefault("source", {})["request_delay"] = delay

        # Logging
        if os.getenv("LOG_LEVEL"):
            self.config.setdefault("logging", {})["level"] = os.getenv("LOG_LEVEL")

        # Environment
        if os.getenv("ENVIRONMENT"):
            self.config["environment"] = os.getenv("ENVIRONMENT")

    def _validate_config(self) -> None:
        """Validate that required configuration keys are present."""
        required_config = {
            "stations": list(constants.STATION_KINDS),
        }

        missing_sections = [
            section for section in required_config if section not in self.config
        ]
        if missing_sections:
            raise ValueError(
                f"Missing required configuration sections: {', '.join(missing_sections)}"
            )

        missing_keys = []
        for section, keys in required_config.items():
            for key in keys:
                if key not in self.config[section]:
                    missing_keys.append(f"{section}.{key}")

        # Every station kind needs a catalog, a cache and a live endpoint
        for kind in constants.STATION_KINDS:
            kind_config = self.config["stations"].get(kind)
            if not isinstance(kind_config, dict):
                continue
            for key in ("catalog", "cache", "base_url", "observations_path"):
                if not kind_config.get(key):
                    missing_keys.append(f"stations.{kind}.{key}")

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}"
            )

        if self.request_delay < 0:
            raise ValueError("source.request_delay must not be negative")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key (supports dot notation).

        Args:
            key: Configuration key (e.g., 'stations.air.catalog')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def station_config(self, kind: str) -> Dict[str, Any]:
        """
        Get the configuration block for a station kind.

        Raises:
            ValueError: If the kind is unknown
        """
        if kind not in constants.STATION_KINDS:
            raise ValueError(f"Unknown station kind: {kind}")
        return self.config["stations"][kind]

    def catalog_path(self, kind: str) -> str:
        """Get the station catalog snapshot path for a kind."""
        return self.station_config(kind)["catalog"]

    def cache_path(self, kind: str) -> str:
        """Get the observation cache database path for a kind."""
        return self.station_config(kind)["cache"]

    def source_base_url(self, kind: str) -> str:
        """Get the live observation endpoint base URL for a kind."""
        return self.station_config(kind)["base_url"]

    def observations_path(self, kind: str) -> str:
        """Get the observation endpoint path template for a kind."""
        return self.station_config(kind)["observations_path"]

    def speed_unit(self, kind: str) -> str:
        """Get the wind speed unit reported by the live source for a kind."""
        return self.station_config(kind).get("speed_unit", "m/s")

    @property
    def source_timeout(self) -> int:
        """Get live source request timeout in seconds."""
        return self.get("source.timeout", 30)

    @property
    def source_verify_ssl(self) -> bool:
        """Get live source SSL verification setting."""
        return self.get("source.verify_ssl", True)

    @property
    def request_delay(self) -> float:
        """Get the fixed delay between live requests in seconds."""
        return self.get("source.request_delay", constants.DEFAULT_REQUEST_DELAY)

    @property
    def cache_retention_days(self) -> int:
        """Get how many days of cached observations to keep."""
        return self.get("cache.retention_days", constants.CACHE_RETENTION_DAYS)

    @property
    def ingestion_interval_hours(self) -> float:
        """Get the interval between repeated ingestion runs."""
        return self.get("ingestion.interval_hours", constants.DEFAULT_INGESTION_INTERVAL_HOURS)

    @property
    def log_level(self) -> str:
        return self.get("logging.level", "INFO")

    @property
    def log_file(self) -> Optional[str]:
        return self.get("logging.file")

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(file={self.config_file}, env={self.get('environment')})"
