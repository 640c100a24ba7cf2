"""
Observation cache store.

SQLite-backed, append-only store of past station readings keyed by
(station, epoch milliseconds).
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional

from ..core import constants
from ..core.date_utils import DateUtils
from ..models import Reading
from ..processing import is_int


SCHEMA = """
CREATE TABLE IF NOT EXISTS observations (
    station INTEGER,
    date INTEGER,
    wind_avg REAL,
    wind_max REAL,
    wind_dir INTEGER,
    PRIMARY KEY(station, date)
)
"""


class CacheStore:
    """
    Time-indexed cache of station readings.

    A connection is opened and closed per operation. Writes to the same
    database file are serialized by a process-wide lock per path; reads open
    the file read-only and never create it.
    """

    _write_locks: Dict[str, threading.Lock] = {}
    _write_locks_guard = threading.Lock()

    def __init__(
        self,
        db_path: str,
        busy_timeout: float = constants.CACHE_BUSY_TIMEOUT,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize cache store.

        Args:
            db_path: Path to the SQLite database file
            busy_timeout: Seconds to wait on a locked database
            logger: Logger instance
        """
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self.logger = logger or logging.getLogger(__name__)

    @property
    def _write_lock(self) -> threading.Lock:
        key = str(self.db_path.resolve())
        with self._write_locks_guard:
            if key not in self._write_locks:
                self._write_locks[key] = threading.Lock()
            return self._write_locks[key]

    @contextmanager
    def _connect(self, read_only: bool = False) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        if read_only:
            uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
            conn = sqlite3.connect(uri, uri=True, timeout=self.busy_timeout)
        else:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path), timeout=self.busy_timeout)
            conn.execute(SCHEMA)

        try:
            yield conn
            if not read_only:
                conn.commit()
        except Exception:
            if not read_only:
                conn.rollback()
            raise
        finally:
            conn.close()

    def is_available(self) -> bool:
        return self.db_path.exists()

    def get(self, station_id, timestamp_ms) -> Optional[Reading]:
        """
        Look up the reading of a station at an exact timestamp.

        Args:
            station_id: Station identifier (integer)
            timestamp_ms: Rounded timestamp in epoch milliseconds (integer)

        Returns:
            The cached reading, or None if absent, the input is malformed or
            the store is unavailable

        Raises:
            sqlite3.DatabaseError: If the database file is corrupt
        """
        if not is_int(station_id) or not is_int(timestamp_ms):
            self.logger.debug(
                f"Ignoring malformed cache lookup station={station_id!r} timestamp={timestamp_ms!r}"
            )
            return None

        if not self.is_available():
            self.logger.warning(f"Cache store unavailable: {self.db_path} does not exist")
            return None

        try:
            with self._connect(read_only=True) as conn:
                row = conn.execute(
                    "SELECT date, wind_avg, wind_max, wind_dir FROM observations "
                    "WHERE station = ? AND date = ?",
                    (int(station_id), int(timestamp_ms))
                ).fetchone()
        except sqlite3.OperationalError as e:
            self.logger.warning(f"Cache store unavailable: {self.db_path}: {e}")
            return None

        if row is None:
            self.logger.debug(f"No cached reading for station {station_id} at {timestamp_ms}")
            return None

        date, wind_avg, wind_max, wind_dir = row
        return Reading(
            time=DateUtils.from_ms(date),
            wind_avg=float(wind_avg),
            wind_max=float(wind_max),
            wind_dir=float(wind_dir),
        )

    def put(self, station_id: int, readings: Iterable[Reading]) -> int:
        """
        Insert readings for a station, leaving existing rows untouched.

        Args:
            station_id: Station identifier
            readings: Readings to store

        Returns:
            Number of rows actually inserted

        Raises:
            ValueError: If the station id is not an integer
        """
        if not is_int(station_id):
            raise ValueError(f"Station id must be an integer, got {station_id!r}")

        rows = [
            (
                int(station_id),
                r.timestamp_ms,
                r.wind_avg,
                r.wind_max,
                int(round(r.wind_dir)),
            )
            for r in readings
        ]
        if not rows:
            return 0

        with self._write_lock:
            with self._connect() as conn:
                before = conn.total_changes
                conn.executemany(
                    "INSERT OR IGNORE INTO observations VALUES (?,?,?,?,?)",
                    rows
                )
                inserted = conn.total_changes - before

        self.logger.debug(f"Stored {inserted} of {len(rows)} readings for station {station_id}")
        return inserted

    def prune(self, retention_ms: int, now_ms: Optional[int] = None) -> int:
        """
        Delete readings older than the retention horizon.

        Args:
            retention_ms: Retention window in milliseconds
            now_ms: Reference time in epoch milliseconds (defaults to now)

        Returns:
            Number of rows deleted
        """
        if not self.is_available():
            return 0

        if now_ms is None:
            now_ms = DateUtils.to_ms(DateUtils.now_utc())
        cutoff = now_ms - retention_ms

        with self._write_lock:
            with self._connect() as conn:
                deleted = conn.execute(
                    "DELETE FROM observations WHERE date < ?",
                    (cutoff,)
                ).rowcount

        self.logger.info(f"Pruned {deleted} cached readings older than {DateUtils.from_ms(cutoff).isoformat()}")
        return deleted
