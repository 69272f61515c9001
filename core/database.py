# core/database.py

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Optional

from core.errors import IOFailure
from core.perceptual_hash import ImageFingerprint

logger = logging.getLogger(__name__)


class FingerprintCache:
    """
    SQLite cache of reference fingerprints.

    An entry is only served while the file's size and modification time
    still match the values recorded when it was hashed.
    """

    def __init__(self, db_path: str = "data/fingerprints.db"):
        self.db_path = db_path
        self.conn = None
        self._lock = threading.Lock()
        self._initialize_database()

    def _initialize_database(self):
        """Create database schema"""
        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS fingerprints (
                    file_path TEXT PRIMARY KEY,
                    file_size INTEGER NOT NULL,
                    modified_time REAL NOT NULL,
                    hash_size INTEGER NOT NULL,
                    bits TEXT NOT NULL,
                    computed_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            self.conn.commit()
        except (OSError, sqlite3.Error) as e:
            raise IOFailure(f"Cannot open fingerprint cache {self.db_path}: {e}") from e

    def get(self, file_path: str, file_size: int, modified_time: float,
            hash_size: int) -> Optional[ImageFingerprint]:
        """Cached fingerprint, or None if missing or stale"""
        with self._lock:
            row = self.conn.execute("""
                SELECT file_size, modified_time, hash_size, bits
                FROM fingerprints WHERE file_path = ?
            """, (file_path,)).fetchone()

        if row is None:
            return None

        cached_size, cached_mtime, cached_hash_size, bits = row
        if (cached_size, cached_mtime, cached_hash_size) != (file_size, modified_time, hash_size):
            logger.debug(f"Stale fingerprint for {file_path}")
            return None

        try:
            return ImageFingerprint.from_bitstring(bits)
        except ValueError:
            logger.warning(f"Corrupt fingerprint entry for {file_path}")
            return None

    def put(self, file_path: str, file_size: int, modified_time: float,
            hash_size: int, fingerprint: ImageFingerprint):
        """Store or replace a fingerprint"""
        with self._lock:
            self.conn.execute("""
                INSERT OR REPLACE INTO fingerprints
                (file_path, file_size, modified_time, hash_size, bits)
                VALUES (?, ?, ?, ?, ?)
            """, (file_path, file_size, modified_time, hash_size,
                  fingerprint.to_bitstring()))
            self.conn.commit()

    def count(self) -> int:
        with self._lock:
            return self.conn.execute("SELECT COUNT(*) FROM fingerprints").fetchone()[0]

    def close(self):
        """Close database connection"""
        if self.conn:
            self.conn.close()
            self.conn = None
