"""
Cache Store - Persistent path -> (fingerprint, chunks) mapping.

Backed by a single SQLite database file. Keys are absolute file paths,
values are the content fingerprint and the extracted chunks as JSON.
"""

import json
import logging
import os
import sqlite3
from pathlib import Path
from typing import List, Optional

from .errors import CacheOpenError
from .models import CacheEntry, EntityChunk


logger = logging.getLogger(__name__)


class CacheStore:
    """
    Durable key -> CacheEntry store.

    Entries are replaced whole on every write; there is no merge.
    The connection is opened eagerly so a broken cache fails at startup
    rather than in the middle of a run.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = self._connect()

    def _connect(self) -> sqlite3.Connection:
        """Create the cache directory and open the database."""
        conn = None
        try:
            # exist_ok tolerates another process creating it first
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
            # Performance optimizations
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS entries (
                    key TEXT PRIMARY KEY,
                    fingerprint TEXT NOT NULL,
                    chunks TEXT NOT NULL
                );
            """)
            conn.commit()
        except (OSError, sqlite3.Error) as e:
            if conn is not None:
                conn.close()
            raise CacheOpenError(self.db_path, e) from e

        logger.debug(f"Opened cache at {self.db_path}")
        return conn

    @property
    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Cache store is closed")
        return self._conn

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Point lookup by absolute path.

        A row whose chunk payload cannot be decoded counts as absent.
        """
        row = self._connection.execute(
            "SELECT fingerprint, chunks FROM entries WHERE key = ?",
            (_storage_key(key),)
        ).fetchone()
        if row is None:
            return None

        fingerprint, payload = row
        try:
            chunks = [EntityChunk.from_dict(item) for item in json.loads(payload)]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.debug(f"Discarding unreadable cache entry for {key}: {e}")
            return None

        return CacheEntry(key=key, fingerprint=fingerprint, chunks=chunks)

    def lookup(self, key: str, fingerprint: str) -> Optional[List[EntityChunk]]:
        """Return cached chunks only if the stored fingerprint still matches."""
        entry = self.get(key)
        if entry is not None and entry.fingerprint == fingerprint:
            return entry.chunks
        return None

    def put(self, key: str, fingerprint: str, chunks: List[EntityChunk]) -> None:
        """Upsert the full entry for `key` (last write wins)."""
        payload = json.dumps([chunk.to_dict() for chunk in chunks])
        conn = self._connection
        with conn:
            conn.execute(
                """
                INSERT INTO entries (key, fingerprint, chunks)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    fingerprint = excluded.fingerprint,
                    chunks = excluded.chunks
                """,
                (_storage_key(key), fingerprint, payload)
            )

    def clear_all(self) -> int:
        """Remove every entry. Returns the number removed."""
        conn = self._connection
        with conn:
            cursor = conn.execute("DELETE FROM entries")
        logger.info(f"Cleared {cursor.rowcount} cache entries")
        return cursor.rowcount

    def clear_subtree(self, path_prefix: str | Path) -> int:
        """
        Remove every entry for a file inside the directory `path_prefix`.

        Keys are visited in sorted order starting at the prefix and the
        scan stops at the first key that no longer starts with it, so this
        is a single range scan. Within that range a key only counts when
        the prefix ends on a path component: clearing `/repo/foo` leaves
        `/repo/foobar/x.py` alone.

        Returns the number of entries removed.
        """
        prefix = _storage_key(_normalize_prefix(str(path_prefix)))
        conn = self._connection

        doomed: List[str] = []
        cursor = conn.execute(
            "SELECT key FROM entries WHERE key >= ? ORDER BY key",
            (prefix,)
        )
        for (key,) in cursor:
            if not key.startswith(prefix):
                break
            if _in_subtree(key, prefix):
                doomed.append(key)
        cursor.close()

        if doomed:
            with conn:
                conn.executemany(
                    "DELETE FROM entries WHERE key = ?",
                    [(k,) for k in doomed]
                )

        logger.info(f"Cleared {len(doomed)} cache entries under {prefix}")
        return len(doomed)

    def count(self) -> int:
        """Number of stored entries."""
        row = self._connection.execute("SELECT COUNT(*) FROM entries").fetchone()
        return row[0]

    def close(self):
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "CacheStore":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def _storage_key(key: str) -> str:
    """
    Make a path key storable as UTF-8 text.

    Undecodable bytes in file names arrive as lone surrogates, which
    sqlite3 refuses to encode; they are stored as backslash escapes.
    """
    return key.encode("utf-8", "backslashreplace").decode("utf-8")


def _separators() -> str:
    return os.sep + (os.altsep or "")


def _normalize_prefix(prefix: str) -> str:
    """Drop trailing separators, keeping a bare filesystem root intact."""
    stripped = prefix.rstrip(_separators())
    return stripped or prefix


def _in_subtree(key: str, prefix: str) -> bool:
    if key == prefix:
        return True
    if prefix and prefix[-1] in _separators():
        return True
    return key[len(prefix)] in _separators()


def open_cache(db_path: Path) -> CacheStore:
    """
    Convenience function to open the cache store.

    Usage:
        with open_cache(config.db_path) as store:
            store.clear_subtree("/home/me/project")
    """
    return CacheStore(db_path)
