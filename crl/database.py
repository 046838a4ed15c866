#!/usr/bin/env python3
"""
Database layer for crl
Handles SQLite storage of clipboard history entries

The daemon and any number of CLI invocations share the same file, so no
connection is kept between calls: every operation opens the file, makes
sure the schema exists, does its work and closes it again.
"""

import logging
import re
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from crl.errors import InvalidArgument, InvalidId, StorageUnavailable
from crl.models import ClipboardEntry
from crl.settings import MAX_LIST_LIMIT

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"[+-]?\d+")

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS entries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        text TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_entries_created
    ON entries(created_at DESC, id DESC)
    """,
)


def clamp_limit(limit: int, low: int = 0, high: int = MAX_LIST_LIMIT) -> int:
    """Force a list limit into [low, high]"""
    return max(low, min(high, limit))


def parse_entry_id(value: Union[int, str]) -> int:
    """
    Validate an entry identifier

    Args:
        value: An int, or a string holding an optionally signed integer

    Returns:
        The identifier as an int

    Raises:
        InvalidId: if the value is not a well-formed integer
    """
    if isinstance(value, bool):
        raise InvalidId(f"invalid entry id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _ID_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise InvalidId(f"invalid entry id: {value!r}")


class ClipboardStore:
    """SQLite store for clipboard entries"""

    def __init__(self, db_path: Union[str, Path], busy_timeout_ms: int = 5000):
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout_ms / 1000.0

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open the database, ensure the schema and commit on success"""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with closing(sqlite3.connect(str(self.db_path), timeout=self.busy_timeout)) as conn:
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA journal_mode=WAL;")
                for statement in SCHEMA:
                    conn.execute(statement)
                with conn:
                    yield conn
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Database unavailable at {self.db_path}: {e}")
            raise StorageUnavailable(f"cannot use history database {self.db_path}: {e}") from e

    def insert(self, text: str) -> int:
        """
        Append one entry; the database assigns id and created_at

        Args:
            text: Clipboard text to store

        Returns:
            The id of the new entry
        """
        if not isinstance(text, str):
            raise InvalidArgument(f"entry text must be a string, got {type(text).__name__}")

        with self._connect() as conn:
            cursor = conn.execute("INSERT INTO entries (text) VALUES (?)", (text,))
            entry_id = cursor.lastrowid

        logger.info(f"Added entry to DB: ID={entry_id}, Length={len(text)}")
        return entry_id

    def latest(self) -> Optional[ClipboardEntry]:
        """Get the most recent entry, or None if the history is empty"""
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, text, created_at
                FROM entries
                ORDER BY created_at DESC, id DESC
                LIMIT 1
                """
            ).fetchone()
        return ClipboardEntry.from_row(row) if row else None

    def list(self, limit: int) -> List[ClipboardEntry]:
        """
        Get entries newest-first

        Args:
            limit: Maximum number of entries; clamped into [0, 50]

        Returns:
            Up to limit entries ordered by created_at descending
        """
        limit = clamp_limit(int(limit))
        if limit == 0:
            return []

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, text, created_at
                FROM entries
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [ClipboardEntry.from_row(row) for row in rows]

    def get(self, entry_id: Union[int, str]) -> Optional[ClipboardEntry]:
        """Get a single entry by id"""
        entry_id = parse_entry_id(entry_id)
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, text, created_at FROM entries WHERE id = ?",
                (entry_id,),
            ).fetchone()
        return ClipboardEntry.from_row(row) if row else None

    def count(self) -> int:
        """Get total count of stored entries"""
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS count FROM entries").fetchone()
        return row["count"]

    def clear(self) -> int:
        """Delete every entry and return how many were removed"""
        with self._connect() as conn:
            removed = conn.execute("DELETE FROM entries").rowcount
        logger.info(f"Cleared history: {removed} entries removed")
        return removed
