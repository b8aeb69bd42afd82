"""SQLite storage of viewed articles for czytaj."""

import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click

from .models import ViewedRecord

logger = logging.getLogger(__name__)

APP_NAME = "czytaj"
DB_FILENAME = "articles.db"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS viewed_articles (
    article_url TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    viewed_at TIMESTAMP
);
"""


def default_db_path() -> Path:
    """Return the per-user location of the viewed-articles database."""
    return Path(click.get_app_dir(APP_NAME)) / DB_FILENAME


class ViewedStore:
    """Durable record of the articles a user has opened.

    URLs are matched exactly: no normalization of trailing slashes, scheme
    case or query order is performed.

    A single connection is shared by every caller and guarded by a lock, so
    one instance may be used from several threads. Each operation commits
    before the lock is released.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Open the store, creating its directory and table if missing.

        Args:
            db_path: Path to the SQLite database file. Defaults to the
                per-user application data directory.

        Raises:
            StoreError: If the database cannot be created or opened
        """
        self.db_path = Path(db_path) if db_path else default_db_path()
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self) -> None:
        """Create the database file and table if they don't exist."""
        conn = None
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        except (OSError, sqlite3.Error) as e:
            if conn is not None:
                conn.close()
            raise StoreError(f"Failed to open database at {self.db_path}", e) from e
        self._conn = conn
        logger.debug("Opened viewed-articles database at %s", self.db_path)

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("Database is closed")
        return self._conn

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "ViewedStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def mark_viewed(self, url: str, title: str) -> None:
        """Record that an article was opened.

        Inserts a new record, or overwrites the title and timestamp of an
        existing one.

        Args:
            url: The article's URL
            title: The article's current title

        Raises:
            StoreError: If the write fails
        """
        viewed_at = datetime.now(timezone.utc).isoformat()
        with self._lock:
            conn = self._get_conn()
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT OR REPLACE INTO viewed_articles (article_url, title, viewed_at)
                        VALUES (?, ?, ?)
                        """,
                        (url, title, viewed_at),
                    )
            except sqlite3.Error as e:
                logger.error("Failed to mark %s as viewed: %s", url, e)
                raise StoreError(f"Failed to mark article as viewed: {url}", e) from e

    def is_viewed(self, url: str) -> bool:
        """Check whether an article with exactly this URL was opened.

        Args:
            url: The article's URL

        Returns:
            True if a record exists, False otherwise

        Raises:
            StoreError: If the query fails
        """
        row = self._fetchone("SELECT 1 FROM viewed_articles WHERE article_url = ?", (url,))
        return row is not None

    def get_viewed(self, url: str) -> Optional[ViewedRecord]:
        """Get the record for an article.

        Args:
            url: The article's URL

        Returns:
            ViewedRecord or None if the article was never opened
        """
        row = self._fetchone("SELECT * FROM viewed_articles WHERE article_url = ?", (url,))
        return self._row_to_record(row) if row else None

    def list_viewed(self) -> list[str]:
        """List the URLs of all opened articles, most recently viewed first.

        Raises:
            StoreError: If the query fails
        """
        return [record.article_url for record in self.list_viewed_records()]

    def list_viewed_records(self) -> list[ViewedRecord]:
        """List all viewed records, most recently viewed first."""
        # A replaced row gets a new rowid, so equal timestamps fall back to
        # the order of the writes.
        rows = self._fetchall(
            "SELECT * FROM viewed_articles ORDER BY viewed_at DESC, rowid DESC"
        )
        return [self._row_to_record(row) for row in rows]

    def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            conn = self._get_conn()
            try:
                return conn.execute(query, params).fetchone()
            except sqlite3.Error as e:
                raise StoreError("Failed to query viewed articles", e) from e

    def _fetchall(self, query: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            conn = self._get_conn()
            try:
                return conn.execute(query, params).fetchall()
            except sqlite3.Error as e:
                raise StoreError("Failed to query viewed articles", e) from e

    def _row_to_record(self, row: sqlite3.Row) -> ViewedRecord:
        """Convert a database row to a ViewedRecord object."""
        return ViewedRecord(
            article_url=row["article_url"],
            title=row["title"],
            viewed_at=self._parse_datetime(row["viewed_at"]),
        )

    @staticmethod
    def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
        """Parse a datetime string from the database."""
        if value is None:
            return None
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            return None


class StoreError(Exception):
    """Raised when the viewed-articles database cannot be read or written."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
