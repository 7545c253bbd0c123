"""Database operations for redirectfinder.

This module provides SQLite-based persistence for probe statuses,
reference codes and proposed redirects. Uses WAL mode so the database can
be inspected while a run is writing to it.
"""

import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from redirectfinder.core.constants import UrlCategory
from redirectfinder.core.exceptions import StorageError
from redirectfinder.core.models import ErrorRecord, RedirectRecord, ReferenceCode
from redirectfinder.storage.migrations import m001_initial_schema
from redirectfinder.storage.migrations.runner import MigrationRunner


logger = logging.getLogger(__name__)

# Reference table per category
CODE_TABLES: dict[UrlCategory, str] = {
    UrlCategory.PRODUCT: "products",
    UrlCategory.CATALOG: "catalog",
}


class Database:
    """SQLite database manager for redirectfinder.

    Holds the probe status of every failing URL, the two reference code
    sets and the redirects produced by the resolution sweep. Every
    sqlite3 error is re-raised as StorageError.
    """

    def __init__(self, db_path: Path):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._migrations = MigrationRunner()
        self._migrations.register(
            1, "initial_schema", m001_initial_schema.up, m001_initial_schema.down
        )

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection.

        Returns:
            SQLite connection with row factory
        """
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
        return self._conn

    def init_db(self) -> None:
        """Bring the schema up to date.

        Raises:
            StorageError: If migration fails
        """
        try:
            self._migrations.migrate(self._get_connection())
        except (sqlite3.Error, RuntimeError) as e:
            raise StorageError(f"Failed to initialize database: {e}") from e

    def reset(self) -> None:
        """Drop all data and recreate an empty schema.

        Raises:
            StorageError: If the schema cannot be rebuilt
        """
        try:
            conn = self._get_connection()
            self._migrations.rollback_all(conn)
            self._migrations.migrate(conn)
            logger.info(f"Database reset: {self.db_path}")
        except (sqlite3.Error, RuntimeError) as e:
            raise StorageError(f"Failed to reset database: {e}") from e

    # ------------------------------------------------------------------
    # URL statuses
    # ------------------------------------------------------------------

    def upsert_urls(self, urls: Iterable[str]) -> int:
        """Register URLs without touching existing rows.

        Args:
            urls: URLs to register

        Returns:
            Number of rows newly inserted

        Raises:
            StorageError: If insert fails
        """
        try:
            conn = self._get_connection()
            with conn:
                cursor = conn.executemany(
                    "INSERT OR IGNORE INTO url_status (url) VALUES (?)",
                    ((url,) for url in urls),
                )
            inserted = cursor.rowcount
            logger.info(f"Registered {inserted} URLs")
            return inserted
        except sqlite3.Error as e:
            raise StorageError(f"Failed to register URLs: {e}") from e

    def update_status(
        self,
        url: str,
        status: int,
        final_url: Optional[str] = None,
    ) -> None:
        """Store the probe outcome of a URL, inserting it if unknown.

        Args:
            url: Probed URL
            status: HTTP status code
            final_url: Effective URL after redirects, if different

        Raises:
            StorageError: If update fails
        """
        try:
            conn = self._get_connection()
            with conn:
                conn.execute("""
                    INSERT INTO url_status (url, status, final_url)
                    VALUES (?, ?, ?)
                    ON CONFLICT(url) DO UPDATE SET
                        status = excluded.status,
                        final_url = excluded.final_url
                """, (url, status, final_url))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to update status for {url}: {e}") from e

    def get_all_urls(self) -> list[ErrorRecord]:
        """Get every registered URL in insertion order.

        Raises:
            StorageError: If query fails
        """
        try:
            conn = self._get_connection()
            rows = conn.execute(
                "SELECT url, status, final_url FROM url_status ORDER BY rowid"
            ).fetchall()
            return [self._row_to_error(row) for row in rows]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list URLs: {e}") from e

    def query_by_min_status(self, threshold: int) -> list[ErrorRecord]:
        """Get URLs whose status is at least the threshold.

        Args:
            threshold: Minimum HTTP status

        Returns:
            ErrorRecords in insertion order; URLs without a status are
            never included

        Raises:
            StorageError: If query fails
        """
        try:
            conn = self._get_connection()
            rows = conn.execute("""
                SELECT url, status, final_url FROM url_status
                WHERE status IS NOT NULL AND status >= ?
                ORDER BY rowid
            """, (threshold,)).fetchall()
            return [self._row_to_error(row) for row in rows]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to query URLs by status: {e}") from e

    @staticmethod
    def _row_to_error(row: sqlite3.Row) -> ErrorRecord:
        return ErrorRecord(
            url=row["url"],
            status=row["status"],
            final_url=row["final_url"],
        )

    # ------------------------------------------------------------------
    # Reference codes
    # ------------------------------------------------------------------

    def insert_codes(self, category: UrlCategory, codes: Iterable[str]) -> int:
        """Insert reference codes for a category, ignoring duplicates.

        Args:
            category: Category the codes belong to
            codes: Codes to insert

        Returns:
            Number of rows newly inserted

        Raises:
            StorageError: If insert fails
        """
        table = CODE_TABLES[category]
        try:
            conn = self._get_connection()
            with conn:
                cursor = conn.executemany(
                    f"INSERT OR IGNORE INTO {table} (code) VALUES (?)",
                    ((code,) for code in codes),
                )
            inserted = cursor.rowcount
            logger.info(f"Inserted {inserted} codes into {table}")
            return inserted
        except sqlite3.Error as e:
            raise StorageError(f"Failed to insert {category.value} codes: {e}") from e

    def query_all_codes(self, category: UrlCategory) -> list[ReferenceCode]:
        """Get every reference code of a category in insertion order.

        Raises:
            StorageError: If query fails
        """
        table = CODE_TABLES[category]
        try:
            conn = self._get_connection()
            rows = conn.execute(f"SELECT code FROM {table} ORDER BY rowid").fetchall()
            return [ReferenceCode(code=row["code"]) for row in rows]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {category.value} codes: {e}") from e

    # ------------------------------------------------------------------
    # Redirects
    # ------------------------------------------------------------------

    def insert_redirects(self, records: Iterable[RedirectRecord]) -> int:
        """Insert redirect records in a single transaction.

        Args:
            records: Records to insert

        Returns:
            Number of rows inserted

        Raises:
            StorageError: If insert fails
        """
        try:
            conn = self._get_connection()
            with conn:
                cursor = conn.executemany(
                    "INSERT INTO redirects (from_url, to_url, percent) VALUES (?, ?, ?)",
                    ((r.source, r.target, r.percent) for r in records),
                )
            inserted = cursor.rowcount
            logger.info(f"Inserted {inserted} redirects")
            return inserted
        except sqlite3.Error as e:
            raise StorageError(f"Failed to insert redirects: {e}") from e

    def query_redirects_by_min_percent(self, min_percent: float) -> list[RedirectRecord]:
        """Get redirects with at least the given confidence.

        Args:
            min_percent: Minimum confidence (0-100)

        Returns:
            RedirectRecords ordered by percent DESC, then insertion order

        Raises:
            StorageError: If query fails
        """
        try:
            conn = self._get_connection()
            rows = conn.execute("""
                SELECT from_url, to_url, percent FROM redirects
                WHERE percent >= ?
                ORDER BY percent DESC, id
            """, (min_percent,)).fetchall()
            return [
                RedirectRecord(
                    source=row["from_url"],
                    target=row["to_url"],
                    percent=row["percent"],
                )
                for row in rows
            ]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to query redirects: {e}") from e

    def count_redirects(self) -> int:
        """Count stored redirects.

        Raises:
            StorageError: If query fails
        """
        try:
            conn = self._get_connection()
            return conn.execute("SELECT COUNT(*) FROM redirects").fetchone()[0]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to count redirects: {e}") from e

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
