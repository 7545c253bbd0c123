"""Database migration runner."""

import hashlib
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class Migration:
    version: int
    name: str
    up: Callable[[sqlite3.Connection], None]
    down: Optional[Callable[[sqlite3.Connection], None]] = None

    @property
    def checksum(self) -> str:
        return hashlib.sha256(f"{self.version}{self.name}".encode()).hexdigest()[:16]


class MigrationRunner:

    def __init__(self) -> None:
        self._migrations: list[Migration] = []

    def register(
        self,
        version: int,
        name: str,
        up: Callable[[sqlite3.Connection], None],
        down: Optional[Callable[[sqlite3.Connection], None]] = None,
    ) -> None:
        if any(m.version == version for m in self._migrations):
            raise ValueError(f"Migration version {version} registered twice")
        self._migrations.append(Migration(version, name, up, down))
        self._migrations.sort(key=lambda m: m.version)

    def _init_tracking_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                checksum TEXT NOT NULL,
                applied_at TEXT NOT NULL
            )
        """)
        conn.commit()

    def current_version(self, conn: sqlite3.Connection) -> int:
        try:
            row = conn.execute("SELECT MAX(version) FROM schema_migrations").fetchone()
            return row[0] if row and row[0] else 0
        except sqlite3.OperationalError:
            return 0

    def migrate(self, conn: sqlite3.Connection) -> list[Migration]:
        """Apply every registered migration newer than the database."""
        self._init_tracking_table(conn)
        current = self.current_version(conn)
        pending = [m for m in self._migrations if m.version > current]

        if not pending:
            logger.debug("No pending migrations")
            return []

        for migration in pending:
            logger.info(f"Applying migration {migration.version}: {migration.name}")
            try:
                migration.up(conn)
                conn.execute(
                    """
                    INSERT INTO schema_migrations (version, name, checksum, applied_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        migration.version,
                        migration.name,
                        migration.checksum,
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Migration {migration.version} failed: {e}")
                raise

        return pending

    def rollback_all(self, conn: sqlite3.Connection) -> list[Migration]:
        """Undo every applied migration, newest first."""
        self._init_tracking_table(conn)
        current = self.current_version(conn)
        applied = [m for m in reversed(self._migrations) if m.version <= current]

        for migration in applied:
            if migration.down is None:
                raise RuntimeError(f"Migration {migration.version} has no rollback")

            logger.info(f"Rolling back migration {migration.version}: {migration.name}")
            try:
                migration.down(conn)
                conn.execute(
                    "DELETE FROM schema_migrations WHERE version = ?",
                    (migration.version,),
                )
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Rollback of {migration.version} failed: {e}")
                raise

        return applied
