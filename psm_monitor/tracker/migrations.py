"""SQLite schema migrations for the fee store."""

import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from psm_monitor.tracker.errors import MigrationError


logger = structlog.get_logger()


@dataclass(frozen=True)
class Migration:
    """One forward-only schema step."""

    version: int
    description: str
    sql: str


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version=1,
        description="Fee records table with low/high figures per network",
        sql="""
CREATE TABLE IF NOT EXISTS fee_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tracked_at TEXT NOT NULL,
    tron_low_price REAL,
    tron_high_price REAL,
    eth_low_price REAL,
    eth_high_price REAL,
    bsc_low_price REAL,
    bsc_high_price REAL,
    polygon_low_price REAL,
    polygon_high_price REAL,
    avalanche_low_price REAL,
    avalanche_high_price REAL,
    solana_low_price REAL,
    solana_high_price REAL
);
CREATE INDEX IF NOT EXISTS idx_fee_records_tracked_at ON fee_records(tracked_at);
""",
    ),
)

CURRENT_VERSION = MIGRATIONS[-1].version


def pending_migrations(version: int) -> list[Migration]:
    """Migrations newer than ``version``, oldest first."""
    return [m for m in MIGRATIONS if m.version > version]


class MigrationManager:
    """Brings a fee database up to CURRENT_VERSION.

    Applied versions are recorded in a ``schema_version`` table so that
    reopening a database only runs the steps it is missing.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        self._log = logger.bind(component="store", operation="migration")

    def current_version(self) -> int:
        """Highest applied version, 0 for a fresh database."""
        self._conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_version ("
            "version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL, description TEXT)"
        )
        self._conn.commit()
        (version,) = self._conn.execute(
            "SELECT COALESCE(MAX(version), 0) FROM schema_version"
        ).fetchone()
        return int(version)

    def migrate(self) -> list[int]:
        """Apply every pending migration.

        Returns:
            Versions applied by this call.

        Raises:
            MigrationError: If a step fails; it is rolled back.
        """
        applied: list[int] = []

        for migration in pending_migrations(self.current_version()):
            self._log.info(
                "applying_migration",
                version=migration.version,
                description=migration.description,
            )
            try:
                self._conn.executescript(migration.sql)
                self._conn.execute(
                    "INSERT INTO schema_version (version, applied_at, description) "
                    "VALUES (?, ?, ?)",
                    (
                        migration.version,
                        datetime.now(UTC).isoformat(),
                        migration.description,
                    ),
                )
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                self._log.error(
                    "migration_failed", version=migration.version, error=str(e)
                )
                raise MigrationError(migration.version, str(e)) from e

            applied.append(migration.version)

        return applied
